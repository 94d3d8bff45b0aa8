"""
Shared fixtures: an in-memory SQLite database, the FastAPI test client and
one logged-in user per role.
"""

import os
import tempfile

# Configure before stockpos.config is imported
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('SECRET_KEY', 'test-secret')
os.environ.setdefault('EXPORT_DIR', tempfile.mkdtemp(prefix='stockpos-exports-'))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import stockpos.models  # noqa: F401
from stockpos.database import Base, get_db
from stockpos.main import app
from stockpos.populate_db import seed
from stockpos.repository import SqlAlchemyRepository
from stockpos.services.store import InMemoryRepository
from stockpos.utils.tokenJWT import create_access_token

ADMIN_EMAIL = 'admin@system.com'
STOCK_EMAIL = 'stock@company.com'
CASHIER_EMAIL = 'cashier@company.com'


@pytest.fixture(scope='function')
def engine():
    """Fresh in-memory database per test; StaticPool keeps one connection."""
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope='function')
def session(engine):
    """Database session seeded with the demo dataset."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    seed(session)
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def sql_repo(session):
    return SqlAlchemyRepository(session)


@pytest.fixture(scope='function')
def repo():
    """In-memory repository with the demo dataset (ids 1/2/3 = admin/stock/cashier)."""
    return InMemoryRepository.seeded()


@pytest.fixture(scope='function')
def admin(repo):
    return repo.get('user', 1)


@pytest.fixture(scope='function')
def stock_manager(repo):
    return repo.get('user', 2)


@pytest.fixture(scope='function')
def cashier(repo):
    return repo.get('user', 3)


@pytest.fixture(scope='function')
def client(session):
    """Test client sharing the test session with the app."""
    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(email):
    token = create_access_token(data={'sub': email})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_EMAIL)


@pytest.fixture
def stock_headers():
    return auth_headers(STOCK_EMAIL)


@pytest.fixture
def cashier_headers():
    return auth_headers(CASHIER_EMAIL)
