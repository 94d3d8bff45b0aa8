# stockpos/repository.py
from contextlib import contextmanager

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stockpos.database import get_db
from stockpos.exceptions import ConflictError
from stockpos.models import Category, Product, Sale, SaleItem, StockMovement, User, Validation

MODELS = {
    "user": User,
    "category": Category,
    "product": Product,
    "sale": Sale,
    "sale_item": SaleItem,
    "stock_movement": StockMovement,
    "validation": Validation,
}


class SqlAlchemyRepository:
    """Repository over a SQLAlchemy session.

    Writes are flushed immediately; the outermost ``atomic()`` block commits or
    rolls back everything done inside it.
    """

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    def _model(self, kind):
        try:
            return MODELS[kind]
        except KeyError:
            raise KeyError(f"Unknown kind '{kind}'")

    def get(self, kind, entity_id):
        return self.session.get(self._model(kind), entity_id)

    def list(self, kind, **filters):
        model = self._model(kind)
        return self.session.query(model).filter_by(**filters).order_by(model.id.asc()).all()

    def insert(self, kind, **values):
        model = self._model(kind)
        values = {k: v for k, v in values.items() if hasattr(model, k)}
        obj = model(**values)
        self.session.add(obj)
        try:
            self.session.flush()
        except IntegrityError as exc:
            raise ConflictError(f"Could not store {kind}: {exc.orig}") from exc
        return obj

    def update(self, kind, entity_id, changes, expected=None):
        model = self._model(kind)
        if expected:
            # Conditional write: UPDATE ... WHERE id = :id AND <expected>
            query = self.session.query(model).filter(model.id == entity_id)
            for field, value in expected.items():
                query = query.filter(getattr(model, field) == value)
            rows = query.update(changes, synchronize_session="fetch")
            if rows == 0:
                raise ConflictError(f"{kind} {entity_id} was modified concurrently")
            obj = self.session.get(model, entity_id)
            self.session.refresh(obj)
            return obj

        obj = self.session.get(model, entity_id)
        if obj is None:
            raise ConflictError(f"{kind} {entity_id} disappeared")
        for field, value in changes.items():
            setattr(obj, field, value)
        self.session.flush()
        return obj

    @contextmanager
    def atomic(self):
        self._depth += 1
        try:
            yield self
            if self._depth == 1:
                self.session.commit()
        except Exception:
            if self._depth == 1:
                self.session.rollback()
            raise
        finally:
            self._depth -= 1


def get_repo(db: Session = Depends(get_db)) -> SqlAlchemyRepository:
    return SqlAlchemyRepository(db)
