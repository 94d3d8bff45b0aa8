# stockpos/populate_db.py
"""Seed the database with the demo accounts, categories and products.

    python -m stockpos.populate_db

Every account gets the password ``password123``.
"""
import logging

from sqlalchemy.orm import Session

from stockpos.database import SessionLocal, init_db
from stockpos.models import Category, Product, StoreSettings, User
from stockpos.services.store import DEMO_CATEGORIES, DEMO_PRODUCTS, DEMO_USERS
from stockpos.utils.hashing import get_password_hash

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"


def seed(session: Session, password: str = DEMO_PASSWORD) -> dict:
    """Insert whatever part of the demo dataset is missing. Safe to rerun."""
    created = {"users": 0, "categories": 0, "products": 0}
    password_hash = get_password_hash(password)

    users = {}
    for data in DEMO_USERS:
        user = session.query(User).filter(User.email == data["email"]).first()
        if user is None:
            user = User(password_hash=password_hash, status="active", **data)
            session.add(user)
            session.flush()
            created["users"] += 1
        users[data["email"]] = user

    # Demo rows reference users/categories by their position in the lists above
    user_ids = [users[d["email"]].id for d in DEMO_USERS]

    categories = []
    for data in DEMO_CATEGORIES:
        category = session.query(Category).filter(Category.name == data["name"]).first()
        if category is None:
            fields = dict(data, owner_id=user_ids[data["owner_id"] - 1])
            category = Category(status="active", **fields)
            session.add(category)
            session.flush()
            created["categories"] += 1
        categories.append(category)

    for data in DEMO_PRODUCTS:
        if session.query(Product).filter(Product.name == data["name"]).first() is not None:
            continue
        fields = dict(
            data,
            owner_id=user_ids[data["owner_id"] - 1],
            category_id=categories[data["category_id"] - 1].id,
        )
        session.add(Product(status="active", **fields))
        created["products"] += 1

    if session.query(StoreSettings).first() is None:
        session.add(StoreSettings())

    session.commit()
    logger.info("Demo data seeded: %s", created)
    return created


def main():
    logging.basicConfig(level=logging.INFO)
    init_db()
    session = SessionLocal()
    try:
        created = seed(session)
    finally:
        session.close()
    print(f"Seeded {created['users']} users, {created['categories']} categories, "
          f"{created['products']} products (password: {DEMO_PASSWORD})")


if __name__ == "__main__":
    main()
