# stockpos/services/store.py
"""
Storage boundary of the business-rule core.

Services only talk to a ``Repository``; ``stockpos.repository`` backs it with
SQLAlchemy, ``InMemoryRepository`` below keeps everything in dictionaries (the
demo/mock backend and the fast path for unit tests).
"""
import copy
from contextlib import contextmanager
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, ContextManager, Dict, List, Optional, Protocol

from stockpos.exceptions import ConflictError

KINDS = (
    "user",
    "category",
    "product",
    "sale",
    "sale_item",
    "stock_movement",
    "validation",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Repository(Protocol):
    def get(self, kind: str, entity_id: int) -> Optional[Any]: ...

    def list(self, kind: str, **filters) -> List[Any]: ...

    def insert(self, kind: str, **values) -> Any: ...

    def update(
        self, kind: str, entity_id: int, changes: Dict[str, Any], expected: Optional[Dict[str, Any]] = None
    ) -> Any: ...

    def atomic(self) -> ContextManager["Repository"]: ...


class InMemoryRepository:
    """Dictionary-backed repository with snapshot rollback."""

    def __init__(self):
        self._rows: Dict[str, Dict[int, SimpleNamespace]] = {kind: {} for kind in KINDS}
        self._next_id: Dict[str, int] = {kind: 1 for kind in KINDS}
        self._depth = 0

    def _table(self, kind):
        if kind not in self._rows:
            raise KeyError(f"Unknown kind '{kind}'")
        return self._rows[kind]

    def get(self, kind, entity_id):
        return self._table(kind).get(entity_id)

    def list(self, kind, **filters):
        rows = sorted(self._table(kind).values(), key=lambda r: r.id)
        return [r for r in rows if all(getattr(r, k, None) == v for k, v in filters.items())]

    def insert(self, kind, **values):
        table = self._table(kind)
        if "id" in values:
            row_id = values.pop("id")
            self._next_id[kind] = max(self._next_id[kind], row_id + 1)
        else:
            row_id = self._next_id[kind]
            self._next_id[kind] += 1
        values.setdefault("created_at", utcnow())
        row = SimpleNamespace(id=row_id, **values)
        table[row_id] = row
        return row

    def update(self, kind, entity_id, changes, expected=None):
        row = self._table(kind).get(entity_id)
        if row is None:
            raise ConflictError(f"{kind} {entity_id} disappeared")
        if expected and any(getattr(row, k, None) != v for k, v in expected.items()):
            raise ConflictError(f"{kind} {entity_id} was modified concurrently")
        for key, value in changes.items():
            setattr(row, key, value)
        return row

    @contextmanager
    def atomic(self):
        if self._depth:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        snapshot = copy.deepcopy((self._rows, self._next_id))
        self._depth = 1
        try:
            yield self
        except Exception:
            self._restore(snapshot)
            raise
        finally:
            self._depth = 0

    def _restore(self, snapshot):
        rows, next_id = snapshot
        # Mutate in place so references handed out earlier see the rollback
        for kind, table in rows.items():
            live = self._rows[kind]
            for row_id in list(live):
                if row_id not in table:
                    del live[row_id]
            for row_id, saved in table.items():
                if row_id in live:
                    live[row_id].__dict__.clear()
                    live[row_id].__dict__.update(saved.__dict__)
                else:
                    live[row_id] = saved
        self._next_id = next_id

    @classmethod
    def seeded(cls, password_hash: str = "") -> "InMemoryRepository":
        """Demo dataset: one user per role, three categories, two products."""
        repo = cls()
        for user in DEMO_USERS:
            repo.insert("user", password_hash=password_hash, status="active", last_login=None, **user)
        for category in DEMO_CATEGORIES:
            repo.insert("category", status="active", **category)
        for product in DEMO_PRODUCTS:
            repo.insert("product", status="active", image_url=None, **product)
        return repo


DEMO_USERS = [
    {"email": "admin@system.com", "first_name": "Super", "last_name": "Admin", "role": "admin"},
    {"email": "stock@company.com", "first_name": "John", "last_name": "Doe", "role": "stock_manager"},
    {"email": "cashier@company.com", "first_name": "Jane", "last_name": "Smith", "role": "cashier"},
]

DEMO_CATEGORIES = [
    {"name": "Computers", "description": "Desktops and laptops", "owner_id": 1},
    {"name": "Accessories", "description": "Peripherals and accessories", "owner_id": 1},
    {"name": "Printers", "description": "Printers and scanners", "owner_id": 1},
]

DEMO_PRODUCTS = [
    {
        "name": "Dell XPS 13", "description": "Business laptop",
        "buy_price": 800.0, "sell_price": 1200.0, "stock_quantity": 15, "min_stock": 5,
        "category_id": 1, "owner_id": 2,
    },
    {
        "name": "Logitech MX Mouse", "description": "Ergonomic wireless mouse",
        "buy_price": 45.0, "sell_price": 80.0, "stock_quantity": 3, "min_stock": 10,
        "category_id": 2, "owner_id": 2,
    },
]
