"""
Unit tests for the SQLAlchemy repository and the workflow running on it.
"""

from datetime import date, datetime, timezone

import pytest

from stockpos.enums import EntityType
from stockpos.exceptions import ConflictError, InsufficientStockError, InvalidStateError
from stockpos.models import Product, StockMovement, Validation
from stockpos.services.lifecycle import request_delete, resolve_validation
from stockpos.services.periods import day_bounds, period_range
from stockpos.services.sales import create_sale
from stockpos.services.stock_ledger import apply_movement
from stockpos.services.store import utcnow
from stockpos.exceptions import ValidationInputError


class TestSqlAlchemyRepository:

    def test_get_and_list(self, sql_repo):
        assert sql_repo.get('user', 1).email == 'admin@system.com'
        assert sql_repo.get('product', 999) is None
        names = [c.name for c in sql_repo.list('category', status='active')]
        assert names == ['Computers', 'Accessories', 'Printers']

    def test_conditional_update(self, sql_repo):
        product = sql_repo.update('product', 1, {'stock_quantity': 14}, expected={'stock_quantity': 15})
        assert product.stock_quantity == 14

        with pytest.raises(ConflictError):
            sql_repo.update('product', 1, {'stock_quantity': 13}, expected={'stock_quantity': 15})
        assert sql_repo.get('product', 1).stock_quantity == 14

    def test_atomic_rolls_back_everything(self, sql_repo, session):
        with pytest.raises(RuntimeError):
            with sql_repo.atomic():
                sql_repo.update('product', 1, {'stock_quantity': 1})
                sql_repo.insert('stock_movement', product_id=1, user_id=1, type='loss',
                                quantity=14, created_at=utcnow())
                raise RuntimeError('boom')

        assert session.get(Product, 1).stock_quantity == 15
        assert session.query(StockMovement).count() == 0

    def test_one_open_validation_per_target_is_enforced_by_the_database(self, sql_repo, session):
        values = dict(target_type='category', target_id=1, action='deletion', status='pending',
                      requested_by=2, requested_at=utcnow())
        with sql_repo.atomic():
            sql_repo.insert('validation', **values)
        with pytest.raises(ConflictError):
            with sql_repo.atomic():
                sql_repo.insert('validation', **values)

        # Resolved requests do not count
        with sql_repo.atomic():
            sql_repo.insert('validation', **dict(values, status='rejected'))
        assert session.query(Validation).count() == 2


class TestWorkflowOnDatabase:

    def test_request_and_approve(self, sql_repo):
        stock_manager, admin = sql_repo.get('user', 2), sql_repo.get('user', 1)
        validation = request_delete(sql_repo, stock_manager, EntityType.PRODUCT, 2)
        assert sql_repo.get('product', 2).status == 'pending_deletion'

        with pytest.raises(InvalidStateError):
            request_delete(sql_repo, stock_manager, EntityType.PRODUCT, 2)

        resolve_validation(sql_repo, admin, validation.id, 'approve')
        assert sql_repo.get('product', 2).status == 'deleted'
        assert sql_repo.get('validation', validation.id).status == 'approved'

    def test_sale_rollback_on_database(self, sql_repo, session):
        cashier = sql_repo.get('user', 3)
        with pytest.raises(InsufficientStockError):
            create_sale(sql_repo, cashier, [
                {'product_id': 1, 'quantity': 2},
                {'product_id': 2, 'quantity': 4},
            ])
        assert session.get(Product, 1).stock_quantity == 15
        assert sql_repo.list('sale') == []

    def test_movement_on_database(self, sql_repo):
        entry = apply_movement(sql_repo, sql_repo.get('user', 2), 2, 'return', 2)
        assert entry.product.stock_quantity == 5
        assert entry.movement.id is not None
        assert entry.low_stock is True


class TestPeriods:

    def test_named_periods(self):
        today = date(2026, 3, 18)
        lower, upper = period_range('today', today=today)
        assert lower == datetime(2026, 3, 18, tzinfo=timezone.utc)
        assert upper == datetime(2026, 3, 19, tzinfo=timezone.utc)

        lower, _ = period_range('week', today=today)
        assert lower.date() == date(2026, 3, 11)

        lower, upper = period_range('month', today=today)
        assert lower.date() == date(2026, 3, 1)
        assert upper.date() == date(2026, 3, 19)

    def test_custom_period(self):
        lower, upper = period_range('custom', date(2026, 1, 1), date(2026, 1, 31))
        assert (lower.date(), upper.date()) == (date(2026, 1, 1), date(2026, 2, 1))
        with pytest.raises(ValidationInputError):
            period_range('custom', date(2026, 1, 1))
        with pytest.raises(ValidationInputError):
            day_bounds(date(2026, 2, 1), date(2026, 1, 1))
        with pytest.raises(ValidationInputError):
            period_range('year')
