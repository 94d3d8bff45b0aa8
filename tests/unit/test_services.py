"""
Unit tests for the sales, catalog and user services.
"""

import pytest

from stockpos.enums import EntityType
from stockpos.exceptions import (
    InsufficientStockError, InvalidStateError, NotFoundError, PermissionDeniedError,
    ValidationInputError,
)
from stockpos.services.catalog import (
    create_category, create_product, update_category, update_product,
)
from stockpos.services.lifecycle import delete_direct, request_delete, resolve_validation
from stockpos.services.sales import create_sale, sale_lines
from stockpos.services.users import create_user, find_by_email, update_user


class TestCreateSale:

    def test_sale_records_lines_totals_and_stock(self, repo, cashier):
        sale = create_sale(
            repo, cashier,
            [{'product_id': 1, 'quantity': 2}, {'product_id': 2, 'quantity': 1, 'unit_price': 75}],
            discount_percent=10, tax_percent=20, payment_method='card',
        )
        assert sale.status == 'valid'
        assert sale.cashier_id == cashier.id
        assert sale.payment_method == 'card'
        # (2 * 1200 + 75) = 2475, -10% = 2227.50, +20% = 2673.00
        assert sale.subtotal == 2475.0
        assert sale.discount_amount == 247.5
        assert sale.net_before_tax == 2227.5
        assert sale.tax_amount == 445.5
        assert sale.grand_total == 2673.0

        lines = sale_lines(repo, sale.id)
        assert [(l.product_id, l.quantity, l.unit_price, l.line_total) for l in lines] == [
            (1, 2, 1200.0, 2400.0),
            (2, 1, 75.0, 75.0),
        ]

        assert repo.get('product', 1).stock_quantity == 13
        assert repo.get('product', 2).stock_quantity == 2
        movements = repo.list('stock_movement')
        assert [(m.product_id, m.type, m.quantity) for m in movements] == [(1, 'out', 2), (2, 'out', 1)]
        assert movements[0].comment == f'Sale #{sale.id}'

    def test_insufficient_stock_rolls_back_whole_sale(self, repo, cashier):
        with pytest.raises(InsufficientStockError):
            create_sale(repo, cashier, [
                {'product_id': 1, 'quantity': 1},
                {'product_id': 2, 'quantity': 50},
            ])
        assert repo.list('sale') == []
        assert repo.list('sale_item') == []
        assert repo.list('stock_movement') == []
        assert repo.get('product', 1).stock_quantity == 15

    def test_stock_manager_cannot_sell(self, repo, stock_manager):
        with pytest.raises(PermissionDeniedError):
            create_sale(repo, stock_manager, [{'product_id': 1, 'quantity': 1}])

    def test_empty_basket(self, repo, cashier):
        with pytest.raises(ValidationInputError):
            create_sale(repo, cashier, [])

    def test_unknown_payment_method(self, repo, cashier):
        with pytest.raises(ValidationInputError) as info:
            create_sale(repo, cashier, [{'product_id': 1, 'quantity': 1}], payment_method='cheque')
        assert info.value.field == 'payment_method'

    def test_discount_capped_by_store_settings(self, repo, cashier):
        with pytest.raises(ValidationInputError):
            create_sale(repo, cashier, [{'product_id': 1, 'quantity': 1}],
                        discount_percent=15, max_discount_percent=10)

    def test_products_pending_deletion_cannot_be_sold(self, repo, cashier, stock_manager):
        request_delete(repo, stock_manager, EntityType.PRODUCT, 1)
        with pytest.raises(InvalidStateError):
            create_sale(repo, cashier, [{'product_id': 1, 'quantity': 1}])

    def test_unknown_product(self, repo, cashier):
        with pytest.raises(NotFoundError):
            create_sale(repo, cashier, [{'product_id': 99, 'quantity': 1}])


class TestCatalog:

    def test_create_category_sets_owner(self, repo, stock_manager):
        category = create_category(repo, stock_manager, '  Monitors ', 'Screens')
        assert category.name == 'Monitors'
        assert category.owner_id == stock_manager.id
        assert category.status == 'active'

    def test_empty_name_rejected(self, repo, admin):
        with pytest.raises(ValidationInputError) as info:
            create_category(repo, admin, '   ')
        assert info.value.field == 'name'

    def test_cashier_cannot_create(self, repo, cashier):
        with pytest.raises(PermissionDeniedError):
            create_category(repo, cashier, 'Snacks')
        with pytest.raises(PermissionDeniedError):
            create_product(repo, cashier, 'Chips', 2)

    def test_create_product(self, repo, stock_manager):
        product = create_product(repo, stock_manager, 'HP LaserJet', 300, stock_quantity=4,
                                 min_stock=2, category_id=3, buy_price=210)
        assert product.owner_id == stock_manager.id
        assert product.stock_quantity == 4
        assert product.category_id == 3

    @pytest.mark.parametrize('field,value', [
        ('sell_price', -1), ('stock_quantity', -2), ('min_stock', -1),
    ])
    def test_negative_values_rejected(self, repo, admin, field, value):
        kwargs = {'sell_price': 10, 'stock_quantity': 0, 'min_stock': 0}
        kwargs[field] = value
        with pytest.raises(ValidationInputError) as info:
            create_product(repo, admin, 'Widget', **kwargs)
        assert info.value.field == field

    def test_product_needs_live_category(self, repo, admin):
        with pytest.raises(NotFoundError):
            create_product(repo, admin, 'Widget', 10, category_id=77)
        delete_direct(repo, admin, EntityType.CATEGORY, 3)
        with pytest.raises(InvalidStateError):
            create_product(repo, admin, 'Widget', 10, category_id=3)

    def test_stock_manager_edits_own_product_only(self, repo, stock_manager):
        product = update_product(repo, stock_manager, 1, {'sell_price': 1150, 'stock_quantity': 999})
        assert product.sell_price == 1150
        # Stock is not editable, only movements change it
        assert product.stock_quantity == 15

        with pytest.raises(PermissionDeniedError):
            update_category(repo, stock_manager, 1, {'name': 'Laptops'})

    def test_deleted_category_cannot_be_edited(self, repo, admin):
        delete_direct(repo, admin, EntityType.CATEGORY, 1)
        with pytest.raises(InvalidStateError):
            update_category(repo, admin, 1, {'name': 'Laptops'})


class TestUsers:

    def test_create_user_normalizes_email(self, repo, admin):
        user = create_user(repo, admin, ' New.Cashier@Company.com ', 'hash', 'cashier', 'Ann', 'Lee')
        assert user.email == 'new.cashier@company.com'
        assert user.status == 'active'
        assert find_by_email(repo, 'NEW.cashier@company.com').id == user.id

    def test_duplicate_email(self, repo, admin):
        with pytest.raises(ValidationInputError) as info:
            create_user(repo, admin, 'cashier@company.com', 'hash', 'cashier')
        assert info.value.field == 'email'

    def test_unknown_role(self, repo, admin):
        with pytest.raises(ValidationInputError):
            create_user(repo, admin, 'x@company.com', 'hash', 'owner')

    def test_only_admin_creates_users(self, repo, stock_manager):
        with pytest.raises(PermissionDeniedError):
            create_user(repo, stock_manager, 'x@company.com', 'hash', 'cashier')

    def test_update_role_and_status(self, repo, admin, cashier):
        user = update_user(repo, admin, cashier.id, {'role': 'stock_manager', 'status': 'disabled'})
        assert user.role == 'stock_manager'
        assert user.status == 'disabled'

    def test_admin_cannot_demote_self(self, repo, admin):
        with pytest.raises(PermissionDeniedError):
            update_user(repo, admin, admin.id, {'role': 'cashier'})
        # Own names are fine
        assert update_user(repo, admin, admin.id, {'first_name': 'Root'}).first_name == 'Root'

    def test_status_frozen_while_deletion_request_open(self, repo, admin, cashier):
        validation = request_delete(repo, admin, EntityType.USER, cashier.id)
        assert validation.prior_status == 'active'

        with pytest.raises(InvalidStateError):
            update_user(repo, admin, cashier.id, {'status': 'disabled'})
        assert repo.get('user', cashier.id).status == 'active'
        # Other fields stay editable
        assert update_user(repo, admin, cashier.id, {'last_name': 'Brown'}).last_name == 'Brown'

        resolve_validation(repo, admin, validation.id, 'reject')
        assert repo.get('user', cashier.id).status == 'active'
        assert update_user(repo, admin, cashier.id, {'status': 'disabled'}).status == 'disabled'
