"""
Unit tests for the role-permission evaluator.
"""

from types import SimpleNamespace

import pytest

from stockpos.enums import EntityType
from stockpos.services.permissions import (
    Action, allowed_actions, can_perform, deletion_route, has_right,
)


def make_user(id, role, status='active'):
    return SimpleNamespace(id=id, role=role, status=status)


def make_entity(status='active', **fields):
    fields.setdefault('id', 10)
    return SimpleNamespace(status=status, **fields)


ADMIN = make_user(1, 'admin')
MANAGER = make_user(2, 'stock_manager')
CASHIER = make_user(3, 'cashier')


class TestCategoryRules:
    """Admin deletes directly, stock manager requests, cashier can do neither."""

    def test_admin_deletes_active_category_directly(self):
        category = make_entity(owner_id=2)
        assert can_perform(ADMIN, Action.DELETE, EntityType.CATEGORY, category)
        assert deletion_route(ADMIN, EntityType.CATEGORY, category) == 'direct'

    def test_stock_manager_must_request(self):
        category = make_entity(owner_id=1)
        assert not can_perform(MANAGER, Action.DELETE, EntityType.CATEGORY, category)
        assert can_perform(MANAGER, Action.REQUEST_DELETION, EntityType.CATEGORY, category)
        assert deletion_route(MANAGER, EntityType.CATEGORY, category) == 'request'

    def test_cashier_cannot_touch_categories(self):
        category = make_entity(owner_id=3)
        for action in (Action.CREATE, Action.EDIT, Action.DELETE, Action.REQUEST_DELETION):
            assert not can_perform(CASHIER, action, EntityType.CATEGORY, category)
        assert deletion_route(CASHIER, EntityType.CATEGORY, category) is None
        assert can_perform(CASHIER, Action.VIEW, EntityType.CATEGORY, category)

    def test_stock_manager_edits_only_own_catalog_items(self):
        own = make_entity(owner_id=2)
        other = make_entity(owner_id=1)
        assert can_perform(MANAGER, Action.EDIT, EntityType.PRODUCT, own)
        assert not can_perform(MANAGER, Action.EDIT, EntityType.PRODUCT, other)
        assert can_perform(ADMIN, Action.EDIT, EntityType.PRODUCT, other)

    def test_no_deletion_outside_live_state(self):
        for status in ('pending_deletion', 'deleted'):
            category = make_entity(status=status, owner_id=1)
            assert not can_perform(ADMIN, Action.DELETE, EntityType.CATEGORY, category)
            assert not can_perform(MANAGER, Action.REQUEST_DELETION, EntityType.CATEGORY, category)
            assert deletion_route(ADMIN, EntityType.CATEGORY, category) is None

    def test_deleted_items_are_frozen_but_restorable(self):
        category = make_entity(status='deleted', owner_id=2)
        assert not can_perform(MANAGER, Action.EDIT, EntityType.CATEGORY, category)
        assert can_perform(MANAGER, Action.REQUEST_RESTORATION, EntityType.CATEGORY, category)
        assert not can_perform(MANAGER, Action.REQUEST_RESTORATION, EntityType.CATEGORY, make_entity(owner_id=2))


class TestSaleRules:

    def test_cashier_requests_deletion_of_own_valid_sale(self):
        sale = make_entity(status='valid', cashier_id=3)
        assert can_perform(CASHIER, Action.REQUEST_DELETION, EntityType.SALE, sale)
        assert deletion_route(CASHIER, EntityType.SALE, sale) == 'request'

    def test_cashier_cannot_touch_other_sales(self):
        sale = make_entity(status='valid', cashier_id=99)
        assert not can_perform(CASHIER, Action.VIEW, EntityType.SALE, sale)
        assert not can_perform(CASHIER, Action.REQUEST_DELETION, EntityType.SALE, sale)

    def test_sales_are_immutable(self):
        sale = make_entity(status='valid', cashier_id=1)
        assert not can_perform(ADMIN, Action.EDIT, EntityType.SALE, sale)
        assert not can_perform(CASHIER, Action.EDIT, EntityType.SALE, sale)

    def test_stock_manager_has_no_access_to_sales(self):
        assert not has_right(MANAGER, Action.VIEW, EntityType.SALE)
        assert not has_right(MANAGER, Action.CREATE, EntityType.SALE)

    def test_type_level_question_ignores_ownership(self):
        assert has_right(CASHIER, Action.REQUEST_DELETION, EntityType.SALE)
        assert has_right(CASHIER, Action.CREATE, EntityType.SALE)


class TestUsersAndValidations:

    def test_only_admin_manages_users(self):
        target = make_user(5, 'cashier')
        assert can_perform(ADMIN, Action.DELETE, EntityType.USER, target)
        assert not can_perform(MANAGER, Action.EDIT, EntityType.USER, target)
        assert not can_perform(CASHIER, Action.CREATE, EntityType.USER)

    def test_admin_cannot_disable_own_account(self):
        assert not can_perform(ADMIN, Action.DELETE, EntityType.USER, ADMIN)

    def test_only_admin_resolves_pending_validations(self):
        pending = make_entity(status='pending', requested_by=2)
        approved = make_entity(status='approved', requested_by=2)
        assert can_perform(ADMIN, Action.RESOLVE, EntityType.VALIDATION, pending)
        assert not can_perform(ADMIN, Action.RESOLVE, EntityType.VALIDATION, approved)
        assert not can_perform(MANAGER, Action.RESOLVE, EntityType.VALIDATION, pending)

    def test_requesters_see_their_own_validations(self):
        mine = make_entity(status='pending', requested_by=2)
        theirs = make_entity(status='pending', requested_by=3)
        assert can_perform(MANAGER, Action.VIEW, EntityType.VALIDATION, mine)
        assert not can_perform(MANAGER, Action.VIEW, EntityType.VALIDATION, theirs)


class TestActorGuards:

    @pytest.mark.parametrize('role', ['admin', 'stock_manager', 'cashier'])
    def test_disabled_users_can_do_nothing(self, role):
        actor = make_user(7, role, status='disabled')
        for action in Action:
            for entity_type in EntityType:
                assert not has_right(actor, action, entity_type)

    def test_unknown_role_and_missing_actor(self):
        assert not has_right(make_user(8, 'owner'), Action.VIEW, EntityType.PRODUCT)
        assert not has_right(None, Action.VIEW, EntityType.PRODUCT)

    def test_allowed_actions_lists_current_options(self):
        product = make_entity(owner_id=2)
        assert allowed_actions(CASHIER, EntityType.PRODUCT, product) == ['view']
        assert set(allowed_actions(MANAGER, EntityType.PRODUCT, product)) == {
            'view', 'create', 'edit', 'request_deletion',
        }
        assert 'delete' in allowed_actions(ADMIN, EntityType.PRODUCT, product)
