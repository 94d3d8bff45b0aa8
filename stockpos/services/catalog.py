# stockpos/services/catalog.py
"""Create/edit rules for categories and products."""
import logging

from stockpos.enums import CatalogStatus, EntityType
from stockpos.exceptions import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationInputError,
)
from stockpos.services.permissions import Action, can_perform, has_right
from stockpos.services.store import utcnow

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = ("name", "description")
PRODUCT_FIELDS = (
    "name", "description", "buy_price", "sell_price", "min_stock", "category_id", "image_url",
)


def _clean_name(name):
    name = (name or "").strip()
    if not name:
        raise ValidationInputError("name", "Name cannot be empty")
    return name


def _non_negative(field, value):
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationInputError(field, f"{field} must be a number")
    if number < 0:
        raise ValidationInputError(field, f"{field} cannot be negative")
    return value


def _check_category(repo, category_id):
    if category_id is None:
        return
    category = repo.get("category", category_id)
    if category is None:
        raise NotFoundError("category", category_id)
    if category.status == CatalogStatus.DELETED.value:
        raise InvalidStateError(f"Category {category_id} is deleted", {"status": category.status})


def _require_create(actor, entity_type):
    if not has_right(actor, Action.CREATE, entity_type):
        raise PermissionDeniedError(
            f"Role '{getattr(actor, 'role', None)}' may not create {entity_type.value}",
            {"action": Action.CREATE.value, "kind": entity_type.value},
        )


def _load_for_edit(repo, actor, entity_type, entity_id):
    entity = repo.get(entity_type.value, entity_id)
    if entity is None:
        raise NotFoundError(entity_type.value, entity_id)
    if not has_right(actor, Action.EDIT, entity_type, entity):
        raise PermissionDeniedError(
            f"Role '{getattr(actor, 'role', None)}' may not edit {entity_type.value} {entity_id}",
            {"action": Action.EDIT.value, "kind": entity_type.value, "id": entity_id},
        )
    if not can_perform(actor, Action.EDIT, entity_type, entity):
        raise InvalidStateError(
            f"{entity_type.value} {entity_id} cannot be edited in state '{entity.status}'",
            {"status": entity.status},
        )
    return entity


def create_category(repo, actor, name, description=None):
    _require_create(actor, EntityType.CATEGORY)
    with repo.atomic():
        category = repo.insert(
            "category",
            name=_clean_name(name),
            description=description,
            owner_id=actor.id,
            status=CatalogStatus.ACTIVE.value,
            created_at=utcnow(),
        )
    logger.info("Category %s created by user %s", category.id, actor.id)
    return category


def update_category(repo, actor, category_id, changes):
    _load_for_edit(repo, actor, EntityType.CATEGORY, category_id)
    changes = {k: v for k, v in changes.items() if k in CATEGORY_FIELDS}
    if "name" in changes:
        changes["name"] = _clean_name(changes["name"])
    with repo.atomic():
        category = repo.update("category", category_id, changes)
    return category


def _validate_product_fields(repo, fields):
    if "name" in fields:
        fields["name"] = _clean_name(fields["name"])
    for field in ("buy_price", "sell_price", "min_stock", "stock_quantity"):
        if field in fields:
            _non_negative(field, fields[field])
    if "category_id" in fields:
        _check_category(repo, fields["category_id"])
    return fields


def create_product(repo, actor, name, sell_price, stock_quantity=0, min_stock=0, **extra):
    _require_create(actor, EntityType.PRODUCT)
    fields = {k: v for k, v in extra.items() if k in PRODUCT_FIELDS}
    fields.update(name=name, sell_price=sell_price, stock_quantity=stock_quantity, min_stock=min_stock)
    fields.setdefault("buy_price", 0)
    _validate_product_fields(repo, fields)
    if isinstance(stock_quantity, bool) or not isinstance(stock_quantity, int):
        raise ValidationInputError("stock_quantity", "stock_quantity must be an integer")

    with repo.atomic():
        product = repo.insert(
            "product",
            owner_id=actor.id,
            status=CatalogStatus.ACTIVE.value,
            created_at=utcnow(),
            **fields,
        )
    logger.info("Product %s created by user %s", product.id, actor.id)
    return product


def update_product(repo, actor, product_id, changes):
    """Edit descriptive fields. Stock only moves through the ledger."""
    _load_for_edit(repo, actor, EntityType.PRODUCT, product_id)
    changes = _validate_product_fields(
        repo, {k: v for k, v in changes.items() if k in PRODUCT_FIELDS}
    )
    with repo.atomic():
        product = repo.update("product", product_id, changes)
    return product
