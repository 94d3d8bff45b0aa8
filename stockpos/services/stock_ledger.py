# stockpos/services/stock_ledger.py
import logging
from dataclasses import dataclass
from typing import Any, Optional

from stockpos.enums import CatalogStatus, EntityType, MovementType
from stockpos.exceptions import (
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationInputError,
)
from stockpos.services.permissions import Action, has_right
from stockpos.services.store import utcnow

logger = logging.getLogger(__name__)

INBOUND = frozenset({MovementType.IN, MovementType.RETURN})
OUTBOUND = frozenset({MovementType.OUT, MovementType.LOSS})


@dataclass
class LedgerEntry:
    product: Any
    movement: Any
    low_stock: bool


def _movement_type(value) -> MovementType:
    try:
        return MovementType(value)
    except ValueError:
        raise ValidationInputError("type", f"Unknown movement type '{value}'")


def next_stock_level(product_id, current: int, movement_type, quantity: int) -> int:
    """Stock after a movement; refuses anything that would go below zero."""
    movement_type = _movement_type(movement_type)
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValidationInputError("quantity", "Quantity must be a positive integer")

    if movement_type in INBOUND:
        return current + quantity
    if quantity > current:
        raise InsufficientStockError(product_id, quantity, current)
    return max(current - quantity, 0)


def is_low_stock(product) -> bool:
    return (product.stock_quantity or 0) <= (product.min_stock or 0)


def record_movement(repo, actor, product_id, movement_type, quantity, comment=None) -> LedgerEntry:
    """Validate, append the ledger row and adjust stock. No permission check.

    Runs inside the caller's transaction (sales record their own outbound
    movements this way).
    """
    movement_type = _movement_type(movement_type)
    product = repo.get("product", product_id)
    if product is None:
        raise NotFoundError("product", product_id)
    if product.status == CatalogStatus.DELETED.value:
        raise InvalidStateError(f"Product {product_id} is deleted", {"status": product.status})

    current = product.stock_quantity or 0
    new_level = next_stock_level(product_id, current, movement_type, quantity)

    with repo.atomic():
        product = repo.update(
            "product", product.id,
            {"stock_quantity": new_level},
            expected={"stock_quantity": current},
        )
        movement = repo.insert(
            "stock_movement",
            product_id=product.id,
            user_id=actor.id,
            type=movement_type.value,
            quantity=quantity,
            comment=comment,
            created_at=utcnow(),
        )

    low = is_low_stock(product)
    if low:
        logger.warning(
            "Product %s is at or below its threshold (%s <= %s)",
            product.id, product.stock_quantity, product.min_stock,
        )
    return LedgerEntry(product=product, movement=movement, low_stock=low)


def apply_movement(repo, actor, product_id, movement_type, quantity, comment=None) -> LedgerEntry:
    """Stock movement entered by a user (stock screen)."""
    if not has_right(actor, Action.CREATE, EntityType.STOCK_MOVEMENT):
        raise PermissionDeniedError(
            f"Role '{getattr(actor, 'role', None)}' may not record stock movements",
            {"action": Action.CREATE.value, "kind": EntityType.STOCK_MOVEMENT.value},
        )
    entry = record_movement(repo, actor, product_id, movement_type, quantity, comment)
    logger.info(
        "Stock movement %s: %s x%s on product %s by user %s",
        entry.movement.id, entry.movement.type, quantity, product_id, actor.id,
    )
    return entry


def preview_stock(product, movement_type, quantity) -> Optional[int]:
    """New level a movement would produce, or None when it would be refused."""
    try:
        return next_stock_level(product.id, product.stock_quantity or 0, movement_type, quantity)
    except (InsufficientStockError, ValidationInputError):
        return None
