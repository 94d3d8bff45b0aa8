# stockpos/services/sales.py
import logging
from typing import Iterable, Mapping, Optional

from stockpos.enums import CatalogStatus, EntityType, MovementType, PaymentMethod, SaleStatus
from stockpos.exceptions import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationInputError,
)
from stockpos.services.permissions import Action, has_right
from stockpos.services.sale_totals import compute_totals, line_total, to_money
from stockpos.services.stock_ledger import record_movement
from stockpos.services.store import utcnow

logger = logging.getLogger(__name__)


def _payment_method(value) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError:
        raise ValidationInputError("payment_method", f"Unknown payment method '{value}'")


def price_lines(repo, items: Iterable[Mapping]):
    """Sale lines priced from the catalog; only active products can be sold."""
    lines = []
    for item in items:
        product_id = item.get("product_id")
        product = repo.get("product", product_id)
        if product is None:
            raise NotFoundError("product", product_id)
        if product.status != CatalogStatus.ACTIVE.value:
            raise InvalidStateError(
                f"Product {product_id} cannot be sold in state '{product.status}'",
                {"product_id": product_id, "status": product.status},
            )
        unit_price = item.get("unit_price")
        if unit_price is None:
            unit_price = product.sell_price
        quantity = item.get("quantity")
        lines.append({
            "product_id": product.id,
            "quantity": quantity,
            "unit_price": to_money(unit_price),
            "line_total": line_total(quantity, unit_price),
        })
    return lines


def create_sale(
    repo,
    cashier,
    items,
    discount_percent=0,
    tax_percent=20,
    payment_method=PaymentMethod.CASH.value,
    max_discount_percent: Optional[float] = None,
):
    """Record a point-of-sale transaction and take the sold goods out of stock."""
    if not has_right(cashier, Action.CREATE, EntityType.SALE):
        raise PermissionDeniedError(
            f"Role '{getattr(cashier, 'role', None)}' may not record sales",
            {"action": Action.CREATE.value, "kind": EntityType.SALE.value},
        )
    method = _payment_method(payment_method)

    items = list(items or [])
    if not items:
        raise ValidationInputError("items", "A sale needs at least one line")
    if max_discount_percent is not None and float(discount_percent) > float(max_discount_percent):
        raise ValidationInputError(
            "discount_percent", f"Discount cannot exceed {max_discount_percent}%"
        )

    lines = price_lines(repo, items)
    totals = compute_totals(lines, discount_percent, tax_percent)

    with repo.atomic():
        sale = repo.insert(
            "sale",
            cashier_id=cashier.id,
            discount_percent=float(discount_percent),
            tax_percent=float(tax_percent),
            payment_method=method.value,
            status=SaleStatus.VALID.value,
            created_at=utcnow(),
            **totals.as_floats(),
        )
        for line in lines:
            repo.insert(
                "sale_item",
                sale_id=sale.id,
                product_id=line["product_id"],
                quantity=line["quantity"],
                unit_price=float(line["unit_price"]),
                line_total=float(line["line_total"]),
            )
            record_movement(
                repo, cashier, line["product_id"], MovementType.OUT,
                line["quantity"], comment=f"Sale #{sale.id}",
            )

    logger.info(
        "Sale %s recorded by user %s: %s line(s), total %s",
        sale.id, cashier.id, len(lines), totals.grand_total,
    )
    return sale


def sale_lines(repo, sale_id):
    return repo.list("sale_item", sale_id=sale_id)
