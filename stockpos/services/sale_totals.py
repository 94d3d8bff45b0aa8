# stockpos/services/sale_totals.py
"""
Sale totals calculator.

All amounts are ``Decimal`` quantized to two places with ROUND_HALF_UP, and
each component is rounded before it feeds the next one, so the stored parts
always add up to the stored grand total.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Mapping, Union

from stockpos.exceptions import ValidationInputError

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

Number = Union[int, float, str, Decimal]


def to_money(value: Number) -> Decimal:
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationInputError("amount", f"'{value}' is not a number")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class SaleTotals:
    subtotal: Decimal
    discount_amount: Decimal
    net_before_tax: Decimal
    tax_amount: Decimal
    grand_total: Decimal

    def as_floats(self) -> dict:
        return {
            "subtotal": float(self.subtotal),
            "discount_amount": float(self.discount_amount),
            "net_before_tax": float(self.net_before_tax),
            "tax_amount": float(self.tax_amount),
            "grand_total": float(self.grand_total),
        }


def _field(item, *names):
    for name in names:
        if isinstance(item, Mapping):
            if name in item:
                return item[name]
        elif hasattr(item, name):
            return getattr(item, name)
    raise ValidationInputError(names[0], f"Line item is missing '{names[0]}'")


def line_total(quantity: Number, unit_price: Number) -> Decimal:
    try:
        qty = Decimal(str(quantity))
    except InvalidOperation:
        raise ValidationInputError("quantity", f"'{quantity}' is not a number")
    if qty <= 0:
        raise ValidationInputError("quantity", "Quantity must be greater than zero")
    price = to_money(unit_price)
    if price < 0:
        raise ValidationInputError("unit_price", "Unit price cannot be negative")
    return to_money(qty * price)


def _percent(value: Number, field: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationInputError(field, f"'{value}' is not a number")


def compute_totals(line_items: Iterable, discount_percent: Number = 0, tax_percent: Number = 0) -> SaleTotals:
    """Totals for a basket.

    Line items are mappings or objects with ``quantity``/``qty`` and
    ``unit_price``/``price``.
    """
    discount = _percent(discount_percent, "discount_percent")
    tax = _percent(tax_percent, "tax_percent")
    if discount < 0 or discount > HUNDRED:
        raise ValidationInputError("discount_percent", "Discount must be between 0 and 100")
    if tax < 0:
        raise ValidationInputError("tax_percent", "Tax rate cannot be negative")

    lines: List[Decimal] = [
        line_total(_field(item, "quantity", "qty"), _field(item, "unit_price", "price"))
        for item in line_items
    ]
    subtotal = to_money(sum(lines, Decimal("0")))
    discount_amount = to_money(subtotal * discount / HUNDRED)
    net_before_tax = subtotal - discount_amount
    tax_amount = to_money(net_before_tax * tax / HUNDRED)
    grand_total = net_before_tax + tax_amount

    return SaleTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        net_before_tax=net_before_tax,
        tax_amount=tax_amount,
        grand_total=grand_total,
    )
