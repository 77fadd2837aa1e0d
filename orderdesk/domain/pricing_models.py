"""Domain models supporting order, receipt and BOM pricing calculations."""
from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Tuple, Union

Numeric = Union[int, float, str, Decimal, None]

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Numeric) -> Decimal:
    """Convert a numeric value to Decimal.

    ``None`` and blank strings become zero. Floats go through ``str`` so that
    ``0.1`` is stored as ``Decimal("0.1")`` instead of its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            return Decimal(text)
        except InvalidOperation as exc:
            raise ValueError(f"Not a number: {value!r}") from exc
    return Decimal(value)


class _DecimalFields:
    """Mixin coercing every dataclass field to Decimal after init."""

    def __post_init__(self) -> None:
        for field in fields(self):
            object.__setattr__(self, field.name, to_decimal(getattr(self, field.name)))


@dataclass(frozen=True)
class LineItem(_DecimalFields):
    """One priced row of an order or BOM.

    ``unit_cost`` is the product cost (the API's ``original_price``) and
    ``unit_price`` the selling price (the API's ``selling_price``).
    """

    quantity: Decimal = ZERO
    unit_cost: Decimal = ZERO
    unit_price: Decimal = ZERO
    discount_percent: Decimal = ZERO


@dataclass(frozen=True)
class LineResult:
    """Monetary figures derived from a single line item."""

    gross_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    net_amount: Decimal = ZERO
    cost_amount: Decimal = ZERO
    profit_loss: Decimal = ZERO
    profit_loss_percent: Decimal = ZERO

    @property
    def is_profit(self) -> bool:
        return not self.profit_loss.is_nan() and self.profit_loss >= 0


@dataclass(frozen=True)
class OrderAggregate:
    """Breakdown of item, adjustment, tax and profit totals for an order."""

    items_total: Decimal
    additional_cost: Decimal
    subtotal: Decimal
    tax_percent: Decimal
    tax_amount: Decimal
    grand_total: Decimal
    total_cost_basis: Decimal
    total_discount: Decimal
    total_profit_loss: Decimal
    total_profit_loss_percent: Decimal
    lines: Tuple[LineResult, ...] = ()


@dataclass(frozen=True)
class ReceiptLine(_DecimalFields):
    """Quantity and unit cost of one inventory receipt row."""

    quantity: Decimal = ZERO
    unit_cost: Decimal = ZERO


@dataclass(frozen=True)
class ReceiptAggregate:
    """Row totals and grand total of an inventory receipt."""

    row_totals: Tuple[Decimal, ...]
    grand_total: Decimal


@dataclass(frozen=True)
class BomCostSummary:
    """Cost of every BOM component row and of the whole recipe."""

    row_totals: Tuple[Decimal, ...]
    total_cost: Decimal
