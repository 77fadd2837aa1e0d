"""Pure calculation helpers for order, receipt and BOM pricing.

Every function here is total over its numeric domain: zero, negative and
partially filled inputs produce signed results rather than errors. Non-finite
inputs (``inf``, ``nan``) propagate as ``NaN``/``Infinity`` figures instead of
raising. Nothing is rounded except the order tax, which is rounded once on the
subtotal.
"""
from __future__ import annotations

import decimal
from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from typing import Iterable, Mapping, Optional

from orderdesk.domain.pricing_models import (
    HUNDRED,
    ZERO,
    BomCostSummary,
    LineItem,
    LineResult,
    Numeric,
    OrderAggregate,
    ReceiptAggregate,
    ReceiptLine,
    to_decimal,
)
from orderdesk.domain.catalog_models import BomComponent

# The currency has no minor unit in practice, so tax rounds to whole units.
CURRENCY_QUANTUM = Decimal("1")
_HALF = Decimal("0.5")


def _quiet_context() -> decimal.Context:
    """Decimal context where invalid operations yield NaN instead of raising."""
    context = decimal.getcontext().copy()
    context.traps[InvalidOperation] = False
    return context


def round_currency(value: Numeric) -> Decimal:
    """Round a monetary amount to whole units, halves toward positive infinity.

    ``0.5`` becomes ``1`` and ``-0.5`` becomes ``0``.
    """
    with decimal.localcontext(_quiet_context()):
        amount = to_decimal(value)
        if not amount.is_finite():
            return amount
        return (amount + _HALF).to_integral_value(rounding=ROUND_FLOOR)


def compute_percent_of(amount: Decimal, base: Decimal) -> Decimal:
    """Return ``amount`` as a percentage of ``base``, or zero when ``base`` is not a positive number."""
    if base.is_finite() and base > 0:
        with decimal.localcontext(_quiet_context()):
            return amount / base * HUNDRED
    return ZERO


def compute_line(item: LineItem) -> LineResult:
    """Derive gross, discount, net, cost and profit figures for one line."""
    with decimal.localcontext(_quiet_context()):
        gross_amount = item.quantity * item.unit_price
        discount_amount = gross_amount * item.discount_percent / HUNDRED
        net_amount = gross_amount - discount_amount
        cost_amount = item.quantity * item.unit_cost
        profit_loss = net_amount - cost_amount
    return LineResult(
        gross_amount=gross_amount,
        discount_amount=discount_amount,
        net_amount=net_amount,
        cost_amount=cost_amount,
        profit_loss=profit_loss,
        profit_loss_percent=compute_percent_of(profit_loss, cost_amount),
    )


def compute_order_aggregate(
    items: Iterable[LineItem],
    additional_cost: Numeric = ZERO,
    tax_percent: Numeric = ZERO,
) -> OrderAggregate:
    """Compute order totals from its line items and order-level adjustments."""
    lines = tuple(compute_line(item) for item in items)
    additional = to_decimal(additional_cost)
    tax_rate = to_decimal(tax_percent)

    with decimal.localcontext(_quiet_context()):
        items_total = sum((line.net_amount for line in lines), ZERO)
        total_cost_basis = sum((line.cost_amount for line in lines), ZERO)
        total_discount = sum((line.discount_amount for line in lines), ZERO)
        lines_profit_loss = sum((line.profit_loss for line in lines), ZERO)

        subtotal = items_total + additional
        tax_amount = round_currency(subtotal * tax_rate / HUNDRED)
        grand_total = subtotal + tax_amount
        total_profit_loss = lines_profit_loss + additional

    return OrderAggregate(
        items_total=items_total,
        additional_cost=additional,
        subtotal=subtotal,
        tax_percent=tax_rate,
        tax_amount=tax_amount,
        grand_total=grand_total,
        total_cost_basis=total_cost_basis,
        total_discount=total_discount,
        total_profit_loss=total_profit_loss,
        total_profit_loss_percent=compute_percent_of(total_profit_loss, total_cost_basis),
        lines=lines,
    )


def compute_receipt_aggregate(items: Iterable[object]) -> ReceiptAggregate:
    """Compute row totals (quantity x unit cost) and the receipt grand total.

    Items may be any objects exposing ``quantity`` and ``unit_cost``.
    """
    with decimal.localcontext(_quiet_context()):
        row_totals = tuple(
            to_decimal(getattr(item, "quantity", None)) * to_decimal(getattr(item, "unit_cost", None))
            for item in items
        )
        grand_total = sum(row_totals, ZERO)
    return ReceiptAggregate(row_totals=row_totals, grand_total=grand_total)


def compute_bom_cost(
    components: Iterable[BomComponent],
    product_costs: Optional[Mapping[int, Numeric]] = None,
) -> BomCostSummary:
    """Cost every BOM component row using the known product costs.

    Costs come from ``product_costs`` first, then from the product embedded in
    the component. A component whose cost is unknown contributes zero.
    """
    costs = product_costs or {}
    rows = []
    for component in components:
        if component.component_product_id in costs:
            unit_cost = costs[component.component_product_id]
        elif component.component_product is not None:
            unit_cost = component.component_product.cost
        else:
            unit_cost = ZERO
        rows.append(ReceiptLine(quantity=component.quantity, unit_cost=unit_cost))
    receipt = compute_receipt_aggregate(rows)
    return BomCostSummary(row_totals=receipt.row_totals, total_cost=receipt.grand_total)
