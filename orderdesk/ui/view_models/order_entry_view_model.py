from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from orderdesk.domain.catalog_models import Product
from orderdesk.domain.pricing_models import (
    ZERO,
    LineItem,
    LineResult,
    OrderAggregate,
    to_decimal,
)
from orderdesk.exceptions import OrderValidationError
from orderdesk.services.number_parsing import clamp_percent, parse_formatted_number
from orderdesk.services.pricing_calculator import compute_line, compute_order_aggregate

EDITABLE_ITEM_FIELDS = ("quantity", "selling_price", "original_price", "discount_percent")

logger = logging.getLogger(__name__)


def _draft_number(value: Any) -> Decimal:
    number = to_decimal(value)
    if not number.is_finite():
        raise ValueError(f"Non-finite number in draft: {value!r}")
    return number


@dataclass(frozen=True)
class OrderEntryRowState:
    """Represents a single row captured from the order items table."""

    product_id: int = 0
    product_name: str = ""
    quantity: Decimal = ZERO
    selling_price: Decimal = ZERO
    original_price: Decimal = ZERO
    discount_percent: Decimal = ZERO
    final_amount: Decimal = ZERO

    def is_empty(self) -> bool:
        """Return True when no product has been chosen for the row."""
        return self.product_id <= 0

    def to_line_item(self) -> LineItem:
        """Convert this row into the line model used for pricing."""
        return LineItem(
            quantity=self.quantity,
            unit_cost=self.original_price,
            unit_price=self.selling_price,
            discount_percent=self.discount_percent,
        )

    def recomputed(self) -> "OrderEntryRowState":
        """Return a copy whose ``final_amount`` is derived from the current inputs."""
        return replace(self, final_amount=compute_line(self.to_line_item()).net_amount)


class OrderEntryViewModel:
    """Pure-Python representation of the create-order form state."""

    def __init__(self) -> None:
        self._rows: list[OrderEntryRowState] = []
        self.reset()

    def reset(self) -> None:
        """Return the form to its initial empty state."""
        self._rows = []
        self.customer_id: int = 0
        self.order_date: str = ""
        self.note: str = ""
        self.additional_cost: Decimal = ZERO
        self.additional_cost_note: str = ""
        self.tax_percent: Decimal = ZERO
        self.delivery_status: str = ""

    # ------------------------------------------------------------------ #
    # Row management
    # ------------------------------------------------------------------ #
    def add_item(self) -> int:
        """Append a blank row and return its index."""
        self._rows.append(OrderEntryRowState())
        return len(self._rows) - 1

    def remove_item(self, index: int) -> None:
        self._check_index(index)
        del self._rows[index]

    def clear_rows(self) -> None:
        self._rows.clear()

    def rows(self) -> Sequence[OrderEntryRowState]:
        """Return an immutable view of the row data."""
        return tuple(self._rows)

    def active_rows(self) -> Sequence[OrderEntryRowState]:
        """Return only rows that have a product selected."""
        return tuple(row for row in self._rows if not row.is_empty())

    def iter_line_items(self) -> Iterator[LineItem]:
        for row in self._rows:
            yield row.to_line_item()

    def select_product(self, index: int, product_id: int, product: Optional[Product]) -> OrderEntryRowState:
        """Choose a product for a row, resetting its figures to the product cost."""
        self._check_index(index)
        row = OrderEntryRowState(
            product_id=int(product_id or 0),
            product_name=product.name if product else "",
            original_price=product.cost if product else ZERO,
        ).recomputed()
        self._rows[index] = row
        return row

    def update_item(self, index: int, field: str, value: Any) -> OrderEntryRowState:
        """Apply a typed edit to one numeric field and refresh ``final_amount``."""
        self._check_index(index)
        if field not in EDITABLE_ITEM_FIELDS:
            raise KeyError(f"Unsupported order item field: {field}")
        number = parse_formatted_number(value)
        if field == "discount_percent":
            number = clamp_percent(number)
        row = replace(self._rows[index], **{field: number}).recomputed()
        self._rows[index] = row
        return row

    # ------------------------------------------------------------------ #
    # Order-level inputs
    # ------------------------------------------------------------------ #
    def set_order_inputs(
        self,
        *,
        customer_id: Optional[int] = None,
        order_date: Optional[str] = None,
        note: Optional[str] = None,
        additional_cost: Any = None,
        additional_cost_note: Optional[str] = None,
        tax_percent: Any = None,
        delivery_status: Optional[str] = None,
    ) -> None:
        """Update the order header fields that were provided."""
        if customer_id is not None:
            self.customer_id = int(customer_id or 0)
        if order_date is not None:
            self.order_date = str(order_date)
        if note is not None:
            self.note = note
        if additional_cost is not None:
            self.additional_cost = parse_formatted_number(additional_cost, allow_negative=True)
        if additional_cost_note is not None:
            self.additional_cost_note = additional_cost_note
        if tax_percent is not None:
            self.tax_percent = clamp_percent(parse_formatted_number(tax_percent))
        if delivery_status is not None:
            self.delivery_status = delivery_status

    # ------------------------------------------------------------------ #
    # Derived values
    # ------------------------------------------------------------------ #
    def line_results(self) -> Sequence[LineResult]:
        return tuple(compute_line(item) for item in self.iter_line_items())

    def compute_aggregate(self) -> OrderAggregate:
        """Compute order totals using the current snapshot."""
        return compute_order_aggregate(
            tuple(self.iter_line_items()),
            additional_cost=self.additional_cost,
            tax_percent=self.tax_percent,
        )

    def validate(self) -> None:
        """Raise :class:`OrderValidationError` describing the first problem found."""
        if self.customer_id <= 0:
            raise OrderValidationError("Please select a customer")
        if not self._rows:
            raise OrderValidationError("Please add at least one product")
        for idx, row in enumerate(self._rows):
            line = idx + 1
            if row.is_empty():
                raise OrderValidationError(f"Please select a product for row {line}", row=idx)
            if row.quantity <= 0:
                raise OrderValidationError(f"Quantity must be greater than 0 for row {line}", row=idx)
            if row.selling_price <= 0:
                raise OrderValidationError(f"Selling price must be greater than 0 for row {line}", row=idx)
            if row.original_price <= 0:
                raise OrderValidationError(f"Original price must be greater than 0 for row {line}", row=idx)

    def build_request(self) -> Dict[str, Any]:
        """Return the validated create-order payload."""
        self.validate()
        payload: Dict[str, Any] = {
            "customer_id": self.customer_id,
            "order_date": self.order_date,
            "additional_cost": self.additional_cost,
            "tax_percent": self.tax_percent,
            "items": [
                {
                    "product_id": row.product_id,
                    "quantity": row.quantity,
                    "selling_price": row.selling_price,
                    "original_price": row.original_price,
                    "discount_percent": row.discount_percent,
                }
                for row in self._rows
            ],
        }
        if self.note:
            payload["note"] = self.note
        if self.additional_cost_note:
            payload["additional_cost_note"] = self.additional_cost_note
        if self.delivery_status:
            payload["delivery_status"] = self.delivery_status
        return payload

    # ------------------------------------------------------------------ #
    # Drafts
    # ------------------------------------------------------------------ #
    def to_draft(self) -> Dict[str, Any]:
        """Return a JSON-friendly snapshot of the form."""
        return {
            "customer_id": self.customer_id,
            "order_date": self.order_date,
            "note": self.note,
            "additional_cost": str(self.additional_cost),
            "additional_cost_note": self.additional_cost_note,
            "tax_percent": str(self.tax_percent),
            "delivery_status": self.delivery_status,
            "order_items": [
                {
                    "product_id": row.product_id,
                    "product_name": row.product_name,
                    "quantity": str(row.quantity),
                    "selling_price": str(row.selling_price),
                    "original_price": str(row.original_price),
                    "discount_percent": str(row.discount_percent),
                }
                for row in self._rows
            ],
        }

    def load_draft(self, draft: Mapping[str, Any]) -> bool:
        """Restore a snapshot produced by :meth:`to_draft`.

        Returns False and leaves the form untouched when the draft is malformed.
        """
        try:
            rows = [
                OrderEntryRowState(
                    product_id=int(raw.get("product_id") or 0),
                    product_name=str(raw.get("product_name") or ""),
                    quantity=_draft_number(raw.get("quantity")),
                    selling_price=_draft_number(raw.get("selling_price")),
                    original_price=_draft_number(raw.get("original_price")),
                    discount_percent=clamp_percent(_draft_number(raw.get("discount_percent"))),
                ).recomputed()
                for raw in draft.get("order_items") or ()
            ]
            customer_id = int(draft.get("customer_id") or 0)
            additional_cost = _draft_number(draft.get("additional_cost"))
            tax_percent = clamp_percent(_draft_number(draft.get("tax_percent")))
        except (AttributeError, TypeError, ValueError, ArithmeticError) as exc:
            logger.warning("Ignoring malformed order draft: %s", exc)
            return False

        self._rows = rows
        self.customer_id = customer_id
        self.order_date = str(draft.get("order_date") or "")
        self.note = str(draft.get("note") or "")
        self.additional_cost = additional_cost
        self.additional_cost_note = str(draft.get("additional_cost_note") or "")
        self.tax_percent = tax_percent
        self.delivery_status = str(draft.get("delivery_status") or "")
        return True

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._rows):
            raise IndexError(f"Row index out of range: {index}")
