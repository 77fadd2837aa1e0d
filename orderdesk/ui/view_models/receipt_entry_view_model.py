from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from orderdesk.domain.catalog_models import Product
from orderdesk.domain.pricing_models import ReceiptAggregate, ReceiptLine
from orderdesk.exceptions import ReceiptValidationError
from orderdesk.services.number_parsing import parse_formatted_number
from orderdesk.services.pricing_calculator import compute_receipt_aggregate


@dataclass(frozen=True)
class ReceiptEntryRowState:
    """A receipt row holding the quantity and unit cost exactly as typed."""

    product_id: int = 0
    product_name: str = ""
    quantity_text: str = ""
    unit_cost_text: str = ""
    notes: str = ""

    @property
    def quantity(self) -> Decimal:
        return parse_formatted_number(self.quantity_text)

    @property
    def unit_cost(self) -> Decimal:
        return parse_formatted_number(self.unit_cost_text)

    def is_empty(self) -> bool:
        return self.product_id <= 0

    def to_receipt_line(self) -> ReceiptLine:
        return ReceiptLine(quantity=self.quantity, unit_cost=self.unit_cost)


class ReceiptEntryViewModel:
    """Pure-Python representation of the create-inventory-receipt form."""

    _TEXT_FIELDS = {
        "quantity": "quantity_text",
        "unit_cost": "unit_cost_text",
        "notes": "notes",
    }

    def __init__(self) -> None:
        self._rows: list[ReceiptEntryRowState] = []

    def add_item(self) -> int:
        self._rows.append(ReceiptEntryRowState())
        return len(self._rows) - 1

    def remove_item(self, index: int) -> None:
        self._check_index(index)
        del self._rows[index]

    def clear(self) -> None:
        self._rows.clear()

    def rows(self) -> Sequence[ReceiptEntryRowState]:
        return tuple(self._rows)

    def select_product(self, index: int, product: Optional[Product]) -> ReceiptEntryRowState:
        """Choose a product for a row; quantity, cost and notes start over."""
        self._check_index(index)
        row = ReceiptEntryRowState(
            product_id=product.id if product else 0,
            product_name=product.name if product else "",
        )
        self._rows[index] = row
        return row

    def update_item(self, index: int, field: str, value: Any) -> ReceiptEntryRowState:
        """Store the raw text typed into ``quantity``, ``unit_cost`` or ``notes``."""
        self._check_index(index)
        attr = self._TEXT_FIELDS.get(field)
        if attr is None:
            raise KeyError(f"Unsupported receipt item field: {field}")
        row = replace(self._rows[index], **{attr: "" if value is None else str(value)})
        self._rows[index] = row
        return row

    def compute_aggregate(self) -> ReceiptAggregate:
        return compute_receipt_aggregate(row.to_receipt_line() for row in self._rows)

    def validate(self) -> None:
        """Raise :class:`ReceiptValidationError` when the receipt cannot be submitted."""
        if not self._rows:
            raise ReceiptValidationError("Please add at least one product.")
        for idx, row in enumerate(self._rows):
            if row.is_empty() or row.quantity <= 0 or row.unit_cost <= 0:
                raise ReceiptValidationError(
                    "Please choose a product and enter a valid quantity and unit cost for every row.",
                    row=idx,
                )

    def build_request(
        self,
        user_id: int,
        *,
        receipt_date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return the validated create-receipt payload."""
        self.validate()
        items = []
        for row in self._rows:
            item: Dict[str, Any] = {
                "product_id": row.product_id,
                "quantity": row.quantity,
                "unit_cost": row.unit_cost,
            }
            if row.notes.strip():
                item["notes"] = row.notes.strip()
            items.append(item)
        payload: Dict[str, Any] = {"user_id": int(user_id), "items": items}
        if receipt_date:
            payload["receipt_date"] = receipt_date
        if notes and notes.strip():
            payload["notes"] = notes.strip()
        return payload

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._rows):
            raise IndexError(f"Row index out of range: {index}")
