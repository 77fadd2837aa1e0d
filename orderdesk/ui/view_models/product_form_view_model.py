from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from orderdesk.domain.catalog_models import OPERATION_TYPES, Product
from orderdesk.domain.pricing_models import ZERO
from orderdesk.exceptions import InventoryValidationError, ProductValidationError
from orderdesk.services.number_parsing import parse_formatted_number

DEFAULT_OPERATION_TYPE = "MANUFACTURING"


class ProductFormViewModel:
    """State of the create/edit product dialog."""

    def __init__(self) -> None:
        self.start_new()

    def start_new(self) -> None:
        self.editing_id: Optional[int] = None
        self.name = ""
        self.cost: Decimal = ZERO
        self.description = ""
        self.category_id: Optional[int] = None
        self.unit_id: Optional[int] = None
        self.operation_type = DEFAULT_OPERATION_TYPE

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    def load_product(self, product: Product) -> None:
        """Fill the form from an existing product for editing."""
        self.editing_id = product.id
        self.name = product.name
        self.cost = product.cost
        self.description = product.description
        self.category_id = product.category_id
        self.unit_id = product.unit_id
        self.operation_type = product.operation_type or DEFAULT_OPERATION_TYPE

    def set_fields(
        self,
        *,
        name: Optional[str] = None,
        cost: Any = None,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        unit_id: Optional[int] = None,
        operation_type: Optional[str] = None,
    ) -> None:
        if name is not None:
            self.name = name
        if cost is not None:
            self.cost = parse_formatted_number(cost, allow_negative=True)
        if description is not None:
            self.description = description
        if category_id is not None:
            self.category_id = int(category_id) or None
        if unit_id is not None:
            self.unit_id = int(unit_id) or None
        if operation_type is not None:
            self.operation_type = operation_type

    def validate(self) -> None:
        if not self.name.strip():
            raise ProductValidationError("Please enter a product name.")
        if self.cost < 0:
            raise ProductValidationError("Cost cannot be negative.")
        if self.operation_type not in OPERATION_TYPES:
            raise ProductValidationError(f"Unknown operation type: {self.operation_type}")

    def build_request(self) -> Dict[str, Any]:
        """Return the validated create/update product payload."""
        self.validate()
        payload: Dict[str, Any] = {
            "name": self.name.strip(),
            "cost": self.cost,
            "description": self.description or "",
            "operation_type": self.operation_type,
        }
        if self.category_id:
            payload["category_id"] = self.category_id
        if self.unit_id:
            payload["unit_id"] = self.unit_id
        if self.is_editing:
            payload["id"] = self.editing_id
        return payload


class InventoryAdjustmentViewModel:
    """State of the set-stock-quantity dialog.

    The backend rejects a stale ``version``, so the form keeps the version the
    product was loaded with. A product that never had stock starts at "1".
    """

    def __init__(self) -> None:
        self.start(None)

    def start(self, product: Optional[Product]) -> None:
        self.product_id = product.id if product else 0
        self.version = product.inventory_version if product else ""
        self.quantity_text = ""
        self.note = ""

    def set_quantity(self, text: Any) -> None:
        self.quantity_text = "" if text is None else str(text)

    def set_note(self, note: str) -> None:
        self.note = note or ""

    @property
    def quantity(self) -> Decimal:
        return parse_formatted_number(self.quantity_text, allow_negative=True)

    def validate(self) -> None:
        if self.product_id <= 0:
            raise InventoryValidationError("Please select a product.")
        if not self.quantity_text.strip():
            raise InventoryValidationError("Please enter a quantity.")
        if self.quantity < 0:
            raise InventoryValidationError("Quantity cannot be negative.")

    def build_request(self) -> Dict[str, Any]:
        self.validate()
        payload: Dict[str, Any] = {
            "quantity": self.quantity,
            "version": self.version or "1",
        }
        if self.note.strip():
            payload["note"] = self.note.strip()
        return payload
