"""Stock levels, stock history and inventory receipts decoded from the backend."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple

from orderdesk.domain.pricing_models import ZERO, to_decimal


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else to_decimal(value)


@dataclass(frozen=True)
class Inventory:
    """Current stock of one product.

    ``version`` is the backend's optimistic-locking token and must be echoed
    back when the quantity is changed.
    """

    id: int
    product_id: int
    quantity: Decimal = ZERO
    version: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Inventory":
        return cls(
            id=int(data.get("id") or 0),
            product_id=int(data.get("product_id") or 0),
            quantity=to_decimal(data.get("quantity")),
            version=str(data.get("version") or ""),
        )


@dataclass(frozen=True)
class InventoryHistoryEntry:
    """One stock movement: the change, the resulting level and who made it."""

    id: int
    product_id: int
    quantity: Decimal
    final_quantity: Decimal
    importer_name: str = ""
    imported_at: str = ""
    note: str = ""
    reference_id: Optional[int] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "InventoryHistoryEntry":
        return cls(
            id=int(data.get("id") or 0),
            product_id=int(data.get("product_id") or 0),
            quantity=to_decimal(data.get("quantity")),
            final_quantity=to_decimal(data.get("final_quantity")),
            importer_name=str(data.get("importer_name") or ""),
            imported_at=str(data.get("imported_at") or ""),
            note=str(data.get("note") or ""),
            reference_id=data.get("reference_id"),
        )


@dataclass(frozen=True)
class InventoryReceiptItem:
    id: int
    product_id: int
    quantity: Decimal
    unit_cost: Optional[Decimal] = None
    notes: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "InventoryReceiptItem":
        return cls(
            id=int(data.get("id") or 0),
            product_id=int(data.get("product_id") or 0),
            quantity=to_decimal(data.get("quantity")),
            unit_cost=_optional_decimal(data.get("unit_cost")),
            notes=str(data.get("notes") or ""),
        )


@dataclass(frozen=True)
class InventoryReceipt:
    """A stored inventory receipt. List responses carry no ``items``."""

    id: int
    code: str
    user_id: int = 0
    receipt_date: str = ""
    notes: str = ""
    total_items: int = 0
    created_at: str = ""
    items: Tuple[InventoryReceiptItem, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "InventoryReceipt":
        items = tuple(InventoryReceiptItem.from_api(item) for item in data.get("items") or ())
        return cls(
            id=int(data.get("id") or 0),
            code=str(data.get("code") or ""),
            user_id=int(data.get("user_id") or 0),
            receipt_date=str(data.get("receipt_date") or ""),
            notes=str(data.get("notes") or ""),
            total_items=int(data.get("total_items") or len(items)),
            created_at=str(data.get("created_at") or ""),
            items=items,
        )
