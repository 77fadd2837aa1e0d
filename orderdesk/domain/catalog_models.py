"""Catalog records decoded from backend payloads."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple

from orderdesk.domain.pricing_models import ZERO, to_decimal


def _nested(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True)
class Product:
    """A sellable or purchasable product with its cost price."""

    id: int
    name: str
    cost: Decimal = ZERO
    code: str = ""
    description: str = ""
    operation_type: str = ""
    category_id: Optional[int] = None
    unit_id: Optional[int] = None
    category_code: str = ""
    unit_name: str = ""
    stock_quantity: Optional[Decimal] = None
    inventory_version: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Product":
        """Build a product from a ``ProductResponse`` or ``ProductBomInfo`` mapping."""
        category = _nested(data, "category")
        unit = _nested(data, "unit")
        inventory = _nested(data, "inventory")
        stock = inventory.get("quantity") if inventory else None
        return cls(
            id=int(data.get("id") or 0),
            name=str(data.get("name") or ""),
            cost=to_decimal(data.get("cost")),
            code=str(data.get("code") or ""),
            description=str(data.get("description") or ""),
            operation_type=str(data.get("operation_type") or ""),
            category_id=data.get("category_id"),
            unit_id=data.get("unit_id"),
            category_code=str(data.get("category_code") or category.get("code") or ""),
            unit_name=str(data.get("unit_name") or unit.get("name") or ""),
            stock_quantity=None if stock is None else to_decimal(stock),
            inventory_version=str(inventory.get("version") or ""),
        )


@dataclass(frozen=True)
class BomComponent:
    """A component product and the quantity one parent unit consumes."""

    component_product_id: int
    quantity: Decimal = Decimal("1")
    id: Optional[int] = None
    component_product: Optional[Product] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "BomComponent":
        product_data = data.get("component_product")
        return cls(
            component_product_id=int(data.get("component_product_id") or 0),
            quantity=to_decimal(data.get("quantity")),
            id=data.get("id"),
            component_product=Product.from_api(product_data) if product_data else None,
        )


@dataclass(frozen=True)
class Bom:
    """Bill of materials of a parent product."""

    parent_product_id: int
    components: Tuple[BomComponent, ...] = field(default_factory=tuple)
    parent_product: Optional[Product] = None

    @property
    def total_components(self) -> int:
        return len(self.components)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Bom":
        parent_data = data.get("parent_product")
        return cls(
            parent_product_id=int(data.get("parent_product_id") or 0),
            components=tuple(
                BomComponent.from_api(item) for item in data.get("components") or ()
            ),
            parent_product=Product.from_api(parent_data) if parent_data else None,
        )


OPERATION_TYPES = ("MANUFACTURING", "PACKAGING", "PURCHASE")


@dataclass(frozen=True)
class Category:
    """Product category used to filter the product list."""

    id: int
    name: str
    code: str = ""
    description: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Category":
        return cls(
            id=int(data.get("id") or 0),
            name=str(data.get("name") or ""),
            code=str(data.get("code") or ""),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class UnitOfMeasure:
    """Unit a product is counted in (bag, kg, box...)."""

    id: int
    name: str
    code: str = ""
    description: str = ""

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "UnitOfMeasure":
        return cls(
            id=int(data.get("id") or 0),
            name=str(data.get("name") or ""),
            code=str(data.get("code") or ""),
            description=str(data.get("description") or ""),
        )
