from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence

from orderdesk.domain.catalog_models import Bom, BomComponent
from orderdesk.domain.pricing_models import BomCostSummary, Numeric
from orderdesk.exceptions import BomValidationError
from orderdesk.services.number_parsing import parse_formatted_number
from orderdesk.services.pricing_calculator import compute_bom_cost


class BomEntryViewModel:
    """Pure-Python representation of the create/edit BOM dialog."""

    def __init__(self) -> None:
        self.parent_product_id: int = 0
        self.editing: bool = False
        self._components: list[BomComponent] = []

    def components(self) -> Sequence[BomComponent]:
        return tuple(self._components)

    def start_new(self, parent_product_id: int = 0) -> None:
        self.parent_product_id = int(parent_product_id or 0)
        self.editing = False
        self._components = []

    def load_bom(self, bom: Bom) -> None:
        """Populate the form from an existing BOM for editing."""
        self.parent_product_id = bom.parent_product_id
        self.editing = True
        self._components = [
            BomComponent(
                component_product_id=component.component_product_id,
                quantity=component.quantity,
                component_product=component.component_product,
            )
            for component in bom.components
        ]

    def add_component(self) -> int:
        self._components.append(BomComponent(component_product_id=0, quantity=Decimal("1")))
        return len(self._components) - 1

    def remove_component(self, index: int) -> None:
        self._check_index(index)
        del self._components[index]

    def update_component(
        self,
        index: int,
        *,
        component_product_id: Optional[int] = None,
        quantity: Any = None,
    ) -> BomComponent:
        self._check_index(index)
        current = self._components[index]
        product_id = current.component_product_id
        product = current.component_product
        if component_product_id is not None and int(component_product_id) != product_id:
            product_id = int(component_product_id)
            product = None
        component = BomComponent(
            component_product_id=product_id,
            quantity=current.quantity if quantity is None else parse_formatted_number(quantity),
            id=current.id,
            component_product=product,
        )
        self._components[index] = component
        return component

    def compute_cost(self, product_costs: Optional[Mapping[int, Numeric]] = None) -> BomCostSummary:
        return compute_bom_cost(self._components, product_costs)

    def validate(self) -> None:
        if self.parent_product_id <= 0:
            raise BomValidationError("Please select a parent product.")
        if not self._components:
            raise BomValidationError("Please add at least one component.")

    def build_request(self) -> Dict[str, Any]:
        self.validate()
        return {
            "parent_product_id": self.parent_product_id,
            "components": [
                {
                    "component_product_id": component.component_product_id,
                    "quantity": component.quantity,
                }
                for component in self._components
            ],
        }

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._components):
            raise IndexError(f"Component index out of range: {index}")
