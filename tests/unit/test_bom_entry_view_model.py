from decimal import Decimal

import pytest

from orderdesk.domain.catalog_models import Bom, BomComponent
from orderdesk.exceptions import BomValidationError
from orderdesk.ui.view_models import BomEntryViewModel
from tests.factories import product


def test_new_component_defaults_to_quantity_one():
    view_model = BomEntryViewModel()
    view_model.start_new(9)

    idx = view_model.add_component()

    assert view_model.components()[idx].quantity == Decimal("1")
    assert view_model.components()[idx].component_product_id == 0


def test_compute_cost_with_product_costs():
    view_model = BomEntryViewModel()
    view_model.start_new(9)
    view_model.update_component(view_model.add_component(), component_product_id=7, quantity="3")
    view_model.update_component(view_model.add_component(), component_product_id=8, quantity="0,5")

    summary = view_model.compute_cost({7: Decimal("40000"), 8: Decimal("12000")})

    assert summary.row_totals == (Decimal("120000"), Decimal("6000"))
    assert summary.total_cost == Decimal("126000")


def test_load_bom_marks_editing_and_keeps_embedded_costs():
    bom = Bom(
        parent_product_id=9,
        components=(
            BomComponent(
                component_product_id=7,
                quantity=Decimal("2"),
                id=11,
                component_product=product(id=7, cost=Decimal("40000")),
            ),
        ),
    )
    view_model = BomEntryViewModel()

    view_model.load_bom(bom)

    assert view_model.editing is True
    assert view_model.parent_product_id == 9
    assert view_model.compute_cost().total_cost == Decimal("80000")


def test_changing_component_product_drops_embedded_product():
    view_model = BomEntryViewModel()
    view_model.load_bom(
        Bom(
            parent_product_id=9,
            components=(
                BomComponent(7, Decimal("2"), component_product=product(id=7)),
            ),
        )
    )

    component = view_model.update_component(0, component_product_id=8)

    assert component.component_product is None
    assert component.quantity == Decimal("2")
    assert view_model.compute_cost().total_cost == 0


def test_validate_and_build_request():
    view_model = BomEntryViewModel()
    with pytest.raises(BomValidationError):
        view_model.validate()

    view_model.start_new(9)
    with pytest.raises(BomValidationError):
        view_model.validate()

    view_model.update_component(view_model.add_component(), component_product_id=7, quantity=2)

    assert view_model.build_request() == {
        "parent_product_id": 9,
        "components": [{"component_product_id": 7, "quantity": Decimal("2")}],
    }


def test_remove_component_out_of_range():
    view_model = BomEntryViewModel()

    with pytest.raises(IndexError):
        view_model.remove_component(0)
