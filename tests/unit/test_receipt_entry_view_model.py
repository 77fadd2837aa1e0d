from decimal import Decimal

import pytest

from orderdesk.exceptions import ReceiptValidationError
from orderdesk.ui.view_models import ReceiptEntryViewModel
from tests.factories import product


def _receipt_with_rows():
    view_model = ReceiptEntryViewModel()
    first = view_model.add_item()
    view_model.select_product(first, product(id=7))
    view_model.update_item(first, "quantity", "1.200")
    view_model.update_item(first, "unit_cost", "35.000")
    second = view_model.add_item()
    view_model.select_product(second, product(id=8, name="Jasmine tea"))
    view_model.update_item(second, "quantity", "2,5")
    view_model.update_item(second, "unit_cost", "10.000")
    return view_model


def test_compute_aggregate_parses_typed_text():
    view_model = _receipt_with_rows()

    aggregate = view_model.compute_aggregate()

    assert aggregate.row_totals == (Decimal("42000000"), Decimal("25000"))
    assert aggregate.grand_total == Decimal("42025000")


def test_incomplete_rows_contribute_zero():
    view_model = _receipt_with_rows()
    idx = view_model.add_item()
    view_model.update_item(idx, "quantity", "5")

    aggregate = view_model.compute_aggregate()

    assert aggregate.row_totals[-1] == 0
    assert aggregate.grand_total == Decimal("42025000")


def test_select_product_clears_typed_values():
    view_model = _receipt_with_rows()

    row = view_model.select_product(0, product(id=9))

    assert row.product_id == 9
    assert row.quantity_text == ""
    assert row.unit_cost_text == ""
    assert row.notes == ""


def test_validate_requires_complete_rows():
    view_model = ReceiptEntryViewModel()
    with pytest.raises(ReceiptValidationError):
        view_model.validate()

    view_model = _receipt_with_rows()
    view_model.update_item(1, "unit_cost", "0")
    with pytest.raises(ReceiptValidationError) as excinfo:
        view_model.validate()
    assert excinfo.value.row == 1


def test_build_request_payload():
    view_model = _receipt_with_rows()
    view_model.update_item(0, "notes", "  first batch ")

    payload = view_model.build_request(4, receipt_date="2026-10-19", notes="Supplier A")

    assert payload == {
        "user_id": 4,
        "receipt_date": "2026-10-19",
        "notes": "Supplier A",
        "items": [
            {"product_id": 7, "quantity": Decimal("1200"), "unit_cost": Decimal("35000"), "notes": "first batch"},
            {"product_id": 8, "quantity": Decimal("2.5"), "unit_cost": Decimal("10000")},
        ],
    }


def test_update_item_rejects_unknown_field():
    view_model = _receipt_with_rows()

    with pytest.raises(KeyError):
        view_model.update_item(0, "product_id", 3)
