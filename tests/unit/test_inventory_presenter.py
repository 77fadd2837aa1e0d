import logging
from decimal import Decimal
from typing import List, Optional

from orderdesk.domain.inventory_models import (
    InventoryHistoryEntry,
    InventoryReceipt,
    InventoryReceiptItem,
)
from orderdesk.exceptions import ApiError, NetworkError
from orderdesk.presenter import InventoryPresenter
from tests.factories import product


def _receipt():
    return InventoryReceipt(
        id=3,
        code="PNK00003",
        items=(
            InventoryReceiptItem(id=1, product_id=7, quantity=Decimal("2"), unit_cost=Decimal("38500")),
            InventoryReceiptItem(id=2, product_id=8, quantity=Decimal("4"), unit_cost=None),
            InventoryReceiptItem(id=3, product_id=7, quantity=Decimal("1"), unit_cost=Decimal("40000")),
        ),
    )


class FakeRepository:
    def __init__(self):
        self.receipts = {"PNK00003": _receipt()}
        self.product_lookups: List[int] = []
        self.error: Optional[Exception] = None
        self.product_error: Optional[Exception] = None

    def list_inventory_history(self, product_id):
        if self.error:
            raise self.error
        return [
            InventoryHistoryEntry(
                id=1, product_id=product_id, quantity=Decimal("5"), final_quantity=Decimal("17")
            )
        ]

    def list_inventory_receipts(self):
        if self.error:
            raise self.error
        return [InventoryReceipt(id=3, code="PNK00003", total_items=3)]

    def fetch_inventory_receipt(self, code):
        if self.error:
            raise self.error
        return self.receipts.get(code)

    def fetch_product(self, product_id):
        self.product_lookups.append(product_id)
        if self.product_error and product_id == 8:
            raise self.product_error
        return product(id=product_id)


class FakeView:
    def __init__(self):
        self.histories = []
        self.receipt_lists = []
        self.receipts = []
        self.status_messages: List[tuple] = []

    def show_history(self, product_id, entries):
        self.histories.append((product_id, entries))

    def show_receipts(self, receipts):
        self.receipt_lists.append(receipts)

    def show_receipt(self, detail):
        self.receipts.append(detail)

    def show_status(self, message, timeout=3000, level="info"):
        self.status_messages.append((message, level))


def _presenter():
    view, repository = FakeView(), FakeRepository()
    presenter = InventoryPresenter(view, repository, logger=logging.getLogger("test_inventory"))
    return presenter, view, repository


def test_load_history_and_receipts():
    presenter, view, _ = _presenter()

    entries = presenter.load_history(7)
    receipts = presenter.load_receipts()

    assert view.histories == [(7, entries)]
    assert entries[0].final_quantity == Decimal("17")
    assert [r.code for r in receipts] == ["PNK00003"]
    assert view.receipt_lists == [receipts]


def test_history_failure_is_reported():
    presenter, view, repository = _presenter()
    repository.error = NetworkError("offline")

    assert presenter.load_history(7) == ()
    assert presenter.load_receipts() == ()
    assert view.status_messages == [
        ("Could not load stock history: offline", "error"),
        ("Could not load inventory receipts: offline", "error"),
    ]


def test_load_receipt_totals_items_and_resolves_each_product_once():
    presenter, view, repository = _presenter()

    detail = presenter.load_receipt("PNK00003")

    assert detail.row_totals == (Decimal("77000"), Decimal("0"), Decimal("40000"))
    assert detail.total_value == Decimal("117000")
    assert repository.product_lookups == [7, 8]
    assert detail.products[8].id == 8
    assert view.receipts == [detail]


def test_receipt_with_unresolvable_product_still_shows():
    presenter, view, repository = _presenter()
    repository.product_error = ApiError("Product not found", status=404)

    detail = presenter.load_receipt("PNK00003")

    assert detail.products[8] is None
    assert detail.products[7] is not None
    assert view.receipts == [detail]


def test_missing_receipt_warns():
    presenter, view, _ = _presenter()

    assert presenter.load_receipt("PNK09999") is None
    assert view.receipts == []
    assert view.status_messages == [("Receipt PNK09999 not found.", "warning")]
