"""Presenter layer modules."""

from .bom_presenter import BomPresenter, BomView
from .catalog_presenter import CatalogPresenter, CatalogView
from .inventory_presenter import InventoryPresenter, InventoryView, ReceiptDetail
from .order_entry_presenter import OrderEntryPresenter, OrderEntryView, SubmitOutcome
from .receipt_entry_presenter import ReceiptEntryPresenter, ReceiptEntryView

__all__ = [
    "BomPresenter",
    "BomView",
    "CatalogPresenter",
    "CatalogView",
    "InventoryPresenter",
    "InventoryView",
    "OrderEntryPresenter",
    "OrderEntryView",
    "ReceiptDetail",
    "ReceiptEntryPresenter",
    "ReceiptEntryView",
    "SubmitOutcome",
]
