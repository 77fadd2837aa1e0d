"""View-model helpers for the entry forms."""

from .bom_entry_view_model import BomEntryViewModel
from .order_entry_view_model import OrderEntryRowState, OrderEntryViewModel
from .product_form_view_model import InventoryAdjustmentViewModel, ProductFormViewModel
from .receipt_entry_view_model import ReceiptEntryRowState, ReceiptEntryViewModel

__all__ = [
    "BomEntryViewModel",
    "InventoryAdjustmentViewModel",
    "OrderEntryRowState",
    "OrderEntryViewModel",
    "ProductFormViewModel",
    "ReceiptEntryRowState",
    "ReceiptEntryViewModel",
]
