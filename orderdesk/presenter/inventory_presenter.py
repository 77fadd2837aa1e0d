"""Presenter for stock history and stored inventory receipts."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional, Protocol, Sequence, Tuple

from orderdesk.domain.catalog_models import Product
from orderdesk.domain.inventory_models import InventoryHistoryEntry, InventoryReceipt
from orderdesk.exceptions import ServiceError
from orderdesk.services.backend_repository import BackendRepository
from orderdesk.services.pricing_calculator import compute_receipt_aggregate


@dataclass(frozen=True)
class ReceiptDetail:
    """A receipt with its item products resolved and its value totalled.

    Items without a unit cost count as zero towards the total.
    """

    receipt: InventoryReceipt
    products: Mapping[int, Optional[Product]]
    row_totals: Tuple[Decimal, ...]
    total_value: Decimal


class InventoryView(Protocol):
    def show_history(self, product_id: int, entries: Sequence[InventoryHistoryEntry]) -> None:
        """Show the stock movements of one product."""

    def show_receipts(self, receipts: Sequence[InventoryReceipt]) -> None:
        """Show the list of stored receipts."""

    def show_receipt(self, detail: ReceiptDetail) -> None:
        """Show one receipt with its items."""

    def show_status(self, message: str, timeout: int = 3000, level: str = "info") -> None:
        """Display a status message to the user."""


class InventoryPresenter:
    def __init__(
        self,
        view: InventoryView,
        repository: BackendRepository,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._view = view
        self._repository = repository
        self._logger = logger or logging.getLogger(__name__)

    def load_history(self, product_id: int) -> Sequence[InventoryHistoryEntry]:
        try:
            entries = self._repository.list_inventory_history(product_id)
        except ServiceError as exc:
            self._view.show_status(f"Could not load stock history: {exc}", 5000, level="error")
            return ()
        self._view.show_history(product_id, entries)
        return entries

    def load_receipts(self) -> Sequence[InventoryReceipt]:
        try:
            receipts = self._repository.list_inventory_receipts()
        except ServiceError as exc:
            self._view.show_status(f"Could not load inventory receipts: {exc}", 5000, level="error")
            return ()
        self._view.show_receipts(receipts)
        return receipts

    def load_receipt(self, code: str) -> Optional[ReceiptDetail]:
        """Load one receipt by code, resolving the product of every item."""
        try:
            receipt = self._repository.fetch_inventory_receipt(code)
        except ServiceError as exc:
            self._view.show_status(f"Could not load receipt {code}: {exc}", 5000, level="error")
            return None
        if receipt is None:
            self._view.show_status(f"Receipt {code} not found.", 3000, level="warning")
            return None

        products = {}
        for item in receipt.items:
            if item.product_id in products:
                continue
            try:
                products[item.product_id] = self._repository.fetch_product(item.product_id)
            except ServiceError as exc:
                self._logger.warning("Product %s lookup failed: %s", item.product_id, exc)
                products[item.product_id] = None

        aggregate = compute_receipt_aggregate(receipt.items)
        detail = ReceiptDetail(
            receipt=receipt,
            products=products,
            row_totals=aggregate.row_totals,
            total_value=aggregate.grand_total,
        )
        self._view.show_receipt(detail)
        return detail
