"""Presenter for the create-inventory-receipt experience."""
from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from orderdesk.domain.pricing_models import ReceiptAggregate
from orderdesk.exceptions import ServiceError, ValidationError
from orderdesk.presenter.order_entry_presenter import SubmitOutcome
from orderdesk.services.backend_repository import BackendRepository
from orderdesk.ui.view_models.receipt_entry_view_model import ReceiptEntryViewModel


class ReceiptEntryView(Protocol):
    def apply_totals(self, totals: ReceiptAggregate) -> None:
        """Update row totals and the grand total."""

    def show_status(self, message: str, timeout: int = 3000, level: str = "info") -> None:
        """Display a status message to the user."""


class ReceiptEntryPresenter:
    """Orchestrates inventory-receipt entry."""

    def __init__(
        self,
        view: ReceiptEntryView,
        repository: BackendRepository,
        *,
        view_model: Optional[ReceiptEntryViewModel] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._view = view
        self._repository = repository
        self._view_model = view_model or ReceiptEntryViewModel()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def view_model(self) -> ReceiptEntryViewModel:
        return self._view_model

    def refresh_totals(self) -> ReceiptAggregate:
        totals = self._view_model.compute_aggregate()
        self._view.apply_totals(totals)
        return totals

    def add_item(self) -> int:
        index = self._view_model.add_item()
        self.refresh_totals()
        return index

    def remove_item(self, index: int) -> None:
        self._view_model.remove_item(index)
        self.refresh_totals()

    def select_product(self, index: int, product_id: int) -> None:
        product = None
        if product_id:
            try:
                product = self._repository.fetch_product(product_id)
            except ServiceError as exc:
                self._logger.warning("Product %s lookup failed: %s", product_id, exc)
        self._view_model.select_product(index, product)
        self.refresh_totals()

    def update_item(self, index: int, field: str, value: Any) -> None:
        self._view_model.update_item(index, field, value)
        self.refresh_totals()

    def submit(
        self,
        user_id: int,
        *,
        receipt_date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> SubmitOutcome:
        """Validate the receipt and create it on the backend."""
        try:
            payload = self._view_model.build_request(
                user_id, receipt_date=receipt_date, notes=notes
            )
        except ValidationError as exc:
            self._view.show_status(exc.message, 4000, level="warning")
            return SubmitOutcome(success=False, message=exc.message, row=exc.row)

        try:
            result = self._repository.create_inventory_receipt(payload)
        except ServiceError as exc:
            message = "Could not create the inventory receipt."
            self._logger.error("Receipt submission failed: %s", exc)
            self._view.show_status(f"{message} {exc}", 5000, level="error")
            return SubmitOutcome(success=False, message=message, error_detail=str(exc))

        code = result.get("code") if isinstance(result, dict) else None
        message = f"Inventory receipt {code} created." if code else "Inventory receipt created."
        self._view_model.clear()
        self.refresh_totals()
        self._view.show_status(message, 3000)
        return SubmitOutcome(success=True, message=message, result=result)
