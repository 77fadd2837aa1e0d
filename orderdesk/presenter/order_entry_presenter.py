"""Presenter for the create-order experience."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

from orderdesk.domain.catalog_models import Product
from orderdesk.domain.pricing_models import OrderAggregate
from orderdesk.exceptions import ServiceError, ValidationError
from orderdesk.services.backend_repository import BackendRepository
from orderdesk.services.settings_service import SettingsService
from orderdesk.ui.view_models.order_entry_view_model import OrderEntryViewModel


class OrderEntryView(Protocol):
    """Interface implemented by the order form so the presenter can talk to it."""

    def apply_totals(self, totals: OrderAggregate) -> None:
        """Update row amounts, totals and the profit/loss banner."""

    def show_products(self, products: Sequence[Product]) -> None:
        """Fill the product pickers."""

    def show_status(self, message: str, timeout: int = 3000, level: str = "info") -> None:
        """Display a status message to the user."""


@dataclass(frozen=True)
class SubmitOutcome:
    """Result of attempting to submit a form to the backend."""

    success: bool
    message: str
    result: Any = None
    error_detail: Optional[str] = None
    row: Optional[int] = None


class OrderEntryPresenter:
    """Orchestrates order-entry workflows independent of any widget toolkit."""

    def __init__(
        self,
        view: OrderEntryView,
        repository: BackendRepository,
        *,
        view_model: Optional[OrderEntryViewModel] = None,
        settings: Optional[SettingsService] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._view = view
        self._repository = repository
        self._view_model = view_model or OrderEntryViewModel()
        self._settings = settings
        self._logger = logger or logging.getLogger(__name__)

    @property
    def view_model(self) -> OrderEntryViewModel:
        return self._view_model

    def load_products(self) -> Sequence[Product]:
        """Fetch the product list and hand it to the view."""
        try:
            products = self._repository.list_products()
        except ServiceError as exc:
            self._view.show_status(f"Could not load products: {exc}", 5000, level="error")
            return ()
        self._view.show_products(products)
        return products

    def refresh_totals(self) -> OrderAggregate:
        """Recompute totals from the current form state and push them to the view."""
        totals = self._view_model.compute_aggregate()
        self._view.apply_totals(totals)
        return totals

    def add_item(self) -> int:
        index = self._view_model.add_item()
        self._after_change()
        return index

    def remove_item(self, index: int) -> None:
        self._view_model.remove_item(index)
        self._after_change()

    def select_product(self, index: int, product_id: int) -> None:
        """Pick a product for a row, auto-filling its cost price."""
        product = None
        if product_id:
            try:
                product = self._repository.fetch_product(product_id)
            except ServiceError as exc:
                self._logger.warning("Product %s lookup failed: %s", product_id, exc)
            if product is None:
                self._view.show_status(f"Product {product_id} not found.", 2000, level="warning")
        self._view_model.select_product(index, product_id, product)
        self._after_change()

    def update_item(self, index: int, field: str, value: Any) -> None:
        self._view_model.update_item(index, field, value)
        self._after_change()

    def update_order_inputs(self, **inputs: Any) -> None:
        self._view_model.set_order_inputs(**inputs)
        self._after_change()

    def submit(self) -> SubmitOutcome:
        """Validate the form and create the order on the backend."""
        try:
            payload = self._view_model.build_request()
        except ValidationError as exc:
            self._view.show_status(exc.message, 4000, level="warning")
            return SubmitOutcome(success=False, message=exc.message, row=exc.row)

        try:
            result = self._repository.create_order(payload)
        except ServiceError as exc:
            message = "Could not create the order."
            self._logger.error("Order submission failed: %s", exc)
            self._view.show_status(f"{message} {exc}", 5000, level="error")
            return SubmitOutcome(success=False, message=message, error_detail=str(exc))

        self._view_model.reset()
        self._clear_draft()
        self.refresh_totals()
        self._view.show_status("Order created successfully.", 3000)
        return SubmitOutcome(success=True, message="Order created successfully.", result=result)

    # ------------------------------------------------------------------ #
    # Drafts
    # ------------------------------------------------------------------ #
    def restore_draft(self) -> bool:
        """Reload an unfinished order saved by a previous session."""
        if self._settings is None:
            return False
        draft = self._settings.load_order_draft()
        if not draft or not self._view_model.load_draft(draft):
            return False
        self.refresh_totals()
        self._view.show_status("Restored unfinished order.", 2000)
        return True

    def save_draft(self) -> None:
        if self._settings is None:
            return
        self._settings.save_order_draft(self._view_model.to_draft())

    def _clear_draft(self) -> None:
        if self._settings is not None:
            self._settings.clear_order_draft()

    def _after_change(self) -> None:
        self.refresh_totals()
        self.save_draft()
