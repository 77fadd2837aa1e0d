"""Presenter for the bill-of-materials dialog."""
from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence

from orderdesk.domain.catalog_models import Bom
from orderdesk.domain.pricing_models import BomCostSummary
from orderdesk.exceptions import ServiceError, ValidationError
from orderdesk.infrastructure.product_cache import ProductCacheController
from orderdesk.presenter.order_entry_presenter import SubmitOutcome
from orderdesk.services.backend_repository import BackendRepository
from orderdesk.ui.view_models.bom_entry_view_model import BomEntryViewModel


class BomView(Protocol):
    def apply_cost(self, summary: BomCostSummary) -> None:
        """Show each component's cost and the recipe total."""

    def show_status(self, message: str, timeout: int = 3000, level: str = "info") -> None:
        """Display a status message to the user."""


class BomPresenter:
    """Orchestrates BOM creation, editing and deletion."""

    def __init__(
        self,
        view: BomView,
        repository: BackendRepository,
        *,
        cache: Optional[ProductCacheController] = None,
        view_model: Optional[BomEntryViewModel] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._view = view
        self._repository = repository
        self._cache = cache
        self._view_model = view_model or BomEntryViewModel()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def view_model(self) -> BomEntryViewModel:
        return self._view_model

    def new_bom(self, parent_product_id: int = 0) -> None:
        self._view_model.start_new(parent_product_id)
        self.refresh_cost()

    def edit_bom(self, parent_product_id: int) -> bool:
        """Load the BOM of ``parent_product_id`` into the form."""
        try:
            bom = self._repository.fetch_bom(parent_product_id)
        except ServiceError as exc:
            self._view.show_status(f"Could not load BOM: {exc}", 5000, level="error")
            return False
        if bom is None:
            self._view.show_status(f"No BOM for product {parent_product_id}.", 3000, level="warning")
            return False
        self._view_model.load_bom(bom)
        self.refresh_cost()
        return True

    def add_component(self) -> int:
        index = self._view_model.add_component()
        self.refresh_cost()
        return index

    def remove_component(self, index: int) -> None:
        self._view_model.remove_component(index)
        self.refresh_cost()

    def update_component(self, index: int, **changes: Any) -> None:
        self._view_model.update_component(index, **changes)
        self.refresh_cost()

    def component_usage(self, component_product_id: int) -> Sequence[Bom]:
        """Return the BOMs that consume ``component_product_id``."""
        try:
            return self._repository.list_boms_using(component_product_id)
        except ServiceError as exc:
            self._view.show_status(f"Could not load BOM usage: {exc}", 5000, level="error")
            return ()

    def refresh_cost(self) -> BomCostSummary:
        costs = self._cache.costs() if self._cache is not None else None
        summary = self._view_model.compute_cost(costs)
        self._view.apply_cost(summary)
        return summary

    def save(self) -> SubmitOutcome:
        try:
            payload = self._view_model.build_request()
        except ValidationError as exc:
            self._view.show_status(exc.message, 4000, level="warning")
            return SubmitOutcome(success=False, message=exc.message)

        updating = self._view_model.editing
        try:
            result = self._repository.save_bom(payload, update=updating)
        except ServiceError as exc:
            message = "Could not save the BOM."
            self._logger.error("BOM save failed: %s", exc)
            self._view.show_status(f"{message} {exc}", 5000, level="error")
            return SubmitOutcome(success=False, message=message, error_detail=str(exc))

        message = "BOM updated." if updating else "BOM created."
        self._view.show_status(message, 3000)
        return SubmitOutcome(success=True, message=message, result=result)

    def delete(self, parent_product_id: int) -> bool:
        try:
            self._repository.delete_bom(parent_product_id)
        except ServiceError as exc:
            self._view.show_status(f"Could not delete BOM: {exc}", 5000, level="error")
            return False
        self._view.show_status("BOM deleted.", 3000)
        return True
