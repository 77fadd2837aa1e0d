"""Presenter for the product catalog: listing, product editing and stock adjustment."""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol, Sequence, Tuple

from orderdesk.domain.catalog_models import Category, Product, UnitOfMeasure
from orderdesk.exceptions import ServiceError, ValidationError
from orderdesk.presenter.order_entry_presenter import SubmitOutcome
from orderdesk.services.backend_repository import BackendRepository
from orderdesk.ui.view_models.product_form_view_model import (
    InventoryAdjustmentViewModel,
    ProductFormViewModel,
)


class CatalogView(Protocol):
    def show_catalog(
        self,
        products: Sequence[Product],
        categories: Sequence[Category],
        units: Sequence[UnitOfMeasure],
    ) -> None:
        """Fill the product table and the category/unit pickers."""

    def show_status(self, message: str, timeout: int = 3000, level: str = "info") -> None:
        """Display a status message to the user."""


class CatalogPresenter:
    """Orchestrates the product list and its create/edit and stock dialogs."""

    def __init__(
        self,
        view: CatalogView,
        repository: BackendRepository,
        *,
        product_form: Optional[ProductFormViewModel] = None,
        inventory_form: Optional[InventoryAdjustmentViewModel] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._view = view
        self._repository = repository
        self._product_form = product_form or ProductFormViewModel()
        self._inventory_form = inventory_form or InventoryAdjustmentViewModel()
        self._logger = logger or logging.getLogger(__name__)
        self._category_filter: Tuple[int, ...] = ()

    @property
    def product_form(self) -> ProductFormViewModel:
        return self._product_form

    @property
    def inventory_form(self) -> InventoryAdjustmentViewModel:
        return self._inventory_form

    def load_catalog(self, category_ids: Optional[Iterable[int]] = None) -> bool:
        """Load products (optionally filtered by category) with categories and units."""
        if category_ids is not None:
            self._category_filter = tuple(int(cid) for cid in category_ids)
        try:
            products = self._repository.list_products(self._category_filter or None)
            categories = self._repository.list_categories()
            units = self._repository.list_units()
        except ServiceError as exc:
            self._view.show_status(f"Could not load data: {exc}", 5000, level="error")
            return False
        self._view.show_catalog(products, categories, units)
        return True

    def new_product(self) -> None:
        self._product_form.start_new()

    def edit_product(self, product: Product) -> None:
        self._product_form.load_product(product)

    def save_product(self) -> SubmitOutcome:
        updating = self._product_form.is_editing
        try:
            payload = self._product_form.build_request()
        except ValidationError as exc:
            self._view.show_status(exc.message, 4000, level="warning")
            return SubmitOutcome(success=False, message=exc.message)

        try:
            product = self._repository.save_product(payload, update=updating)
        except ServiceError as exc:
            message = "Could not update the product." if updating else "Could not create the product."
            self._logger.error("Product save failed: %s", exc)
            self._view.show_status(f"{message} {exc}", 5000, level="error")
            return SubmitOutcome(success=False, message=message, error_detail=str(exc))

        message = "Product updated." if updating else "Product created."
        self._product_form.start_new()
        self._view.show_status(message, 3000)
        self.load_catalog()
        return SubmitOutcome(success=True, message=message, result=product)

    def start_inventory_adjustment(self, product: Product) -> None:
        self._inventory_form.start(product)

    def save_inventory_adjustment(self) -> SubmitOutcome:
        form = self._inventory_form
        try:
            payload = form.build_request()
        except ValidationError as exc:
            self._view.show_status(exc.message, 4000, level="warning")
            return SubmitOutcome(success=False, message=exc.message)

        try:
            inventory = self._repository.adjust_inventory(form.product_id, payload)
        except ServiceError as exc:
            message = "Could not update the stock quantity."
            self._logger.error("Stock adjustment for product %s failed: %s", form.product_id, exc)
            self._view.show_status(f"{message} {exc}", 5000, level="error")
            return SubmitOutcome(success=False, message=message, error_detail=str(exc))

        form.start(None)
        self._view.show_status("Stock quantity updated.", 3000)
        self.load_catalog()
        return SubmitOutcome(success=True, message="Stock quantity updated.", result=inventory)
