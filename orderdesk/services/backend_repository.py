"""Repository abstraction for the entry presenters."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from orderdesk.domain.catalog_models import Bom, Category, Product, UnitOfMeasure
from orderdesk.domain.inventory_models import Inventory, InventoryHistoryEntry, InventoryReceipt
from orderdesk.infrastructure.logger import ApiOperation
from orderdesk.infrastructure.product_cache import ProductCacheController
from orderdesk.services.api_client import BackendApiClient


class BackendRepository(Protocol):
    """Interface exposing the backend operations required by the entry forms."""

    def list_products(self, category_ids: Optional[Iterable[int]] = None) -> Sequence[Product]:
        ...

    def fetch_product(self, product_id: int) -> Optional[Product]:
        ...

    def save_product(self, payload: Mapping[str, Any], *, update: bool) -> Product:
        ...

    def list_categories(self) -> Sequence[Category]:
        ...

    def list_units(self) -> Sequence[UnitOfMeasure]:
        ...

    def fetch_inventory(self, product_id: int) -> Optional[Inventory]:
        ...

    def adjust_inventory(self, product_id: int, payload: Mapping[str, Any]) -> Inventory:
        ...

    def list_inventory_history(self, product_id: int) -> Sequence[InventoryHistoryEntry]:
        ...

    def create_order(self, payload: Mapping[str, Any]) -> Any:
        ...

    def create_inventory_receipt(self, payload: Mapping[str, Any]) -> Any:
        ...

    def list_inventory_receipts(self) -> Sequence[InventoryReceipt]:
        ...

    def fetch_inventory_receipt(self, code: str) -> Optional[InventoryReceipt]:
        ...

    def fetch_bom(self, parent_product_id: int) -> Optional[Bom]:
        ...

    def list_boms(self) -> Sequence[Bom]:
        ...

    def list_boms_using(self, component_product_id: int) -> Sequence[Bom]:
        ...

    def save_bom(self, payload: Mapping[str, Any], *, update: bool) -> Any:
        ...

    def delete_bom(self, parent_product_id: int) -> None:
        ...


class ApiBackendRepository:
    """Adapter that wraps :class:`BackendApiClient` with a product cache."""

    def __init__(
        self,
        client: BackendApiClient,
        cache: Optional[ProductCacheController] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)
        self._cache = cache or ProductCacheController(logger=self._logger)

    @property
    def cache(self) -> ProductCacheController:
        return self._cache

    def warm_cache(self) -> None:
        """Load the product list in the background."""
        self._cache.start_preload(self._load_all_products)

    def _load_all_products(self) -> list[Product]:
        return [Product.from_api(item) for item in self._client.list_products()]

    def list_products(self, category_ids: Optional[Iterable[int]] = None) -> Sequence[Product]:
        with ApiOperation("list products", self._logger):
            raw = self._client.list_products(category_ids)
        products = [Product.from_api(item) for item in raw]
        if category_ids:
            for product in products:
                self._cache.store(product)
        else:
            self._cache.replace_all(products)
        return products

    def fetch_product(self, product_id: int) -> Optional[Product]:
        cached = self._cache.get(product_id)
        if cached is not None:
            return cached
        with ApiOperation(f"fetch product {product_id}", self._logger):
            raw = self._client.get_product(product_id)
        if not raw:
            return None
        product = Product.from_api(raw)
        self._cache.store(product)
        return product

    def save_product(self, payload: Mapping[str, Any], *, update: bool) -> Product:
        action = "update" if update else "create"
        with ApiOperation(f"{action} product {payload.get('name')!r}", self._logger):
            if update:
                raw = self._client.update_product(payload)
            else:
                raw = self._client.create_product(payload)
        raw = raw or {}
        product = Product.from_api(raw.get("product") or raw)
        self._cache.store(product)
        return product

    def list_categories(self) -> Sequence[Category]:
        with ApiOperation("list categories", self._logger):
            raw = self._client.list_categories()
        return [Category.from_api(item) for item in raw]

    def list_units(self) -> Sequence[UnitOfMeasure]:
        with ApiOperation("list units", self._logger):
            raw = self._client.list_units()
        return [UnitOfMeasure.from_api(item) for item in raw]

    def fetch_inventory(self, product_id: int) -> Optional[Inventory]:
        with ApiOperation(f"fetch inventory of product {product_id}", self._logger):
            raw = self._client.get_product_inventory(product_id)
        return Inventory.from_api(raw) if raw else None

    def adjust_inventory(self, product_id: int, payload: Mapping[str, Any]) -> Inventory:
        with ApiOperation(f"adjust inventory of product {product_id}", self._logger):
            raw = self._client.update_inventory_quantity(product_id, payload)
        # Cached products embed the old stock level and version.
        self._cache.invalidate(product_id)
        return Inventory.from_api(raw or {})

    def list_inventory_history(self, product_id: int) -> Sequence[InventoryHistoryEntry]:
        with ApiOperation(f"list inventory history of product {product_id}", self._logger):
            raw = self._client.list_inventory_histories(product_id)
        return [InventoryHistoryEntry.from_api(item) for item in raw]

    def create_order(self, payload: Mapping[str, Any]) -> Any:
        with ApiOperation("create order", self._logger):
            return self._client.create_order(payload)

    def create_inventory_receipt(self, payload: Mapping[str, Any]) -> Any:
        with ApiOperation("create inventory receipt", self._logger):
            result = self._client.create_inventory_receipt(payload)
        # Receipts change stock levels embedded in cached products.
        for item in payload.get("items") or ():
            self._cache.invalidate(item.get("product_id"))
        return result

    def list_inventory_receipts(self) -> Sequence[InventoryReceipt]:
        with ApiOperation("list inventory receipts", self._logger):
            raw = self._client.list_inventory_receipts()
        return [InventoryReceipt.from_api(item) for item in raw]

    def fetch_inventory_receipt(self, code: str) -> Optional[InventoryReceipt]:
        with ApiOperation(f"fetch inventory receipt {code}", self._logger):
            raw = self._client.get_inventory_receipt(code)
        return InventoryReceipt.from_api(raw) if raw else None

    def fetch_bom(self, parent_product_id: int) -> Optional[Bom]:
        with ApiOperation(f"fetch BOM {parent_product_id}", self._logger):
            raw = self._client.get_bom(parent_product_id)
        return Bom.from_api(raw) if raw else None

    def list_boms(self) -> Sequence[Bom]:
        with ApiOperation("list BOMs", self._logger):
            raw = self._client.list_boms()
        return [Bom.from_api(item) for item in raw]

    def list_boms_using(self, component_product_id: int) -> Sequence[Bom]:
        with ApiOperation(f"list BOMs using product {component_product_id}", self._logger):
            raw = self._client.list_boms_by_component(component_product_id)
        return [Bom.from_api(item) for item in raw]

    def save_bom(self, payload: Mapping[str, Any], *, update: bool) -> Any:
        action = "update" if update else "create"
        with ApiOperation(f"{action} BOM {payload.get('parent_product_id')}", self._logger):
            if update:
                return self._client.update_bom(payload)
            return self._client.create_bom(payload)

    def delete_bom(self, parent_product_id: int) -> None:
        with ApiOperation(f"delete BOM {parent_product_id}", self._logger):
            self._client.delete_bom(parent_product_id)
