"""Product lookup cache shared by the repository and form layers."""
from __future__ import annotations

import logging
import threading
from decimal import Decimal
from typing import Callable, Dict, Iterable, Optional

from orderdesk.domain.catalog_models import Product


class ProductCacheController:
    """Coordinate background warming and simple invalidation for product lookups."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._cache: Dict[int, Product] = {}
        self._thread: Optional[threading.Thread] = None
        self._preloaded = False
        self._lock = threading.Lock()
        # Stores (product) and invalidations (None) made while a preload runs.
        self._pending: Optional[Dict[int, Optional[Product]]] = None

    @property
    def preloaded(self) -> bool:
        return self._preloaded

    def get(self, product_id: int) -> Optional[Product]:
        if not product_id:
            return None
        with self._lock:
            return self._cache.get(int(product_id))

    def all(self) -> list[Product]:
        with self._lock:
            return list(self._cache.values())

    def costs(self) -> Dict[int, Decimal]:
        """Return product cost by product id."""
        with self._lock:
            return {product_id: product.cost for product_id, product in self._cache.items()}

    def store(self, product: Product) -> None:
        if not product or not product.id:
            return
        with self._lock:
            self._cache[product.id] = product
            if self._pending is not None:
                self._pending[product.id] = product

    def replace_all(self, products: Iterable[Product]) -> None:
        fresh = {product.id: product for product in products if product.id}
        with self._lock:
            self._cache = fresh
            self._preloaded = True

    def invalidate(self, product_id: int) -> None:
        if not product_id:
            return
        product_id = int(product_id)
        with self._lock:
            self._cache.pop(product_id, None)
            if self._pending is not None:
                self._pending[product_id] = None

    def clear(self) -> None:
        with self._lock:
            self._cache = {}
            self._preloaded = False

    def start_preload(self, loader: Callable[[], Iterable[Product]]) -> None:
        """Warm the cache in the background using ``loader``.

        Products stored or invalidated while the loader runs win over the
        loaded snapshot.
        """
        if self._preloaded:
            return
        if self._thread and self._thread.is_alive():
            return
        with self._lock:
            self._pending = {}

        def _worker() -> None:
            try:
                products = list(loader())
            except Exception as exc:
                with self._lock:
                    self._pending = None
                self._logger.warning("Product cache preload failed: %s", exc)
                return
            self._apply_preload(products)
            self._logger.debug("Preloaded product cache with %s products", len(products))

        thread = threading.Thread(target=_worker, name="ProductCacheWarmup", daemon=True)
        self._thread = thread
        thread.start()

    def _apply_preload(self, products: Iterable[Product]) -> None:
        fresh = {product.id: product for product in products if product.id}
        with self._lock:
            for product_id, product in (self._pending or {}).items():
                if product is None:
                    fresh.pop(product_id, None)
                else:
                    fresh[product_id] = product
            self._pending = None
            self._cache = fresh
            self._preloaded = True
