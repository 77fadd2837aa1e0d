"""Thin JSON client for the OrderDesk REST backend.

Every backend response is wrapped in an envelope::

    {"success": true, "data": {...}, "message": "...", "errors": [{"message": "..."}]}

The client unwraps ``data`` and turns failures into :class:`ApiError` or
:class:`NetworkError`.
"""
from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional

from orderdesk.exceptions import ApiError, NetworkError
from orderdesk.infrastructure.app_constants import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_API_BASE_URL,
    DEFAULT_API_TIMEOUT_SEC,
)
from orderdesk.infrastructure.logger import sanitize_for_logging

DEFAULT_HEADERS = {
    "User-Agent": f"{APP_NAME}/{APP_VERSION}",
    "Accept": "application/json",
    "Content-Type": "application/json",
}


def extract_error_message(payload: Any, fallback: str) -> str:
    """Pick the most specific error text from a backend error payload."""
    if not isinstance(payload, Mapping):
        return fallback
    errors = payload.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, Mapping) and first.get("message"):
            return str(first["message"])
        if isinstance(first, str) and first:
            return first
    message = payload.get("message")
    if message:
        return str(message)
    return fallback


def _json_default(value: Any):
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_payload(payload: Any) -> bytes:
    """Serialize a request payload; decimals become JSON numbers."""
    return json.dumps(payload, default=_json_default).encode("utf-8")


class BackendApiClient:
    """Issue JSON requests against the backend and unwrap its envelope."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        *,
        timeout: float = DEFAULT_API_TIMEOUT_SEC,
        headers: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = dict(DEFAULT_HEADERS)
        if headers:
            self._headers.update(headers)
        self._logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #
    def request(self, method: str, path: str, payload: Any = None) -> Any:
        """Send a request and return the envelope's ``data`` member."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        body = encode_payload(payload) if payload is not None else None
        req = urllib.request.Request(url, data=body, headers=self._headers, method=method)
        self._logger.debug(
            "%s %s payload=%s", method, url, sanitize_for_logging(payload)
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as exc:
            error_payload = self._read_error_body(exc)
            message = extract_error_message(
                error_payload, f"Request failed with status {exc.code}"
            )
            raise ApiError(message, status=exc.code, payload=error_payload) from exc
        except (urllib.error.URLError, TimeoutError, OSError) as exc:
            raise NetworkError(f"Could not reach backend at {url}: {exc}") from exc

        if not raw.strip():
            return None
        try:
            envelope = json.loads(raw)
        except ValueError as exc:
            raise ApiError(f"Malformed response from {url}") from exc

        if isinstance(envelope, Mapping) and "data" in envelope:
            if envelope.get("success") is False:
                raise ApiError(
                    extract_error_message(envelope, "Request was not successful"),
                    payload=envelope,
                )
            return envelope["data"]
        return envelope

    @staticmethod
    def _read_error_body(exc: urllib.error.HTTPError) -> Any:
        try:
            raw = exc.read().decode("utf-8", errors="replace")
        except (OSError, AttributeError):
            return None
        try:
            return json.loads(raw) if raw else None
        except ValueError:
            return None

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, payload: Any) -> Any:
        return self.request("POST", path, payload)

    def put(self, path: str, payload: Any) -> Any:
        return self.request("PUT", path, payload)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    # ------------------------------------------------------------------ #
    # Products
    # ------------------------------------------------------------------ #
    def list_products(self, category_ids: Optional[Iterable[int]] = None) -> List[Mapping[str, Any]]:
        path = "/products"
        ids = [str(int(cid)) for cid in (category_ids or ())]
        if ids:
            path += "?" + urllib.parse.urlencode({"category": ",".join(ids)}, safe=",")
        data = self.get(path) or {}
        return list(data.get("products") or [])

    def get_product(self, product_id: int) -> Optional[Mapping[str, Any]]:
        data = self.get(f"/products/{int(product_id)}") or {}
        return data.get("product")

    def create_product(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        return self.post("/products", payload)

    def update_product(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        return self.put("/products", payload)

    # ------------------------------------------------------------------ #
    # Stock levels
    # ------------------------------------------------------------------ #
    def get_product_inventory(self, product_id: int) -> Optional[Mapping[str, Any]]:
        return self.get(f"/products/{int(product_id)}/inventories")

    def update_inventory_quantity(self, product_id: int, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        return self.put(f"/products/{int(product_id)}/inventories/quantity", payload)

    def list_inventory_histories(self, product_id: int) -> List[Mapping[str, Any]]:
        data = self.get(f"/products/{int(product_id)}/inventories/histories") or {}
        return list(data.get("inventory_histories") or [])

    # ------------------------------------------------------------------ #
    # Categories and units
    # ------------------------------------------------------------------ #
    def list_categories(self) -> List[Mapping[str, Any]]:
        data = self.get("/categories") or {}
        return list(data.get("categories") or [])

    def get_category(self, category_id: int) -> Optional[Mapping[str, Any]]:
        data = self.get(f"/categories/{int(category_id)}") or {}
        return data.get("category")

    def get_category_by_code(self, code: str) -> Optional[Mapping[str, Any]]:
        data = self.get(f"/categories/code/{urllib.parse.quote(str(code))}") or {}
        return data.get("category")

    def list_units(self) -> List[Mapping[str, Any]]:
        data = self.get("/units") or {}
        return list(data.get("units") or [])

    def get_unit(self, unit_id: int) -> Optional[Mapping[str, Any]]:
        data = self.get(f"/units/{int(unit_id)}") or {}
        return data.get("unit")

    def get_unit_by_code(self, code: str) -> Optional[Mapping[str, Any]]:
        data = self.get(f"/units/code/{urllib.parse.quote(str(code))}") or {}
        return data.get("unit")

    # ------------------------------------------------------------------ #
    # Bills of materials
    # ------------------------------------------------------------------ #
    def list_boms(self) -> List[Mapping[str, Any]]:
        data = self.get("/boms") or {}
        return list(data.get("boms") or [])

    def get_bom(self, parent_product_id: int) -> Optional[Mapping[str, Any]]:
        data = self.get(f"/boms/parent/{int(parent_product_id)}") or {}
        return data.get("bom")

    def list_boms_by_component(self, component_product_id: int) -> List[Mapping[str, Any]]:
        data = self.get(f"/boms/component/{int(component_product_id)}") or {}
        return list(data.get("boms") or [])

    def create_bom(self, payload: Mapping[str, Any]) -> Any:
        return self.post("/boms", payload)

    def update_bom(self, payload: Mapping[str, Any]) -> Any:
        return self.put("/boms", payload)

    def delete_bom(self, parent_product_id: int) -> None:
        self.delete(f"/boms/parent/{int(parent_product_id)}")

    # ------------------------------------------------------------------ #
    # Orders and inventory receipts
    # ------------------------------------------------------------------ #
    def create_order(self, payload: Mapping[str, Any]) -> Any:
        return self.post("/orders", payload)

    def list_inventory_receipts(self) -> List[Mapping[str, Any]]:
        data = self.get("/inventory-receipts") or {}
        return list(data.get("inventory_receipts") or [])

    def get_inventory_receipt(self, code: str) -> Optional[Mapping[str, Any]]:
        data = self.get(f"/inventory-receipts/{urllib.parse.quote(str(code))}") or {}
        return data.get("inventory_receipt")

    def create_inventory_receipt(self, payload: Mapping[str, Any]) -> Any:
        return self.post("/inventory-receipts", payload)
