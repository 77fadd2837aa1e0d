import io
import json
import logging
import urllib.error
from decimal import Decimal

import pytest

from orderdesk.exceptions import ApiError, NetworkError
from orderdesk.services.api_client import (
    BackendApiClient,
    encode_payload,
    extract_error_message,
)


class _FakeResponse:
    def __init__(self, body):
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def _patch_urlopen(monkeypatch, handler):
    captured = []

    def _urlopen(req, timeout=None):
        captured.append((req, timeout))
        return handler(req)

    monkeypatch.setattr(
        "orderdesk.services.api_client.urllib.request.urlopen", _urlopen
    )
    return captured


def _envelope(data, success=True, message="OK"):
    return json.dumps({"success": success, "data": data, "message": message}).encode("utf-8")


def _client():
    return BackendApiClient(
        "http://backend.test/api/v1/",
        timeout=4,
        logger=logging.getLogger("test_api_client"),
    )


def test_request_unwraps_envelope_data(monkeypatch):
    captured = _patch_urlopen(
        monkeypatch,
        lambda req: _FakeResponse(_envelope({"product": {"id": 7, "name": "Oolong"}})),
    )

    product = _client().get_product(7)

    assert product == {"id": 7, "name": "Oolong"}
    req, timeout = captured[0]
    assert req.full_url == "http://backend.test/api/v1/products/7"
    assert req.get_method() == "GET"
    assert timeout == 4


def test_list_products_sends_category_filter(monkeypatch):
    captured = _patch_urlopen(
        monkeypatch,
        lambda req: _FakeResponse(_envelope({"products": [{"id": 1}, {"id": 2}]})),
    )

    products = _client().list_products([3, 5])

    assert [p["id"] for p in products] == [1, 2]
    assert captured[0][0].full_url.endswith("/products?category=3,5")


def test_post_encodes_decimal_amounts(monkeypatch):
    captured = _patch_urlopen(
        monkeypatch, lambda req: _FakeResponse(_envelope({"id": 9, "code": "DH00009"}))
    )

    result = _client().create_order(
        {"customer_id": 3, "items": [{"quantity": Decimal("1.5"), "selling_price": Decimal("50000")}]}
    )

    assert result == {"id": 9, "code": "DH00009"}
    req = captured[0][0]
    assert req.get_method() == "POST"
    assert json.loads(req.data) == {
        "customer_id": 3,
        "items": [{"quantity": 1.5, "selling_price": 50000}],
    }


def test_http_error_uses_backend_message(monkeypatch):
    def _raise(req):
        body = io.BytesIO(
            json.dumps(
                {"success": False, "message": "Validation failed",
                 "errors": [{"field": "customer_id", "message": "Customer not found"}]}
            ).encode("utf-8")
        )
        raise urllib.error.HTTPError(req.full_url, 404, "Not Found", {}, body)

    _patch_urlopen(monkeypatch, _raise)

    with pytest.raises(ApiError) as excinfo:
        _client().create_order({"customer_id": 99})

    assert str(excinfo.value) == "Customer not found"
    assert excinfo.value.status == 404


def test_http_error_without_json_body_falls_back_to_status(monkeypatch):
    def _raise(req):
        raise urllib.error.HTTPError(req.full_url, 502, "Bad Gateway", {}, io.BytesIO(b"<html>"))

    _patch_urlopen(monkeypatch, _raise)

    with pytest.raises(ApiError) as excinfo:
        _client().list_boms()

    assert str(excinfo.value) == "Request failed with status 502"


def test_unsuccessful_envelope_raises(monkeypatch):
    _patch_urlopen(
        monkeypatch,
        lambda req: _FakeResponse(_envelope(None, success=False, message="BOM already exists")),
    )

    with pytest.raises(ApiError, match="BOM already exists"):
        _client().create_bom({"parent_product_id": 1, "components": []})


def test_unreachable_backend_raises_network_error(monkeypatch):
    def _raise(req):
        raise urllib.error.URLError("connection refused")

    _patch_urlopen(monkeypatch, _raise)

    with pytest.raises(NetworkError):
        _client().list_products()


def test_malformed_body_raises_api_error(monkeypatch):
    _patch_urlopen(monkeypatch, lambda req: _FakeResponse(b"not json"))

    with pytest.raises(ApiError, match="Malformed response"):
        _client().list_inventory_receipts()


def test_empty_body_returns_none(monkeypatch):
    captured = _patch_urlopen(monkeypatch, lambda req: _FakeResponse(b""))

    assert _client().delete_bom(4) is None
    assert captured[0][0].get_method() == "DELETE"
    assert captured[0][0].full_url.endswith("/boms/parent/4")


def test_extract_error_message_variants():
    assert extract_error_message({"errors": ["first"]}, "fallback") == "first"
    assert extract_error_message({"errors": [], "message": "top"}, "fallback") == "top"
    assert extract_error_message(None, "fallback") == "fallback"
    assert extract_error_message({}, "fallback") == "fallback"


def test_encode_payload_rejects_unknown_types():
    assert encode_payload({"amount": Decimal("2.50")}) == b'{"amount": 2.5}'
    with pytest.raises(TypeError):
        encode_payload({"when": object()})


def test_update_inventory_quantity_puts_to_product_path(monkeypatch):
    captured = _patch_urlopen(
        monkeypatch,
        lambda req: _FakeResponse(_envelope({"id": 1, "product_id": 7, "quantity": 12, "version": "v2"})),
    )

    result = _client().update_inventory_quantity(7, {"quantity": Decimal("12"), "version": "v1"})

    req = captured[0][0]
    assert req.full_url == "http://backend.test/api/v1/products/7/inventories/quantity"
    assert req.get_method() == "PUT"
    assert json.loads(req.data.decode("utf-8")) == {"quantity": 12, "version": "v1"}
    assert result["version"] == "v2"


@pytest.mark.parametrize(
    "call, url, key, data",
    [
        (lambda c: c.list_inventory_histories(7), "/products/7/inventories/histories", None,
         {"inventory_histories": [{"id": 1}]}),
        (lambda c: c.list_categories(), "/categories", None, {"categories": [{"id": 1}]}),
        (lambda c: c.get_category_by_code("TRA XANH"), "/categories/code/TRA%20XANH", "category",
         {"category": {"id": 1}}),
        (lambda c: c.get_unit_by_code("KG"), "/units/code/KG", "unit", {"unit": {"id": 1}}),
        (lambda c: c.list_boms_by_component(7), "/boms/component/7", None, {"boms": [{"id": 1}]}),
        (lambda c: c.list_inventory_receipts(), "/inventory-receipts", None,
         {"inventory_receipts": [{"id": 1}]}),
        (lambda c: c.get_inventory_receipt("PNK00001"), "/inventory-receipts/PNK00001",
         "inventory_receipt", {"inventory_receipt": {"id": 1}}),
    ],
)
def test_lookup_endpoints_unwrap_their_collections(monkeypatch, call, url, key, data):
    captured = _patch_urlopen(monkeypatch, lambda req: _FakeResponse(_envelope(data)))

    result = call(_client())

    req = captured[0][0]
    assert req.full_url == "http://backend.test/api/v1" + url
    assert req.get_method() == "GET"
    if key:
        assert result == {"id": 1}
    else:
        assert result == [{"id": 1}]


def test_product_create_and_update_use_post_and_put(monkeypatch):
    captured = _patch_urlopen(monkeypatch, lambda req: _FakeResponse(_envelope({"id": 9})))
    client = _client()

    client.create_product({"name": "Sencha", "cost": Decimal("1000")})
    client.update_product({"id": 9, "name": "Sencha", "cost": Decimal("1000")})

    assert [(req.get_method(), req.full_url) for req, _ in captured] == [
        ("POST", "http://backend.test/api/v1/products"),
        ("PUT", "http://backend.test/api/v1/products"),
    ]
