import logging
import threading
from decimal import Decimal

from orderdesk.infrastructure.product_cache import ProductCacheController
from tests.factories import product


def _patch_thread_to_run_inline(monkeypatch):
    class _ImmediateThread:
        def __init__(self, target=None, name=None, daemon=None):
            self._target = target

        def start(self):
            if self._target:
                self._target()

        def is_alive(self):
            return False

    monkeypatch.setattr(
        "orderdesk.infrastructure.product_cache.threading.Thread",
        _ImmediateThread,
    )


def test_preload_replaces_cache(monkeypatch):
    _patch_thread_to_run_inline(monkeypatch)
    cache = ProductCacheController(logger=logging.getLogger("test_cache"))
    cache.store(product(id=99))

    cache.start_preload(lambda: [product(id=7), product(id=8, cost=Decimal("12000"))])

    assert cache.preloaded is True
    assert cache.get(99) is None
    assert cache.costs() == {7: Decimal("40000"), 8: Decimal("12000")}


def test_preload_runs_once(monkeypatch):
    _patch_thread_to_run_inline(monkeypatch)
    cache = ProductCacheController()
    calls = []

    def _loader():
        calls.append(1)
        return [product()]

    cache.start_preload(_loader)
    cache.start_preload(_loader)

    assert calls == [1]


def test_failed_preload_leaves_cache_cold(monkeypatch, caplog):
    _patch_thread_to_run_inline(monkeypatch)
    cache = ProductCacheController(logger=logging.getLogger("test_cache_fail"))

    def _loader():
        raise OSError("backend down")

    with caplog.at_level(logging.WARNING, logger="test_cache_fail"):
        cache.start_preload(_loader)

    assert cache.preloaded is False
    assert "preload failed" in caplog.text


def test_store_invalidate_and_clear():
    cache = ProductCacheController()
    cache.store(product(id=7))
    cache.store(product(id=0))

    assert [p.id for p in cache.all()] == [7]
    assert cache.get(None) is None

    cache.invalidate(7)
    assert cache.get(7) is None

    cache.replace_all([product(id=8)])
    cache.clear()
    assert cache.all() == []
    assert cache.preloaded is False


def test_preload_keeps_products_stored_while_loading(monkeypatch):
    _patch_thread_to_run_inline(monkeypatch)
    cache = ProductCacheController()

    def _loader():
        # A lookup finishing mid-preload stores a fresher copy of product 7
        # and a receipt invalidates product 8.
        cache.store(product(id=7, cost=Decimal("41000")))
        cache.invalidate(8)
        return [product(id=7), product(id=8), product(id=9)]

    cache.start_preload(_loader)

    assert cache.get(7).cost == Decimal("41000")
    assert cache.get(8) is None
    assert cache.get(9) is not None


def test_reads_are_consistent_under_concurrent_writes():
    cache = ProductCacheController()
    errors = []

    def _writer():
        for idx in range(1, 500):
            cache.store(product(id=idx))
            cache.invalidate(idx - 1)

    def _reader():
        try:
            for _ in range(500):
                cache.costs()
                cache.all()
        except RuntimeError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=_writer), threading.Thread(target=_reader)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert [p.id for p in cache.all()] == [499]
