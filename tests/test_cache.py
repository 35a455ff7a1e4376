"""Tests for the healed-locator cache."""

from concurrent.futures import ThreadPoolExecutor

from locator_healing.cache import HealingCache
from locator_healing.locators import LocatorSpec


def test_put_then_get_returns_same_value() -> None:
    cache = HealingCache()
    original = LocatorSpec.xpath("//a")
    healed = LocatorSpec.xpath("//b").healed()
    cache.put(original.signature, healed)
    assert cache.get(original.signature) == healed
    assert original.signature in cache
    assert len(cache) == 1


def test_missing_signature_returns_none() -> None:
    assert HealingCache().get("By.id: nothing") is None


def test_put_overwrites_previous_entry() -> None:
    cache = HealingCache()
    cache.put("By.id: a", LocatorSpec.xpath("//first").healed())
    cache.put("By.id: a", LocatorSpec.xpath("//second").healed())
    assert cache.get("By.id: a").value == "//second"
    assert len(cache) == 1


def test_clear_and_items() -> None:
    cache = HealingCache()
    cache.put("k1", LocatorSpec.xpath("//a").healed())
    snapshot = cache.items()
    cache.clear()
    assert len(cache) == 0
    assert snapshot == [("k1", LocatorSpec.xpath("//a").healed())]


def test_concurrent_writers_do_not_lose_updates() -> None:
    cache = HealingCache()
    workers, per_worker = 8, 200

    def write(worker: int) -> None:
        for i in range(per_worker):
            cache.put(f"By.id: w{worker}-{i}", LocatorSpec.xpath(f"//w{worker}/n{i}").healed())
            cache.get(f"By.id: w{worker}-{i}")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(write, range(workers)))

    assert len(cache) == workers * per_worker
    assert cache.get("By.id: w3-150").value == "//w3/n150"
