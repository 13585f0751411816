"""Tests for the expiring story cache."""

import asyncio
from datetime import timedelta

import pytest

from cache import CACHE_EXPIRATION, ExpiringCache
from stories import parse_item
from tests.fakes import story


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _items(*ids):
    return [parse_item(story(i)) for i in ids]


class TestExpiringCache:
    def test_default_expiration(self):
        assert ExpiringCache().expiration == CACHE_EXPIRATION == timedelta(seconds=10)

    def test_new_cache_is_expired_and_empty(self):
        cache = ExpiringCache(clock=FakeClock())
        assert cache.is_expired()
        assert cache.is_empty()
        assert cache.get() == []

    def test_set_then_get(self):
        cache = ExpiringCache(clock=FakeClock())
        items = _items(1, 2, 3)
        cache.set(items)
        assert cache.get() == items
        assert not cache.is_empty()

    def test_get_returns_copy(self):
        cache = ExpiringCache(clock=FakeClock())
        cache.set(_items(1, 2))
        got = cache.get()
        got.clear()
        assert [s.id for s in cache.get()] == [1, 2]

    def test_set_copies_input(self):
        cache = ExpiringCache(clock=FakeClock())
        items = _items(1)
        cache.set(items)
        items.append(parse_item(story(2)))
        assert [s.id for s in cache.get()] == [1]

    def test_fresh_after_set_and_expired_after_duration(self):
        clock = FakeClock()
        cache = ExpiringCache(expiration=timedelta(seconds=10), clock=clock)
        cache.set(_items(1))
        assert not cache.is_expired()
        clock.advance(10)
        assert not cache.is_expired()
        clock.advance(0.001)
        assert cache.is_expired()

    def test_set_replaces_entry_and_expiry(self):
        clock = FakeClock()
        cache = ExpiringCache(clock=clock)
        cache.set(_items(1, 2))
        clock.advance(20)
        cache.set(_items(3))
        assert not cache.is_expired()
        assert [s.id for s in cache.get()] == [3]


class TestGetOrRefresh:
    @pytest.mark.asyncio
    async def test_loads_when_empty(self):
        cache = ExpiringCache(clock=FakeClock())
        calls = []

        async def loader():
            calls.append(1)
            return _items(1, 2)

        result = await cache.get_or_refresh(loader)
        assert [s.id for s in result] == [1, 2]
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_fresh_entry_skips_loader(self):
        cache = ExpiringCache(clock=FakeClock())
        cache.set(_items(1))

        async def loader():
            raise AssertionError("loader should not run")

        assert [s.id for s in await cache.get_or_refresh(loader)] == [1]

    @pytest.mark.asyncio
    async def test_empty_entry_reloads_even_if_fresh(self):
        cache = ExpiringCache(clock=FakeClock())
        cache.set([])

        async def loader():
            return _items(4)

        assert [s.id for s in await cache.get_or_refresh(loader)] == [4]

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_load(self):
        cache = ExpiringCache(clock=FakeClock())
        calls = []

        async def loader():
            calls.append(1)
            await asyncio.sleep(0.01)
            return _items(1, 2, 3)

        results = await asyncio.gather(*(cache.get_or_refresh(loader) for _ in range(10)))
        assert len(calls) == 1
        assert all([s.id for s in r] == [1, 2, 3] for r in results)

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_failure(self):
        cache = ExpiringCache(clock=FakeClock())
        calls = []

        async def failing():
            calls.append(1)
            await asyncio.sleep(0.1)
            raise RuntimeError("upstream down")

        loop = asyncio.get_running_loop()
        start = loop.time()
        results = await asyncio.gather(
            *(cache.get_or_refresh(failing) for _ in range(5)), return_exceptions=True
        )
        elapsed = loop.time() - start

        assert len(calls) == 1
        assert all(isinstance(r, RuntimeError) for r in results)
        assert elapsed < 0.3

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_empty_load(self):
        cache = ExpiringCache(clock=FakeClock())
        calls = []

        async def empty():
            calls.append(1)
            await asyncio.sleep(0.01)
            return []

        results = await asyncio.gather(*(cache.get_or_refresh(empty) for _ in range(5)))
        assert len(calls) == 1
        assert results == [[]] * 5

    @pytest.mark.asyncio
    async def test_new_caller_after_empty_load_reloads(self):
        cache = ExpiringCache(clock=FakeClock())
        calls = []

        async def empty():
            calls.append(1)
            return []

        await cache.get_or_refresh(empty)
        await cache.get_or_refresh(empty)
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_loader_error_keeps_previous_entry(self):
        clock = FakeClock()
        cache = ExpiringCache(clock=clock)
        cache.set(_items(1))
        clock.advance(60)

        async def failing():
            raise RuntimeError("upstream down")

        with pytest.raises(RuntimeError):
            await cache.get_or_refresh(failing)
        assert [s.id for s in cache.get()] == [1]
        assert cache.is_expired()

    @pytest.mark.asyncio
    async def test_next_caller_retries_after_error(self):
        cache = ExpiringCache(clock=FakeClock())
        attempts = []

        async def flaky():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("first attempt fails")
            return _items(7)

        with pytest.raises(RuntimeError):
            await cache.get_or_refresh(flaky)
        assert [s.id for s in await cache.get_or_refresh(flaky)] == [7]
        assert len(attempts) == 2
