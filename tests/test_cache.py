"""Tests for the submission cache."""

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from playlist_bridge.cache import SubmissionCache, generate_submission_id
from playlist_bridge.models import Payload


def _payload(title: str = "Trip") -> Payload:
    return Payload(title=title)


# -- Basic get/put -----------------------------------------------------------


def test_get_after_put_returns_payload(cache) -> None:
    payload = _payload()
    sid = cache.put(payload)
    assert cache.get(sid) is payload


def test_unknown_id_returns_none(cache) -> None:
    assert cache.get("nope") is None


def test_ttl_must_be_positive() -> None:
    with pytest.raises(ValueError, match="ttl"):
        SubmissionCache(ttl=0)


def test_submission_id_shape() -> None:
    sid = generate_submission_id()
    assert sid.isalnum()
    assert "_" not in sid
    assert len(sid) >= 9


# -- Expiry ------------------------------------------------------------------


def test_entry_expires_after_ttl(cache, clock) -> None:
    sid = cache.put(_payload())
    clock.advance(59.9)
    assert cache.get(sid) is not None
    clock.advance(0.1)
    assert cache.get(sid) is None


def test_reads_do_not_extend_lifetime(cache, clock) -> None:
    sid = cache.put(_payload())
    for _ in range(5):
        clock.advance(11)
        cache.get(sid)
    assert cache.get(sid) is None


def test_evict_expired_removes_only_stale(cache, clock) -> None:
    old = cache.put(_payload("old"))
    clock.advance(30)
    new = cache.put(_payload("new"))
    clock.advance(30)

    assert cache.evict_expired() == 1
    assert cache.get(old) is None
    assert cache.get(new).title == "new"
    assert len(cache) == 1


def test_len_ignores_expired(cache, clock) -> None:
    cache.put(_payload())
    cache.put(_payload())
    assert len(cache) == 2
    clock.advance(120)
    assert len(cache) == 0


# -- Id collisions -----------------------------------------------------------


def test_colliding_factory_ids_are_regenerated(clock) -> None:
    ids = iter(["a", "a", "a", "b"])
    cache = SubmissionCache(ttl=60, clock=clock, id_factory=lambda: next(ids))
    assert cache.put(_payload()) == "a"
    assert cache.put(_payload()) == "b"


def test_concurrent_puts_never_collide() -> None:
    cache = SubmissionCache(ttl=600)
    payload = _payload()
    with ThreadPoolExecutor(max_workers=16) as pool:
        ids = list(pool.map(lambda _: cache.put(payload), range(10_000)))
    assert len(set(ids)) == 10_000
    assert len(cache) == 10_000


# -- Background sweep --------------------------------------------------------


async def test_sweeper_evicts_in_background(clock) -> None:
    cache = SubmissionCache(ttl=60, sweep_interval=0.01, clock=clock)
    cache.put(_payload())
    clock.advance(61)
    cache.start()
    try:
        for _ in range(100):
            if not cache._entries:
                break
            await asyncio.sleep(0.01)
        assert cache._entries == {}
    finally:
        await cache.stop()
    assert cache._sweeper is None


async def test_stop_without_start_is_noop(cache) -> None:
    await cache.stop()
