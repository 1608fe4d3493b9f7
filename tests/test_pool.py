"""
Tests for the backend credential pool.
"""

import asyncio
import json
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import pytest

from ai.pool import BackendPool, derive_backend_id
from core.exceptions import EmptyPoolError
from core.models import BackendConfig

from conftest import FakeBackend, make_response


def fake_factory(config):
    return FakeBackend(make_response("{}"), config=config)


@pytest.fixture
def pool():
    pool = BackendPool(fake_factory)
    for name in ("a", "b", "c"):
        pool.add(BackendConfig(api_key=f"key-{name}"), backend_id=name)
    return pool


def ids_of(pool, handles):
    lookup = {id(handle): entry_id for entry_id, handle in pool._entries}
    return [lookup[id(handle)] for handle in handles]


def test_round_robin_in_insertion_order(pool):
    """k calls return every handle once, the (k+1)-th wraps around."""
    handles = [pool.next() for _ in range(4)]

    assert ids_of(pool, handles) == ["a", "b", "c", "a"]


def test_next_on_empty_pool_raises():
    with pytest.raises(EmptyPoolError):
        BackendPool(fake_factory).next()


def test_size_ids_and_len(pool):
    assert pool.size == 3
    assert len(pool) == 3
    assert pool.ids == ["a", "b", "c"]


def test_remove_entry_before_cursor_keeps_next_entry(pool):
    pool.next()
    pool.next()  # cursor now on "c"

    assert pool.remove("a") is True

    assert ids_of(pool, [pool.next(), pool.next()]) == ["c", "b"]


def test_remove_entry_at_cursor_moves_to_following_entry(pool):
    pool.next()  # cursor now on "b"

    pool.remove("b")

    assert ids_of(pool, [pool.next(), pool.next()]) == ["c", "a"]


def test_remove_last_entry_under_cursor_wraps(pool):
    pool.next()
    pool.next()  # cursor now on "c"

    pool.remove("c")

    assert ids_of(pool, [pool.next()]) == ["a"]


def test_remove_unknown_id_returns_false(pool):
    assert pool.remove("missing") is False
    assert pool.size == 3


def test_remove_all_then_next_raises(pool):
    for name in ("a", "b", "c"):
        pool.remove(name)

    assert pool.size == 0
    with pytest.raises(EmptyPoolError):
        pool.next()


def test_duplicate_ids_remove_first_match_only():
    pool = BackendPool(fake_factory)
    pool.add(BackendConfig(api_key="one"), backend_id="dup")
    pool.add(BackendConfig(api_key="two"), backend_id="dup")

    assert pool.remove("dup") is True

    assert pool.ids == ["dup"]
    assert pool.next().config.api_key == "two"


def test_id_derived_from_api_key_suffix():
    pool = BackendPool(fake_factory)

    backend_id = pool.add(BackendConfig(api_key="AIzaSyABCDEFGH12345678"))

    assert backend_id == "12345678"
    assert pool.ids == ["12345678"]


def test_id_generated_without_api_key():
    first = derive_backend_id(BackendConfig())
    second = derive_backend_id(BackendConfig())

    assert first.startswith("genai-")
    assert first != second


def test_explicit_id_wins():
    assert derive_backend_id(BackendConfig(api_key="abcdefghijkl"), "mine") == "mine"


def test_handle_is_tagged_with_gateway_metadata():
    pool = BackendPool(fake_factory)
    pool.add(
        BackendConfig(api_key="key-123456789", base_url="https://gateway", headers={"x-extra": "1"}),
        backend_id="tagged"
    )

    config = pool.next().config

    assert config.base_url == "https://gateway"
    assert config.headers["x-extra"] == "1"
    assert json.loads(config.headers["cf-aig-metadata"]) == {"id": "tagged"}


def test_add_does_not_mutate_caller_config():
    config = BackendConfig(api_key="key-123456789", headers={"x-extra": "1"})

    BackendPool(fake_factory).add(config)

    assert config.headers == {"x-extra": "1"}


def test_generate_content_rotates_handles(pool):
    async def run():
        for _ in range(6):
            await pool.generate_content(model="m", contents=["hi"])

    asyncio.run(run())

    assert [len(handle.calls) for _, handle in pool._entries] == [2, 2, 2]


def test_next_is_safe_across_threads():
    pool = BackendPool(fake_factory)
    for i in range(4):
        pool.add(BackendConfig(api_key=f"key-{i}"), backend_id=str(i))

    with ThreadPoolExecutor(max_workers=8) as executor:
        handles = list(executor.map(lambda _: pool.next(), range(400)))

    counts = Counter(ids_of(pool, handles))
    assert counts == {"0": 100, "1": 100, "2": 100, "3": 100}
