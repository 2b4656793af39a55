import pytest

from meshsec.context import Context, GasMeter, KVStore
from meshsec.errors import ERR_OUT_OF_GAS, MeshSecurityError
from meshsec.events import Event


def test_store_basic_operations():
    store = KVStore()
    store.set(b"a", b"1")
    assert store.get(b"a") == b"1"
    assert store.has(b"a")
    store.delete(b"a")
    assert not store.has(b"a")
    assert store.get(b"a") is None


def test_iterate_prefix_sorted_and_stripped():
    store = KVStore()
    store.set(b"\x02b", b"2")
    store.set(b"\x02a", b"1")
    store.set(b"\x03a", b"3")
    assert list(store.iterate_prefix(b"\x02")) == [(b"a", b"1"), (b"b", b"2")]


def test_cache_context_isolated_until_commit():
    ctx = Context(block_height=10)
    ctx.kv_store("m").set(b"k", b"old")
    cached, commit = ctx.cache_context()
    cached.kv_store("m").set(b"k", b"new")
    cached.kv_store("m").set(b"n", b"x")
    assert ctx.kv_store("m").get(b"k") == b"old"
    assert cached.block_height == 10
    commit()
    assert ctx.kv_store("m").get(b"k") == b"new"
    assert ctx.kv_store("m").get(b"n") == b"x"


def test_cache_delete_and_discard():
    ctx = Context()
    ctx.kv_store("m").set(b"k", b"v")
    cached, _ = ctx.cache_context()
    cached.kv_store("m").delete(b"k")
    assert not cached.kv_store("m").has(b"k")
    assert list(cached.kv_store("m").iterate_prefix(b"")) == []
    assert ctx.kv_store("m").has(b"k")


def test_cache_commits_events():
    ctx = Context()
    cached, commit = ctx.cache_context()
    cached.event_manager.emit(Event("e"))
    assert ctx.event_manager.events == []
    commit()
    assert ctx.event_manager.events == [Event("e")]


def test_gas_meter_limit():
    meter = GasMeter(10)
    meter.consume(4, "a")
    assert meter.gas_consumed == 4
    with pytest.raises(MeshSecurityError) as info:
        meter.consume(7, "b")
    assert info.value.is_kind(ERR_OUT_OF_GAS)


def test_with_gas_meter_shares_stores():
    ctx = Context()
    meter = GasMeter(5)
    other = ctx.with_gas_meter(meter)
    other.kv_store("m").set(b"k", b"v")
    assert other.gas_meter is meter
    assert ctx.kv_store("m").get(b"k") == b"v"