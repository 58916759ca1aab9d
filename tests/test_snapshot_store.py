"""
Tests for the snapshot stores.
"""
import pytest

from pouet_sync.application.domain import snapshot_key
from pouet_sync.infrastructure.snapshot_store import (
    FileSnapshotStore,
    InMemorySnapshotStore,
)


def test_snapshot_key_has_prefix_and_date() -> None:
    assert snapshot_key("prods", "99991231") == "pouetdatadump-prods-99991231.json"


@pytest.mark.asyncio
async def test_file_store_misses_unknown_key(tmp_path) -> None:
    store = FileSnapshotStore(tmp_path)

    assert await store.get("pouetdatadump-prods-99991231.json") is None


@pytest.mark.asyncio
async def test_file_store_round_trip_leaves_no_part_file(tmp_path) -> None:
    store = FileSnapshotStore(tmp_path / "snapshots")
    key = "pouetdatadump-boards-99991231.json"

    await store.put(key, b'{"data": []}')

    assert await store.get(key) == b'{"data": []}'
    assert [p.name for p in (tmp_path / "snapshots").iterdir()] == [key]


@pytest.mark.asyncio
async def test_file_store_overwrites_existing_snapshot(tmp_path) -> None:
    store = FileSnapshotStore(tmp_path)
    key = "pouetdatadump-groups-99991231.json"

    await store.put(key, b"old")
    await store.put(key, b"new")

    assert await store.get(key) == b"new"


@pytest.mark.asyncio
async def test_in_memory_store() -> None:
    store = InMemorySnapshotStore()

    assert await store.get("k") is None
    await store.put("k", b"v")
    assert await store.get("k") == b"v"
