"""
Tests for the public entry points, wired through the DI container.
"""
import httpx
import pytest
from dependency_injector import providers

from pouet_sync import check_version, get_latest, sql_query
from pouet_sync.infrastructure.containers import Container
from pouet_sync.infrastructure.snapshot_store import FileSnapshotStore


async def _mock_http_client(server):
    async with httpx.AsyncClient(transport=httpx.MockTransport(server)) as client:
        yield client


@pytest.fixture
def container(server, snapshots) -> Container:
    wired = Container()
    wired.http_client.override(providers.Resource(_mock_http_client, server))
    wired.snapshot_store.override(providers.Object(snapshots))
    return wired


@pytest.mark.asyncio
async def test_get_latest(container) -> None:
    dumps = await get_latest(container=container)

    assert len(dumps.prods) == 1
    assert len(dumps.platforms) == 4
    assert len(dumps.users) == 5


@pytest.mark.asyncio
async def test_sql_query_then_check_version(container, server, tmp_path, titles) -> None:
    path = str(tmp_path / "pouet.db")

    rows = await sql_query(
        "SELECT name FROM platform ORDER BY name;", path, titles.append,
        container=container,
    )

    assert [row["name"] for row in rows] == ["BeOS", "Linux", "MS-Dos", "Windows"]
    assert titles[0] == f"Create database {path}"
    assert await check_version(path, container=container) is False


@pytest.mark.asyncio
async def test_missing_progress_sink_changes_nothing(container) -> None:
    rows = await sql_query("SELECT id, name FROM prod;", ":memory:", container=container)

    assert rows == [{"id": 1, "name": "Astral Blur"}]


def test_container_defaults_come_from_settings() -> None:
    store = Container().snapshot_store()

    assert isinstance(store, FileSnapshotStore)
