"""
Shared fixtures: a fake pouet.net server and services wired against it.
"""
from typing import List

import httpx
import pytest

from fakes import MANIFEST_URL, FakePouetServer
from pouet_sync.application.service import QueryService, SyncService
from pouet_sync.infrastructure.api_client import HttpManifestSource
from pouet_sync.infrastructure.database import SqliteStoreFactory
from pouet_sync.infrastructure.downloader import HttpDumpSource
from pouet_sync.infrastructure.processing import GzipJsonDecoder
from pouet_sync.infrastructure.snapshot_store import InMemorySnapshotStore


@pytest.fixture
def server() -> FakePouetServer:
    fake = FakePouetServer()
    fake.serve_latest()
    return fake


@pytest.fixture
def client(server) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(server))


@pytest.fixture
def snapshots() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
def sync_service(client, snapshots) -> SyncService:
    return SyncService(
        manifest_source=HttpManifestSource(client, MANIFEST_URL, timeout=5),
        dump_source=HttpDumpSource(client, timeout=5),
        decoder=GzipJsonDecoder(),
        snapshot_store=snapshots,
    )


@pytest.fixture
def query_service(sync_service) -> QueryService:
    return QueryService(sync_service, SqliteStoreFactory())


@pytest.fixture
def titles() -> List[str]:
    return []
