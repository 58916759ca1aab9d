"""
Dependency Injection container for the pouet_sync component.

This container uses the `dependency-injector` library to wire together all
the components of the application, such as services and infrastructure adapters,
based on the application's configuration.
"""

from typing import AsyncIterator

from dependency_injector import containers, providers
import httpx

from ..application.service import QueryService, SyncService
from ..settings import settings

from .api_client import HttpManifestSource
from .database import SqliteStoreFactory
from .downloader import HttpDumpSource
from .processing import GzipJsonDecoder
from .snapshot_store import FileSnapshotStore


async def init_http_client(timeout: float) -> AsyncIterator[httpx.AsyncClient]:
    """One HTTP client per container, closed on resource shutdown."""
    async with httpx.AsyncClient(timeout=timeout) as client:
        yield client


class Container(containers.DeclarativeContainer):
    """DI container for wiring the application components."""

    config = providers.Object(settings)

    http_client = providers.Resource(
        init_http_client,
        timeout=config.provided.pouet.timeout,
    )

    manifest_source = providers.Factory(
        HttpManifestSource,
        client=http_client,
        manifest_url=config.provided.pouet.manifest_url,
        timeout=config.provided.pouet.timeout,
    )

    dump_source = providers.Factory(
        HttpDumpSource,
        client=http_client,
        timeout=config.provided.pouet.timeout,
    )

    decoder = providers.Factory(GzipJsonDecoder)

    snapshot_store = providers.Singleton(
        FileSnapshotStore,
        directory=config.provided.paths.snapshot_dir,
    )

    sync_service = providers.Factory(
        SyncService,
        manifest_source=manifest_source,
        dump_source=dump_source,
        decoder=decoder,
        snapshot_store=snapshot_store,
        cache=config.provided.pouet.cache,
    )

    store_factory = providers.Factory(SqliteStoreFactory)

    query_service = providers.Factory(
        QueryService,
        sync_service=sync_service,
        store_factory=store_factory,
        default_target=config.provided.pouet.database,
    )
