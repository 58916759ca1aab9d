"""
The core application services, containing pure business logic.

This module defines the pipeline (DumpProcessingPipeline) that turns one
dump into validated records, the synchronization service (SyncService) that
fans the pipeline out over the four dumps, and the query service
(QueryService) that gates rebuilds on the manifest date and runs caller SQL.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from .domain import (
    ENTITIES,
    MEMORY_TARGET,
    DumpDecoder,
    DumpSet,
    DumpSource,
    Manifest,
    ManifestSource,
    ProgressSink,
    RecordStore,
    RecordStoreFactory,
    SnapshotStore,
    no_progress,
    snapshot_key,
)
from .normalizer import build_catalogs

logger = logging.getLogger(__name__)


class DumpProcessingPipeline:
    """Encapsulates the cache-aware processing of a single dump."""

    def __init__(
        self,
        dump_source: DumpSource,
        decoder: DumpDecoder,
        snapshot_store: SnapshotStore,
    ):
        """Initializes the pipeline with necessary dependencies (ports)."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.dump_source = dump_source
        self.decoder = decoder
        self.snapshot_store = snapshot_store

    async def run(
        self, entity: str, url: str, date: str, cache: bool
    ) -> List[Any]:
        """Executes the steps for one dump and returns its records.

        Args:
            entity: One of prods, groups, parties, boards.
            url: Location of the compressed dump.
            date: The manifest date, part of the snapshot key.
            cache: Whether an existing snapshot may be reused.
        """

        key = snapshot_key(entity, date)

        # Step 1: Reuse a snapshot (key -> records)
        if cache:
            raw = await self.snapshot_store.get(key)
            if raw is not None:
                self.logger.info(f"Using snapshot {key}")
                return await self.decoder.parse(entity, raw)

        # Step 2: Fetch (url -> payload)
        payload = await self.dump_source.fetch(url)

        # Step 3: Decode (payload -> decoded JSON, records)
        raw, records = await self.decoder.decode(entity, payload)

        # Step 4: Persist, only once the dump is known to be valid
        await self.snapshot_store.put(key, raw)

        return records


async def _gather_fail_fast(tasks: Sequence[asyncio.Task]) -> List[Any]:
    """
    Joins tasks, failing on the first error.

    Pending siblings of a failed task are cancelled and their results
    discarded. Cancelling the caller cancels every task; in both cases the
    cancelled tasks have finished by the time the error propagates.
    """

    try:
        done, pending = await asyncio.wait(
            tasks, return_when=asyncio.FIRST_EXCEPTION
        )
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    failed = [
        task for task in tasks
        if task in done and not task.cancelled() and task.exception()
    ]
    if failed:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        raise failed[0].exception()

    return [task.result() for task in tasks]


class SyncService:
    """Fetches the latest dumps and normalizes them into a DumpSet."""

    def __init__(
        self,
        manifest_source: ManifestSource,
        dump_source: DumpSource,
        decoder: DumpDecoder,
        snapshot_store: SnapshotStore,
        cache: bool = True,
    ):
        """Initializes the service and the reusable processing pipeline."""
        self.manifest_source = manifest_source
        self.cache = cache
        self.pipeline = DumpProcessingPipeline(
            dump_source, decoder, snapshot_store
        )

    async def fetch_manifest(self) -> Manifest:
        return await self.manifest_source.get_manifest()

    async def get_latest(
        self,
        manifest: Optional[Manifest] = None,
        cache: Optional[bool] = None,
    ) -> DumpSet:
        """
        Builds the DumpSet of the latest dumps.

        Args:
            manifest: An already fetched manifest; fetched when omitted.
            cache: Overrides the configured snapshot reuse.

        Raises:
            NetworkError: If the manifest or a dump cannot be fetched.
            DataError: If a dump is empty, corrupt, or malformed.
        """

        if manifest is None:
            manifest = await self.fetch_manifest()
        use_cache = self.cache if cache is None else cache

        logger.info(
            f"Processing dumps of {manifest.date} (cache: {use_cache})..."
        )

        tasks = [
            asyncio.create_task(
                self.pipeline.run(
                    entity, manifest.urls[entity], manifest.date, use_cache
                ),
                name=f"dump-{entity}",
            )
            for entity in ENTITIES
        ]
        prods, groups, parties, boards = await _gather_fail_fast(tasks)

        platforms, users = build_catalogs(prods, groups, parties, boards)

        logger.info(
            f"Collected {len(platforms)} platforms and {len(users)} users."
        )

        return DumpSet(
            date=manifest.date,
            prods=prods,
            groups=groups,
            parties=parties,
            boards=boards,
            platforms=platforms,
            users=users,
        )


class QueryService:
    """Keeps a store in sync with the manifest and runs caller SQL on it."""

    def __init__(
        self,
        sync_service: SyncService,
        store_factory: RecordStoreFactory,
        default_target: str = MEMORY_TARGET,
    ):
        self.sync_service = sync_service
        self.store_factory = store_factory
        self.default_target = default_target

    async def _rebuild(
        self,
        store: RecordStore,
        manifest: Manifest,
        progress: ProgressSink,
        cache: Optional[bool],
    ):
        await store.create_tables()

        progress("Get latest")
        dumps = await self.sync_service.get_latest(manifest, cache=cache)

        progress("Insert tables")
        await store.insert_tables(dumps)

    async def check_version(self, target: Optional[str] = None) -> bool:
        """
        Reports whether a store is stale, without touching it.

        An in-memory target is always reported stale, even right after a
        load through another call: every open of ":memory:" is a new, empty
        database, so no version can be read back from it. A missing file is
        stale and is not created.

        Returns:
            True when the store has no version or one that differs from the
            manifest date.
        """

        target = target or self.default_target
        manifest = await self.sync_service.fetch_manifest()
        version = await self.store_factory.probe_version(target)
        return version != manifest.date

    async def sql_query(
        self,
        sql: str,
        target: Optional[str] = None,
        progress: ProgressSink = no_progress,
        cache: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        """
        Runs caller SQL against an up-to-date store.

        The store is rebuilt at most once, when its version differs from the
        manifest date. The SQL is executed verbatim.

        Raises:
            NetworkError, DataError: If a rebuild is needed and fails.
            DatabaseError: If the store or the query fails.
        """

        target = target or self.default_target
        store = await self.store_factory.open(target, progress)
        try:
            manifest = await self.sync_service.fetch_manifest()
            version = await store.read_version()
            if version != manifest.date:
                logger.info(
                    f"{target} is stale ({version} != {manifest.date}), rebuilding..."
                )
                await self._rebuild(store, manifest, progress, cache)

            progress("Start query")
            rows = await store.run_query(sql)
            progress("Stop query")
        finally:
            await store.close()

        logger.info(f"Query returned {len(rows)} rows.")
        return rows
