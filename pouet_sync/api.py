"""
Public entry points of pouet_sync.

Every call wires its own container, so independent calls share nothing but
the database and snapshot files they point at. Those files are not locked:
callers must serialize concurrent access to the same target themselves.
"""

import contextlib
import inspect
from typing import Any, AsyncIterator, Dict, List, Optional

from .application.domain import DumpSet, ProgressSink, no_progress
from .infrastructure.containers import Container
from .infrastructure.csv_export import gen_csv

__all__ = ["check_version", "gen_csv", "get_latest", "sql_query"]


@contextlib.asynccontextmanager
async def _wired(container: Optional[Container]) -> AsyncIterator[Container]:
    container = container or Container()
    try:
        yield container
    finally:
        shutdown = container.shutdown_resources()
        if inspect.isawaitable(shutdown):
            await shutdown


async def get_latest(
    cache: Optional[bool] = None, container: Optional[Container] = None
) -> DumpSet:
    """Downloads (or reuses snapshots of) the latest dumps."""
    async with _wired(container) as wired:
        service = await wired.sync_service()
        return await service.get_latest(cache=cache)


async def sql_query(
    sql: str,
    target: Optional[str] = None,
    on_progress: ProgressSink = no_progress,
    cache: Optional[bool] = None,
    container: Optional[Container] = None,
) -> List[Dict[str, Any]]:
    """
    Runs SQL against the store at target, rebuilding it first when stale.

    Args:
        sql: Executed verbatim.
        target: A database file path or ":memory:"; defaults to settings.
        on_progress: Receives each milestone title.
        cache: Overrides the configured snapshot reuse.
    """
    async with _wired(container) as wired:
        service = await wired.query_service()
        return await service.sql_query(sql, target, on_progress, cache)


async def check_version(
    target: Optional[str] = None, container: Optional[Container] = None
) -> bool:
    """Returns True when the store at target needs a rebuild."""
    async with _wired(container) as wired:
        service = await wired.query_service()
        return await service.check_version(target)
