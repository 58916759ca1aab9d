"""
Implementations of the SnapshotStore port.

Snapshots are the decoded JSON of a dump, keyed by entity and manifest date.
"""

import asyncio
import contextlib
import logging
from pathlib import Path
from typing import Dict, Generator, Optional

from ..application.domain import SnapshotStore


class FileSnapshotStore(SnapshotStore):
    """Stores each snapshot as a file named after its key in one directory."""

    def __init__(self, directory: Path):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.directory = Path(directory)

    @contextlib.contextmanager
    def _atomic_target(self, destination: Path) -> Generator[Path, None, None]:
        """Provides a temporary '.part' path and ensures cleanup."""
        part_path = destination.with_suffix(destination.suffix + ".part")
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            yield part_path
        finally:
            part_path.unlink(missing_ok=True)

    def _blocking_put(self, destination: Path, value: bytes):
        with self._atomic_target(destination) as part_path:
            part_path.write_bytes(value)
            part_path.replace(destination)

    def _blocking_get(self, path: Path) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    async def get(self, key: str) -> Optional[bytes]:
        """Returns the snapshot bytes, or None when no snapshot exists."""
        value = await asyncio.to_thread(self._blocking_get, self.directory / key)
        if value is not None:
            self.logger.info(f"Snapshot {key} found.")
        return value

    async def put(self, key: str, value: bytes):
        """Writes a snapshot atomically; readers never see a partial file."""
        await asyncio.to_thread(self._blocking_put, self.directory / key, value)
        self.logger.info(f"Snapshot {key} saved.")


class InMemorySnapshotStore(SnapshotStore):
    """A dictionary-backed store, for tests and throwaway runs."""

    def __init__(self):
        self.snapshots: Dict[str, bytes] = {}

    async def get(self, key: str) -> Optional[bytes]:
        return self.snapshots.get(key)

    async def put(self, key: str, value: bytes):
        self.snapshots[key] = value
