"""
This module defines the core domain models for the application.

These classes represent the pure, technology-agnostic entities and data
structures that the synchronization logic operates on, together with the
ports (interfaces) the infrastructure layer implements.
"""

import dataclasses

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple


ENTITIES = ("prods", "groups", "parties", "boards")

MEMORY_TARGET = ":memory:"

_SNAPSHOT_PREFIX = "pouetdatadump"


def snapshot_key(entity: str, date: str) -> str:
    """Builds the cache key of a decoded dump, e.g. pouetdatadump-prods-20240101.json."""
    return f"{_SNAPSHOT_PREFIX}-{entity}-{date}.json"


ProgressSink = Callable[[str], None]


def no_progress(title: str) -> None:
    """Default progress sink, ignores every milestone."""


# --- Domain Models ---

@dataclasses.dataclass(frozen=True)
class Manifest:
    """The remote descriptor of the latest dumps."""

    date: str
    urls: Dict[str, str]


@dataclasses.dataclass(frozen=True)
class Platform:
    id: int
    name: str
    icon: Optional[str] = None
    slug: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class User:
    id: int
    nickname: Optional[str] = None
    level: Optional[str] = None
    avatar: Optional[str] = None
    glops: Optional[int] = None
    register_date: Optional[str] = None


@dataclasses.dataclass
class DumpSet:
    """
    The normalized, in-memory result of one synchronization.

    Holds the four validated entity collections plus the platform and user
    catalogs collected from references embedded in them. It is transient
    and discarded once loaded.
    """

    date: str
    prods: List[Any]
    groups: List[Any]
    parties: List[Any]
    boards: List[Any]
    platforms: Dict[int, Platform]
    users: Dict[int, User]


# --- Ports (Interfaces) ---

class ManifestSource(ABC):
    """A port for any source of the dump manifest."""

    @abstractmethod
    async def get_manifest(self) -> Manifest:
        """Fetches the manifest describing the latest dumps."""
        pass


class DumpSource(ABC):
    """A port for fetching a compressed dump payload."""

    @abstractmethod
    async def fetch(self, url: str) -> Optional[bytes]:
        """Returns the raw body of a dump, or None when there is none."""
        pass


class DumpDecoder(ABC):
    """A port for turning dump payloads into validated records."""

    @abstractmethod
    async def decode(
        self, entity: str, payload: Optional[bytes]
    ) -> Tuple[bytes, List[Any]]:
        """
        Decompresses and parses a payload.

        Returns the decoded JSON bytes together with the records.
        Raises DataError on empty, corrupt or malformed payloads.
        """
        pass

    @abstractmethod
    async def parse(self, entity: str, raw: bytes) -> List[Any]:
        """Parses already decoded JSON bytes into records."""
        pass


class SnapshotStore(ABC):
    """A key-value port for decoded dump snapshots."""

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Returns the snapshot stored under a key, or None."""
        pass

    @abstractmethod
    async def put(self, key: str, value: bytes):
        """Stores a snapshot under a key, replacing any previous one."""
        pass


class RecordStore(ABC):
    """A port for the relational store the dumps are loaded into."""

    target: str

    @abstractmethod
    async def create_tables(self):
        """Applies the schema; safe on an already initialized store."""
        pass

    @abstractmethod
    async def read_version(self) -> Optional[str]:
        """Returns the date of the last applied manifest, if any."""
        pass

    @abstractmethod
    async def insert_tables(self, dumps: DumpSet):
        """Replaces the store content with a DumpSet in one transaction."""
        pass

    @abstractmethod
    async def run_query(self, sql: str) -> List[Dict[str, Any]]:
        """Executes SQL verbatim and returns the rows as dicts."""
        pass

    @abstractmethod
    async def close(self):
        """Releases the underlying connection."""
        pass


class RecordStoreFactory(ABC):
    """A port opening record stores by target."""

    @abstractmethod
    async def open(self, target: str, progress: ProgressSink) -> RecordStore:
        """Opens or creates the store behind a target."""
        pass

    @abstractmethod
    async def probe_version(self, target: str) -> Optional[str]:
        """Reads the stored version without creating or mutating anything."""
        pass
