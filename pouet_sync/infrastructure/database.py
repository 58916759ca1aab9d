"""
SQLite implementation of the RecordStore port, built on aiosqlite.

Covers the three database stages of the pipeline: applying the schema,
loading a DumpSet in a single transaction, and running caller queries.
"""

import contextlib
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

import aiosqlite

from ..application.domain import (
    MEMORY_TARGET,
    DumpSet,
    ProgressSink,
    RecordStore,
    RecordStoreFactory,
    no_progress,
)
from ..application.exceptions import DatabaseError

_SCHEMA = Path(__file__).with_name("schema.sql").read_text(encoding="utf-8")

# Children first, so that foreign keys never dangle while clearing.
_CLEAR_ORDER = (
    "prod_credit",
    "prod_placing",
    "prod_group",
    "prod_platform",
    "board_platform",
    "prod",
    "board",
    '"group"',
    "party",
    "user",
    "platform",
)

_INSERT_PLATFORM = "INSERT INTO platform (id, name, icon, slug) VALUES (?, ?, ?, ?)"
_INSERT_USER = (
    "INSERT INTO user (id, nickname, level, avatar, glops, register_date) "
    "VALUES (?, ?, ?, ?, ?, ?)"
)
_INSERT_PARTY = (
    "INSERT INTO party (id, name, web, added_date, added_user) "
    "VALUES (?, ?, ?, ?, ?)"
)
_INSERT_GROUP = (
    'INSERT INTO "group" (id, name, acronym, disambiguation, web, added_date, '
    "added_user, csdb, zxdemo, demozoo) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
)
_INSERT_BOARD = (
    "INSERT INTO board (id, name, added_date, sysop, phonenumber, added_user) "
    "VALUES (?, ?, ?, ?, ?, ?)"
)
_INSERT_PROD = (
    "INSERT INTO prod (id, name, type, added_date, release_date, voteup, "
    "votepig, votedown, voteavg, party_compo, party_place, party_year, "
    "party_id, invitation_id, invitationyear, board_id, rank, download, "
    "added_user) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
)
_INSERT_PROD_PLATFORM = "INSERT INTO prod_platform (prod_id, platform_id) VALUES (?, ?)"
_INSERT_PROD_GROUP = "INSERT INTO prod_group (prod_id, group_id) VALUES (?, ?)"
_INSERT_BOARD_PLATFORM = (
    "INSERT INTO board_platform (board_id, platform_id) VALUES (?, ?)"
)
_INSERT_PLACING = (
    "INSERT INTO prod_placing (prod_id, position, party_id, compo_name, "
    "ranking, year) VALUES (?, ?, ?, ?, ?, ?)"
)
_INSERT_CREDIT = "INSERT INTO prod_credit (prod_id, user_id, role) VALUES (?, ?, ?)"
_UPSERT_VERSION = (
    "INSERT INTO version (id, date) VALUES (1, ?) "
    "ON CONFLICT (id) DO UPDATE SET date = excluded.date"
)


_GENERIC_ERRNO = sqlite3.SQLITE_ERROR
_GENERIC_CODE = "SQLITE_ERROR"


@contextlib.contextmanager
def _translate_errors() -> Generator[None, None, None]:
    """
    Re-raises driver errors as DatabaseError, keeping the native codes.

    Errors raised by the Python driver itself rather than by SQLite (e.g.
    several statements in one query) carry no native code and are reported
    as SQLITE_ERROR. sqlite3.Warning covers that case before Python 3.12.
    """
    try:
        yield
    except (sqlite3.Error, sqlite3.Warning) as e:
        errno = getattr(e, "sqlite_errorcode", None)
        code = getattr(e, "sqlite_errorname", None)
        if errno is None:
            errno, code = _GENERIC_ERRNO, _GENERIC_CODE
        raise DatabaseError(str(e), errno=errno, code=code) from e


def _resolve(value: Optional[int], known) -> Optional[int]:
    """Keeps a reference only when its target is loaded in the same run."""
    return value if value is not None and value in known else None


class SqliteStore(RecordStore):
    """A RecordStore over one open aiosqlite connection."""

    def __init__(
        self,
        conn: aiosqlite.Connection,
        target: str,
        progress: ProgressSink = no_progress,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.conn = conn
        self.target = target
        self.progress = progress

    async def create_tables(self):
        """Applies the packaged schema; every statement is 'IF NOT EXISTS'."""
        self.progress("Create tables")
        with _translate_errors():
            await self.conn.executescript(_SCHEMA)

    async def read_version(self) -> Optional[str]:
        with _translate_errors():
            async with self.conn.execute(
                "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'version'"
            ) as cursor:
                if await cursor.fetchone() is None:
                    return None
            async with self.conn.execute(
                "SELECT date FROM version WHERE id = 1"
            ) as cursor:
                row = await cursor.fetchone()
        return row[0] if row is not None else None

    async def _clear(self):
        for table in _CLEAR_ORDER:
            await self.conn.execute(f"DELETE FROM {table}")

    async def _insert_catalogs(self, dumps: DumpSet):
        await self.conn.executemany(
            _INSERT_PLATFORM,
            [(p.id, p.name, p.icon, p.slug) for p in dumps.platforms.values()],
        )
        await self.conn.executemany(
            _INSERT_USER,
            [
                (u.id, u.nickname, u.level, u.avatar, u.glops, u.register_date)
                for u in dumps.users.values()
            ],
        )

    async def _insert_entities(self, dumps: DumpSet):
        users = dumps.users

        def added_user(record: Any) -> Optional[int]:
            ref = record.added_user
            return _resolve(ref.id if ref is not None else None, users)

        await self.conn.executemany(
            _INSERT_PARTY,
            [
                (p.id, p.name, p.web, p.added_date, added_user(p))
                for p in dumps.parties
            ],
        )
        await self.conn.executemany(
            _INSERT_GROUP,
            [
                (
                    g.id, g.name, g.acronym, g.disambiguation, g.web,
                    g.added_date, added_user(g), g.csdb, g.zxdemo, g.demozoo,
                )
                for g in dumps.groups
            ],
        )
        await self.conn.executemany(
            _INSERT_BOARD,
            [
                (b.id, b.name, b.added_date, b.sysop, b.phonenumber, added_user(b))
                for b in dumps.boards
            ],
        )

        party_ids = {p.id for p in dumps.parties}
        board_ids = {b.id for b in dumps.boards}
        await self.conn.executemany(
            _INSERT_PROD,
            [
                (
                    p.id, p.name, p.type, p.added_date, p.release_date,
                    p.voteup, p.votepig, p.votedown, p.voteavg,
                    p.party_compo, p.party_place, p.party_year,
                    _resolve(p.party, party_ids),
                    _resolve(p.invitation, party_ids),
                    p.invitationyear,
                    _resolve(p.board_id, board_ids),
                    p.rank, p.download, added_user(p),
                )
                for p in dumps.prods
            ],
        )

    async def _insert_relations(self, dumps: DumpSet):
        party_ids = {p.id for p in dumps.parties}
        group_ids = {g.id for g in dumps.groups}
        platform_rows, group_rows, placing_rows, credit_rows = [], [], [], []

        for prod in dumps.prods:
            platform_rows.extend(
                (prod.id, platform_id)
                for platform_id in prod.platforms
                if platform_id in dumps.platforms
            )
            group_rows.extend(
                (prod.id, group_id)
                for group_id in dict.fromkeys(g.id for g in prod.groups)
                if group_id in group_ids
            )
            placing_rows.extend(
                (
                    prod.id,
                    position,
                    _resolve(
                        placing.party.id if placing.party is not None else None,
                        party_ids,
                    ),
                    placing.compo_name,
                    placing.ranking,
                    placing.year,
                )
                for position, placing in enumerate(prod.placings)
            )
            credit_rows.extend(
                (prod.id, credit.user.id, credit.role)
                for credit in prod.credits
                if credit.user is not None and credit.user.id in dumps.users
            )

        board_rows = [
            (board.id, platform_id)
            for board in dumps.boards
            for platform_id in board.platforms
            if platform_id in dumps.platforms
        ]

        await self.conn.executemany(_INSERT_PROD_PLATFORM, platform_rows)
        await self.conn.executemany(_INSERT_PROD_GROUP, group_rows)
        await self.conn.executemany(_INSERT_BOARD_PLATFORM, board_rows)
        await self.conn.executemany(_INSERT_PLACING, placing_rows)
        await self.conn.executemany(_INSERT_CREDIT, credit_rows)

    async def insert_tables(self, dumps: DumpSet):
        """
        Replaces the store content with a DumpSet in a single transaction.

        Existing rows are cleared, then catalogs, entities and relations are
        inserted in foreign-key order and the version row is set to the dump
        date. On any failure, cancellation included, the transaction is
        rolled back and the error re-raised.

        Raises:
            DatabaseError: If any statement fails.
        """

        self.progress("Start transaction")
        with _translate_errors():
            await self.conn.execute("BEGIN")
            try:
                await self._clear()
                await self._insert_catalogs(dumps)
                await self._insert_entities(dumps)
                await self._insert_relations(dumps)
                await self.conn.execute(_UPSERT_VERSION, (dumps.date,))
            except BaseException:
                if self.conn.in_transaction:
                    await self.conn.execute("ROLLBACK")
                self.logger.warning(f"Load into {self.target} rolled back.")
                raise
            await self.conn.execute("COMMIT")
        self.progress("Stop transaction")

        self.logger.info(
            f"Loaded {len(dumps.prods)} prods, {len(dumps.groups)} groups, "
            f"{len(dumps.parties)} parties, {len(dumps.boards)} boards "
            f"into {self.target}"
        )

    async def run_query(self, sql: str) -> List[Dict[str, Any]]:
        """Executes caller SQL verbatim and returns the rows as dicts."""
        with _translate_errors():
            async with self.conn.execute(sql) as cursor:
                rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def close(self):
        await self.conn.close()


class SqliteStoreFactory(RecordStoreFactory):
    """Opens SQLite stores for a file path or the in-memory target."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def _exists(target: str) -> bool:
        return target != MEMORY_TARGET and Path(target).exists()

    async def open(
        self, target: str, progress: ProgressSink = no_progress
    ) -> SqliteStore:
        """
        Opens or creates the database behind a target.

        Emits "Create database <target>" for a new file or the in-memory
        target and "Open <target>" for an existing file.
        """

        is_new = not self._exists(target)
        with _translate_errors():
            conn = await aiosqlite.connect(target, isolation_level=None)
            conn.row_factory = aiosqlite.Row
            await conn.execute("PRAGMA foreign_keys = ON")

        progress(f"Create database {target}" if is_new else f"Open {target}")
        self.logger.info(f"{'Created' if is_new else 'Opened'} {target}")

        return SqliteStore(conn, target, progress)

    async def probe_version(self, target: str) -> Optional[str]:
        """Reads the version of an existing file, opened read-only."""
        if not self._exists(target):
            return None

        uri = f"{Path(target).resolve().as_uri()}?mode=ro"
        with _translate_errors():
            conn = await aiosqlite.connect(uri, uri=True)
        try:
            return await SqliteStore(conn, target).read_version()
        finally:
            await conn.close()
