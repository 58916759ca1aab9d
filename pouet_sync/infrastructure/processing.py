"""
Infrastructure adapter for decompressing and parsing dump payloads.
"""

import asyncio
import gzip
import logging
import zlib
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from ..application.domain import DumpDecoder
from ..application.exceptions import DataError

from .dump_models import RECORD_TYPES, Dump


class GzipJsonDecoder(DumpDecoder):
    """
    An adapter that implements the DumpDecoder port for gzip-compressed
    JSON dumps of the form ``{"data": [...]}``.
    """

    def __init__(self):
        """Initializes the decoder."""
        self.logger = logging.getLogger(self.__class__.__name__)

    def _decompress(self, entity: str, payload: Optional[bytes]) -> bytes:
        if not payload:
            raise DataError("undefined gz data")
        try:
            return gzip.decompress(payload)
        except (gzip.BadGzipFile, EOFError, zlib.error) as e:
            raise DataError(f"Failed to decompress {entity} dump: {e}") from e

    def _blocking_parse(self, entity: str, raw: bytes) -> List[Any]:
        """Validates decoded JSON against the record model of the entity."""
        model = Dump[RECORD_TYPES[entity]]
        try:
            dump = model.model_validate_json(raw)
        except ValidationError as e:
            raise DataError(
                f"Failed to parse {entity} dump: "
                f"{e.error_count()} validation error(s), first: "
                f"{e.errors()[0]['msg']}"
            ) from e
        self.logger.info(f"Parsed {len(dump.data)} {entity} records")
        return dump.data

    def _blocking_decode(
        self, entity: str, payload: Optional[bytes]
    ) -> Tuple[bytes, List[Any]]:
        raw = self._decompress(entity, payload)
        return raw, self._blocking_parse(entity, raw)

    async def decode(
        self, entity: str, payload: Optional[bytes]
    ) -> Tuple[bytes, List[Any]]:
        """
        Decompresses and validates a dump off the event loop.

        Args:
            entity: One of prods, groups, parties, boards.
            payload: The gzip-compressed body, possibly empty.

        Returns:
            The decoded JSON bytes and the validated records.

        Raises:
            DataError: If the payload is empty, corrupt, or not a valid dump.
        """

        return await asyncio.to_thread(self._blocking_decode, entity, payload)

    async def parse(self, entity: str, raw: bytes) -> List[Any]:
        """Validates already decoded JSON bytes (e.g. a snapshot)."""
        return await asyncio.to_thread(self._blocking_parse, entity, raw)
