"""HTTP implementation of the DumpSource port."""

from typing import Optional

import httpx

from ..application.domain import DumpSource

from .base_client import BaseClient


class HttpDumpSource(BaseClient, DumpSource):
    """Fetches compressed dump bodies over HTTP."""

    def __init__(self, client: httpx.AsyncClient, timeout: float):
        """Initializes the dump source adapter."""
        super().__init__(client, timeout)

    async def fetch(self, url: str) -> Optional[bytes]:
        """
        Downloads a dump body into memory.

        The body is returned as is; an empty body yields None and is left to
        the decoder to reject.

        Raises:
            NetworkError: If the request fails.
        """

        name = url.rsplit("/", 1)[-1]
        self.logger.info(f"Downloading {name}...")

        response = await self._get(url)
        payload = response.content

        self.logger.info(f"Finished downloading {name} ({len(payload)} bytes)")

        return payload or None
