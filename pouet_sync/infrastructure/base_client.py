"""Base class for async HTTP clients."""

import logging

import httpx

from ..application.exceptions import NetworkError


class BaseClient:
    """A base client that owns an async client and its request policy."""

    def __init__(self, client: httpx.AsyncClient, timeout: float):
        """
        Initializes the base client.

        Args:
            client: An instance of httpx.AsyncClient.
            timeout: Per-request timeout in seconds.
        """

        self.client = client
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)

    async def _get(self, url: str) -> httpx.Response:
        """
        Executes a single GET request, without retries.

        Raises:
            NetworkError: On transport failures and non-success statuses.
        """

        try:
            response = await self.client.get(url, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise NetworkError(
                f"Request failed with status code {status}", status_code=status
            ) from e
        except httpx.TransportError as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

        return response
