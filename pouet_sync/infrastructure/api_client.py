"""HTTP implementation of the ManifestSource port."""

from typing import Any

import httpx
from pydantic import ValidationError

from ..application.domain import ENTITIES, Manifest, ManifestSource
from ..application.exceptions import ConfigurationError, NetworkError

from .api_models import ManifestResponse
from .base_client import BaseClient


class HttpManifestSource(BaseClient, ManifestSource):
    """A manifest source that fetches the pouet.net dump descriptor."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        manifest_url: str,
        timeout: float,
    ):
        """Initializes the manifest source adapter."""
        if not manifest_url or not manifest_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Manifest URL {manifest_url!r} is not an absolute http(s) URL. "
                f"Please check your config files."
            )
        super().__init__(client, timeout)
        self.manifest_url = manifest_url

    def _map_to_domain(self, dto: ManifestResponse) -> Manifest:
        """Maps the validated manifest DTO to a domain model."""
        return Manifest(
            date=dto.date,
            urls={entity: getattr(dto.latest, entity).url for entity in ENTITIES},
        )

    def _validate(self, json_data: Any) -> ManifestResponse:
        """Validates the raw manifest; a shape mismatch is a network failure."""
        try:
            return ManifestResponse.model_validate(json_data)
        except ValidationError as e:
            raise NetworkError(
                f"Unexpected manifest from {self.manifest_url}: "
                f"{e.error_count()} validation error(s)"
            ) from e

    async def get_manifest(self) -> Manifest:
        """
        Orchestrates fetching, validating, and mapping the manifest.

        Returns:
            The domain manifest with the four dump URLs and its date.

        Raises:
            NetworkError: If the request fails or the body is not a manifest.
        """

        self.logger.info(f"Fetching manifest from {self.manifest_url}...")

        response = await self._get(self.manifest_url)
        try:
            raw_data = response.json()
        except ValueError as e:
            raise NetworkError(
                f"Manifest from {self.manifest_url} is not JSON: {e}"
            ) from e

        manifest = self._map_to_domain(self._validate(raw_data))

        self.logger.info(f"Latest dumps are dated {manifest.date}.")

        return manifest
