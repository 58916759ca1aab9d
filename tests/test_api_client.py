"""
Tests for the manifest fetcher (HttpManifestSource).
"""
import httpx
import pytest

from fakes import DATE, DUMP_URLS, MANIFEST_URL, manifest_json
from pouet_sync.application.exceptions import ConfigurationError, NetworkError
from pouet_sync.infrastructure.api_client import HttpManifestSource


def _source(server) -> HttpManifestSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(server))
    return HttpManifestSource(client, MANIFEST_URL, timeout=5)


@pytest.mark.asyncio
async def test_valid_manifest_is_mapped_to_domain(server) -> None:
    manifest = await _source(server).get_manifest()

    assert manifest.date == DATE
    assert manifest.urls == DUMP_URLS
    assert server.requests == [MANIFEST_URL]


@pytest.mark.asyncio
async def test_dashed_date_is_normalized(server) -> None:
    server.reply(MANIFEST_URL, json_body=manifest_json("9999-12-31"))

    manifest = await _source(server).get_manifest()

    assert manifest.date == "99991231"


@pytest.mark.asyncio
async def test_error_status_raises_network_error(server) -> None:
    server.reply(MANIFEST_URL, status=400)

    with pytest.raises(NetworkError) as exc_info:
        await _source(server).get_manifest()

    assert str(exc_info.value) == "Request failed with status code 400"
    assert exc_info.value.status_code == 400
    assert server.requests == [MANIFEST_URL]


@pytest.mark.asyncio
async def test_empty_body_raises_network_error(server) -> None:
    server.reply(MANIFEST_URL, content=b"")

    with pytest.raises(NetworkError):
        await _source(server).get_manifest()


@pytest.mark.asyncio
async def test_unexpected_shape_raises_generic_network_error(server) -> None:
    server.reply(MANIFEST_URL, json_body={"latest": {"prods": {}}, "date": "soon"})

    with pytest.raises(NetworkError) as exc_info:
        await _source(server).get_manifest()

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_transport_failure_raises_network_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        await _source(refuse).get_manifest()


def test_relative_manifest_url_is_rejected() -> None:
    client = httpx.AsyncClient()

    with pytest.raises(ConfigurationError):
        HttpManifestSource(client, "json.php", timeout=5)
