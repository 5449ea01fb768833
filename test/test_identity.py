from __future__ import annotations

import json

import httpx
import pytest

from ring_panel_lib.config import BridgeConfig
from ring_panel_lib.errors import IdentityLookupError
from ring_panel_lib.identity import RingIdentityService, parse_actor_summary
from ring_panel_lib.types import ActorSummary


def _service(handler, **kwargs) -> RingIdentityService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RingIdentityService(client, "loc-1", **kwargs)


@pytest.mark.asyncio
async def test_lookup_posts_actor_id_and_parses_first_entry() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json=[{"firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com"}],
        )

    summary = await _service(handler).lookup_actor("user-1")

    assert summary == ActorSummary("Ada", "Lovelace", "ada@example.com")
    assert summary.display_name == "Ada Lovelace"
    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/v1/rs/users/summaries"
    assert request.url.params["locationId"] == "loc-1"
    assert json.loads(request.content) == ["user-1"]


@pytest.mark.asyncio
async def test_lookup_uses_configured_base_url() -> None:
    hosts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        return httpx.Response(200, json=[{"firstName": "A", "lastName": "B", "email": "c"}])

    config = BridgeConfig.from_mapping(
        {"location_id": "loc-9", "identity_base_url": "https://identity.example.com/"}
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    await RingIdentityService.from_config(client, config).lookup_actor("user-1")

    assert hosts == ["identity.example.com"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "oops"}),
        httpx.Response(200, json=[]),
        httpx.Response(200, json={"firstName": "Ada"}),
        httpx.Response(200, json=["not-a-record"]),
        httpx.Response(200, content=b"<html>"),
    ],
)
async def test_lookup_failures_raise_identity_error(response) -> None:
    service = _service(lambda request: response)

    with pytest.raises(IdentityLookupError) as excinfo:
        await service.lookup_actor("user-1")

    assert excinfo.value.actor_id == "user-1"


@pytest.mark.asyncio
async def test_transport_error_raises_identity_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(IdentityLookupError):
        await _service(handler).lookup_actor("user-1")


def test_parse_actor_summary_tolerates_missing_fields() -> None:
    assert parse_actor_summary([{"firstName": "Ada"}]) == ActorSummary("Ada", "", "")
