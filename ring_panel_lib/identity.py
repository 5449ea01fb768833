"""Identity lookups against the vendor's user summaries endpoint."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from .config import BridgeConfig
from .const import DEFAULT_IDENTITY_BASE_URL, DEFAULT_IDENTITY_TIMEOUT_S, USER_SUMMARIES_PATH
from .errors import IdentityLookupError
from .types import ActorSummary

_LOGGER = logging.getLogger(__name__)


class RingIdentityService:
    """Resolve actor ids to user summaries over HTTP."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        location_id: str,
        *,
        base_url: str = DEFAULT_IDENTITY_BASE_URL,
        timeout_s: float = DEFAULT_IDENTITY_TIMEOUT_S,
    ) -> None:
        self._client = client
        self._location_id = location_id
        self._url = f"{base_url.rstrip('/')}{USER_SUMMARIES_PATH}"
        self._timeout_s = timeout_s

    @classmethod
    def from_config(cls, client: httpx.AsyncClient, config: BridgeConfig) -> "RingIdentityService":
        return cls(
            client,
            config.location_id,
            base_url=config.identity_base_url,
            timeout_s=config.identity_timeout_s,
        )

    async def lookup_actor(self, actor_id: str) -> ActorSummary:
        """Return the summary for `actor_id` or raise IdentityLookupError."""
        try:
            response = await self._client.post(
                self._url,
                params={"locationId": self._location_id},
                json=[actor_id],
                timeout=self._timeout_s,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as err:
            raise IdentityLookupError(
                f"User summary request failed: {err}", actor_id=actor_id
            ) from err
        except ValueError as err:
            raise IdentityLookupError(
                "User summary response was not valid JSON", actor_id=actor_id
            ) from err
        _LOGGER.debug("User summary response for %s: %s entries", actor_id, _length(payload))
        return parse_actor_summary(payload, actor_id=actor_id)


def parse_actor_summary(payload: Any, *, actor_id: str | None = None) -> ActorSummary:
    if not isinstance(payload, list) or not payload:
        raise IdentityLookupError("User summary response was empty", actor_id=actor_id)
    entry = payload[0]
    if not isinstance(entry, Mapping):
        raise IdentityLookupError("User summary entry was malformed", actor_id=actor_id)
    return ActorSummary(
        first_name=_text(entry.get("firstName")),
        last_name=_text(entry.get("lastName")),
        email=_text(entry.get("email")),
    )


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _length(payload: Any) -> int | None:
    return len(payload) if isinstance(payload, list) else None
