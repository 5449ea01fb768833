"""Attribution of mode changes to the actor that caused them."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from .const import UNKNOWN
from .protocols import IdentityService
from .types import Attribution, EventContext

_LOGGER = logging.getLogger(__name__)


class AttributionResolver:
    """
    Build a fresh Attribution for each triggering event.

    Lookup failures are never raised: they are logged and the name/email
    fall back to "Unknown".
    """

    def __init__(self, identity: Optional[IdentityService]) -> None:
        self._identity = identity

    async def async_resolve(
        self, context: EventContext | Mapping[str, Any] | None
    ) -> Attribution:
        if not isinstance(context, EventContext):
            context = EventContext.from_json(context)
        attribution = Attribution(actor_id=context.actor_id, actor_type=context.actor_type)
        if not context.actor_id or self._identity is None:
            return attribution
        try:
            summary = await self._identity.lookup_actor(context.actor_id)
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning("Could not get user information for %s: %s", context.actor_id, err)
            return attribution
        return Attribution(
            actor_id=context.actor_id,
            actor_type=context.actor_type,
            actor_name=summary.display_name or UNKNOWN,
            actor_email=summary.email or UNKNOWN,
        )
