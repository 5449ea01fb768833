"""Filter the location's raw event stream for this panel's mode switches."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping, Optional

from .attribution import AttributionResolver
from .const import DEVICE_INFO_DATATYPE, MODE_SWITCH_COMMAND_TYPE
from .tasks import BackgroundTasks
from .types import Attribution, EventContext

_LOGGER = logging.getLogger(__name__)


def is_mode_switch_event(message: Any, device_id: str) -> bool:
    """Return True if `message` is a mode switch of the panel `device_id`."""
    if not isinstance(message, Mapping):
        return False
    if message.get("datatype") != DEVICE_INFO_DATATYPE:
        return False
    body = message.get("body")
    if not isinstance(body, list) or not body or not isinstance(body[0], Mapping):
        return False
    document = body[0]
    if _dig(document, "general", "v2", "zid") != device_id:
        return False
    impulses = _dig(document, "impulse", "v1")
    if not isinstance(impulses, list) or not impulses:
        return False
    return any(
        _dig(impulse, "data", "commandType") == MODE_SWITCH_COMMAND_TYPE
        for impulse in impulses
    )


class EventDispatcher:
    """
    Route matching raw events to the attribution resolver.

    `on_event` receives the resolved Attribution and is expected to publish
    state immediately. When events overlap, the resolution of an older
    event is discarded once a newer one has been delivered.
    """

    def __init__(
        self,
        device_id: str,
        resolver: AttributionResolver,
        on_event: Callable[[Attribution], None],
        *,
        tasks: Optional[BackgroundTasks] = None,
    ) -> None:
        self._device_id = device_id
        self._resolver = resolver
        self._on_event = on_event
        self._tasks = tasks if tasks is not None else BackgroundTasks("event dispatch")
        self._received_seq = 0
        self._delivered_seq = 0

    def handle_message(self, message: Mapping[str, Any]) -> Optional[asyncio.Task[Optional[Attribution]]]:
        """Subscription callback for the location's raw event stream."""
        if not is_mode_switch_event(message, self._device_id):
            return None
        return self._tasks.create(self.async_process(message), "mode switch event")

    async def async_process(self, message: Mapping[str, Any]) -> Optional[Attribution]:
        self._received_seq += 1
        seq = self._received_seq
        context = EventContext.from_json(message.get("context"))
        _LOGGER.debug(
            "Mode switch event for %s initiated by %s (%s)",
            self._device_id,
            context.actor_id,
            context.actor_type,
        )
        attribution = await self._resolver.async_resolve(context)
        if seq < self._delivered_seq:
            _LOGGER.debug("Discarding attribution of superseded event %s", seq)
            return None
        self._delivered_seq = seq
        self._on_event(attribution)
        return attribution


def _dig(value: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value
