"""Security panel: publishes canonical state and handles inbound commands."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Callable, Coroutine, Optional

from .attribution import AttributionResolver
from .bypass import BypassSelector
from .commands import CommandResult, CommandRetryController
from .config import BridgeConfig
from .const import SWITCH_ON
from .dispatcher import EventDispatcher
from .exit_delay import ExitDelayMonitor
from .policy_store import JsonBypassPolicyStore, MappingBypassPolicyStore
from .protocols import (
    BypassPolicyStore,
    DeviceCatalog,
    IdentityService,
    PublishSink,
    Unsubscribe,
    VendorConnection,
)
from .tasks import BackgroundTasks
from .translator import fire_state, police_state, siren_state, translate
from .types import (
    Attribution,
    CanonicalAlarmState,
    CommandKey,
    PanelMode,
    RawPanelSnapshot,
    SwitchCommand,
    TopicKey,
)

_LOGGER = logging.getLogger(__name__)


class SecurityPanel:
    """
    Reconcile one location's security panel with the publish sink.

    Collaborators are passed in explicitly; the panel owns no transport.
    """

    def __init__(
        self,
        device_id: str,
        vendor: VendorConnection,
        catalog: DeviceCatalog,
        sink: PublishSink,
        *,
        identity: Optional[IdentityService] = None,
        policy_store: Optional[BypassPolicyStore] = None,
        config: Optional[BridgeConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the panel and its workers."""
        self._device_id = device_id
        self._vendor = vendor
        self._sink = sink
        self._config = config or BridgeConfig()
        self._clock = clock
        self._attribution = Attribution()
        self._unsubscribers: list[Unsubscribe] = []
        self._tasks = BackgroundTasks(self.name)
        if policy_store is None:
            policy_store = _default_policy_store(self._config)
        self._controller = CommandRetryController(
            vendor,
            BypassSelector(catalog, policy_store),
            tasks=self._tasks,
            retries=self._config.command_retries,
            convergence_delay_s=self._config.convergence_delay_s,
            retry_backoff_s=self._config.retry_backoff_s,
            location_name=self._config.location_name,
        )
        self._exit_delay = ExitDelayMonitor(
            vendor.get_raw_snapshot,
            self._publish_armed_away,
            tasks=self._tasks,
            clock=clock,
        )
        self._dispatcher = EventDispatcher(
            device_id,
            AttributionResolver(identity),
            self._handle_attributed_event,
            tasks=self._tasks,
        )

    @property
    def device_id(self) -> str:
        return self._device_id

    @property
    def name(self) -> str:
        return f"{self._config.location_name} Alarm"

    @property
    def config(self) -> BridgeConfig:
        return self._config

    @property
    def attribution(self) -> Attribution:
        return self._attribution

    @property
    def exit_delay(self) -> ExitDelayMonitor:
        return self._exit_delay

    @property
    def controller(self) -> CommandRetryController:
        return self._controller

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    @property
    def entities(self) -> tuple[str, ...]:
        """Return the entity keys this panel publishes."""
        if self._config.enable_panic:
            return ("alarm", "siren", "police", "fire")
        return ("alarm", "siren")

    def start(self) -> None:
        """Subscribe to vendor updates and publish the initial state."""
        if self._unsubscribers:
            return
        self._unsubscribers.append(
            self._vendor.subscribe_to_location_events(self._dispatcher.handle_message)
        )
        self._unsubscribers.append(self._vendor.subscribe_to_panel_updates(self.publish_state))
        self.publish_state()

    async def async_stop(self) -> None:
        """Unsubscribe and cancel in-flight work."""
        while self._unsubscribers:
            self._unsubscribers.pop()()
        await self._tasks.async_cancel_all()

    def snapshot(self) -> RawPanelSnapshot:
        return self._vendor.get_raw_snapshot()

    def publish_state(self) -> None:
        """Publish the alarm state, attributes and switch states."""
        snapshot = self.snapshot()
        self._publish_alarm_state(snapshot)
        self._sink.publish(TopicKey.SIREN_STATE, siren_state(snapshot))
        if not self._config.enable_panic:
            return
        police = police_state(snapshot)
        if police == SWITCH_ON:
            _LOGGER.debug("Burglar alarm is triggered for %s", self._config.location_name)
        self._sink.publish(TopicKey.POLICE_STATE, police)
        fire = fire_state(snapshot)
        if fire == SWITCH_ON:
            _LOGGER.debug("Fire alarm is triggered for %s", self._config.location_name)
        self._sink.publish(TopicKey.FIRE_STATE, fire)

    def publish_alarm_state(self) -> CanonicalAlarmState:
        """Publish the canonical alarm state with the current attribution."""
        return self._publish_alarm_state(self.snapshot())

    def _publish_alarm_state(self, snapshot: RawPanelSnapshot) -> CanonicalAlarmState:
        translation = translate(snapshot, now=self._clock())
        if translation.needs_exit_delay_wait:
            self._exit_delay.schedule(translation.exit_delay_s or 0.0)
        self._sink.publish(TopicKey.ALARM_STATE, translation.state.value)
        self._sink.publish(TopicKey.ALARM_ATTRIBUTES, json.dumps(self._attribution.to_json()))
        return translation.state

    def _publish_armed_away(self) -> None:
        _LOGGER.debug("Exit delay expired for %s", self._config.location_name)
        self._sink.publish(TopicKey.ALARM_STATE, CanonicalAlarmState.ARMED_AWAY.value)

    def _handle_attributed_event(self, attribution: Attribution) -> None:
        self._attribution = attribution
        self.publish_alarm_state()

    def process_command(self, command: str, message: Any) -> Optional[asyncio.Task[Any]]:
        """Route an inbound command without waiting for it to finish."""
        coro = self._command_coroutine(command, message)
        if coro is None:
            return None
        return self._tasks.create(coro, f"{command} command")

    async def async_process_command(self, command: str, message: Any) -> Any:
        """Route an inbound command and wait for its result."""
        coro = self._command_coroutine(command, message)
        if coro is None:
            return None
        return await coro

    def _command_coroutine(
        self, command: str, message: Any
    ) -> Optional[Coroutine[Any, Any, Any]]:
        try:
            key = CommandKey(command)
        except ValueError:
            _LOGGER.warning("Received message to unknown command topic: %s", command)
            return None
        if key in (CommandKey.POLICE, CommandKey.FIRE) and key.entity not in self.entities:
            _LOGGER.debug("Ignoring %s; panic entities are disabled", command)
            return None
        if key is CommandKey.ALARM:
            return self.async_set_alarm_mode(message)
        if key is CommandKey.SIREN:
            return self.async_set_siren_mode(message)
        if key is CommandKey.POLICE:
            return self.async_set_police_mode(message)
        return self.async_set_fire_mode(message)

    async def async_set_alarm_mode(self, message: str) -> CommandResult:
        return await self._controller.async_set_alarm_mode(message)

    async def async_set_siren_mode(self, message: str) -> bool:
        switch = SwitchCommand.from_message(message)
        if switch is SwitchCommand.ON:
            _LOGGER.debug("Activating siren for %s", self._config.location_name)
            self._tasks.create(self._vendor.sound_siren(), "sound siren")
        elif switch is SwitchCommand.OFF:
            _LOGGER.debug("Deactivating siren for %s", self._config.location_name)
            self._tasks.create(self._vendor.silence_siren(), "silence siren")
        else:
            _LOGGER.warning("Received invalid command for siren: %s", message)
            return False
        return True

    async def async_set_police_mode(self, message: str) -> bool:
        switch = SwitchCommand.from_message(message)
        if switch is SwitchCommand.ON:
            _LOGGER.debug("Activating burglar alarm for %s", self._config.location_name)
            self._tasks.create(self._vendor.trigger_burglar_alarm(), "trigger burglar alarm")
        elif switch is SwitchCommand.OFF:
            _LOGGER.debug("Deactivating burglar alarm for %s", self._config.location_name)
            self._tasks.create(self._vendor.set_alarm_mode(PanelMode.NONE), "clear burglar alarm")
        else:
            _LOGGER.warning("Received invalid command for panic: %s", message)
            return False
        return True

    async def async_set_fire_mode(self, message: str) -> bool:
        switch = SwitchCommand.from_message(message)
        if switch is SwitchCommand.ON:
            _LOGGER.debug("Activating fire alarm for %s", self._config.location_name)
            self._tasks.create(self._vendor.trigger_fire_alarm(), "trigger fire alarm")
        elif switch is SwitchCommand.OFF:
            _LOGGER.debug("Deactivating fire alarm for %s", self._config.location_name)
            self._tasks.create(self._vendor.set_alarm_mode(PanelMode.NONE), "clear fire alarm")
        else:
            _LOGGER.warning("Received invalid command for panic: %s", message)
            return False
        return True


def _default_policy_store(config: BridgeConfig) -> BypassPolicyStore:
    if config.bypass_policy_file:
        return JsonBypassPolicyStore(config.bypass_policy_file)
    return MappingBypassPolicyStore()
