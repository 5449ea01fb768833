"""
Arm/disarm command handling with verified convergence.

Each attempt issues the vendor request fire-and-forget, waits briefly, then
re-reads the live snapshot and compares its mode against the target. The
request's own outcome is never trusted; only the polled mode counts.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Literal, Optional, Union

from .bypass import BypassSelector
from .const import (
    DEFAULT_COMMAND_RETRIES,
    DEFAULT_CONVERGENCE_DELAY_S,
    DEFAULT_RETRY_BACKOFF_S,
    UNKNOWN_COMMAND,
)
from .protocols import VendorConnection
from .tasks import BackgroundTasks
from .types import AlarmCommand, ArmRequest, PanelMode

_LOGGER = logging.getLogger(__name__)

CommandResult = Union[bool, Literal["unknown"]]


class CommandRetryController:
    """Drive the panel into a requested mode with bounded retries."""

    def __init__(
        self,
        vendor: VendorConnection,
        selector: BypassSelector,
        *,
        tasks: Optional[BackgroundTasks] = None,
        retries: int = DEFAULT_COMMAND_RETRIES,
        convergence_delay_s: float = DEFAULT_CONVERGENCE_DELAY_S,
        retry_backoff_s: float = DEFAULT_RETRY_BACKOFF_S,
        location_name: str = "",
    ) -> None:
        self._vendor = vendor
        self._selector = selector
        self._tasks = tasks if tasks is not None else BackgroundTasks("alarm command")
        self._retries = retries
        self._convergence_delay_s = convergence_delay_s
        self._retry_backoff_s = retry_backoff_s
        self._location_name = location_name
        self.last_attempts = 0

    async def async_set_alarm_mode(self, message: str) -> CommandResult:
        """Set the alarm mode named by `message`, retrying until it sticks."""
        _LOGGER.debug("Received set alarm mode %s for location %s", message, self._location_name)
        command = AlarmCommand.from_message(message)
        if command is None:
            _LOGGER.warning("Unknown alarm arming mode requested: %s", message)
            return UNKNOWN_COMMAND

        attempts = 0
        success = False
        while attempts < self._retries and not success:
            attempts += 1
            request = await self._async_build_request(command, attempts)
            if request is not None:
                success = await self._async_try_set_alarm_mode(request, attempts)
            if not success and attempts < self._retries:
                await asyncio.sleep(self._retry_backoff_s)

        if not success:
            _LOGGER.warning(
                "Alarm for location %s could not enter %s mode after %s attempts...giving up",
                self._location_name,
                command.value,
                attempts,
            )
        self.last_attempts = attempts
        return success

    async def _async_build_request(
        self, command: AlarmCommand, attempt: int
    ) -> Optional[ArmRequest]:
        # Recomputed on every attempt; fault status may differ between attempts.
        try:
            selection = await self._selector.async_select(command)
        except Exception as err:  # noqa: BLE001
            _LOGGER.warning(
                "Attempt %s: unable to determine bypass sensors: %s", attempt, err
            )
            return None
        return ArmRequest(command=command, bypass_ids=frozenset(selection.bypass_ids))

    async def _async_try_set_alarm_mode(self, request: ArmRequest, attempt: int) -> bool:
        command = request.command
        _LOGGER.debug("Set alarm mode: %s (attempt %s)", command.value, attempt)
        self._issue(request)

        await asyncio.sleep(self._convergence_delay_s)
        mode = PanelMode.from_value(self._vendor.get_raw_snapshot().mode)
        if mode is command.target_mode:
            _LOGGER.info(
                "Alarm for location %s successfully entered %s mode",
                self._location_name,
                command.value,
            )
            return True
        _LOGGER.debug(
            "Alarm for location %s failed to enter %s mode (mode is %s)",
            self._location_name,
            command.value,
            mode.value,
        )
        return False

    def _issue(self, request: ArmRequest) -> None:
        bypass_ids = sorted(request.bypass_ids)
        if request.command is AlarmCommand.DISARM:
            coro = self._vendor.disarm()
        elif request.command is AlarmCommand.ARM_HOME:
            coro = self._vendor.arm_home(bypass_ids)
        else:
            coro = self._vendor.arm_away(bypass_ids)
        self._tasks.create(coro, f"{request.command.value} request")
