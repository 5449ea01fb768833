"""Exit delay monitor that promotes arming to armed_away."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Optional

from .tasks import BackgroundTasks
from .translator import exit_delay_remaining
from .types import PanelMode, RawPanelSnapshot

_LOGGER = logging.getLogger(__name__)


class MonitorState(str, Enum):
    IDLE = "idle"
    WAITING = "waiting"


class ExitDelayMonitor:
    """
    Wait out an exit delay, then re-check live panel data.

    There is no explicit cancel: each wait re-reads the snapshot when it
    wakes and only publishes if the panel is still in mode "all" with no
    time left on the countdown. A countdown extended past the deadline
    seen at schedule time returns to idle instead. A newer schedule
    supersedes older waits, so overlapping schedules produce at most one
    publish.
    """

    def __init__(
        self,
        snapshot_provider: Callable[[], RawPanelSnapshot],
        on_armed_away: Callable[[], None],
        *,
        tasks: Optional[BackgroundTasks] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._snapshot_provider = snapshot_provider
        self._on_armed_away = on_armed_away
        self._tasks = tasks if tasks is not None else BackgroundTasks("exit delay")
        self._clock = clock
        self._generation = 0
        self._current: Optional[asyncio.Task[bool]] = None

    @property
    def state(self) -> MonitorState:
        if self._current is not None and not self._current.done():
            return MonitorState.WAITING
        return MonitorState.IDLE

    def schedule(self, delay_s: float) -> asyncio.Task[bool]:
        """Start waiting `delay_s` seconds; supersedes any earlier wait."""
        self._generation += 1
        deadline = self._snapshot_provider().exit_delay_deadline
        _LOGGER.debug("Waiting %.1fs for exit delay to expire", delay_s)
        self._current = self._tasks.create(
            self._async_wait(self._generation, max(0.0, delay_s), deadline),
            "exit delay wait",
        )
        return self._current

    async def _async_wait(
        self, generation: int, delay_s: float, deadline: Optional[float]
    ) -> bool:
        while True:
            await asyncio.sleep(delay_s)
            if generation != self._generation:
                _LOGGER.debug("Exit delay wait superseded by a newer schedule")
                return False
            snapshot = self._snapshot_provider()
            mode = PanelMode.from_value(snapshot.mode)
            if mode is not PanelMode.ALL:
                _LOGGER.debug(
                    "Panel left mode all during exit delay (now %s)", mode.value
                )
                return False
            delay_s = exit_delay_remaining(snapshot, now=self._clock())
            if delay_s <= 0:
                break
            if _extended(snapshot.exit_delay_deadline, deadline):
                _LOGGER.debug("Exit delay deadline extended; not promoting to armed_away")
                return False
            # Woke early against the wall clock; wait out the remainder.
        self._on_armed_away()
        return True


def _extended(current: Optional[float], scheduled: Optional[float]) -> bool:
    if current is None:
        return False
    return scheduled is None or current > scheduled
