"""
Mode translation from raw vendor panel data to the canonical alarm state.

Rules:
- An active alarm condition always wins over the arming mode; the single
  condition "entry-delay" is reported as pending, every other one as triggered.
- Mode "all" is reported as arming while the exit delay deadline is in the
  future, and as armed_away once it has passed.
- No I/O and no logging here; callers decide what to do with the exit delay.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from .const import (
    ACTIVE_ALARM_STATES,
    ENTRY_DELAY,
    FIRE_ALARM_MARKERS,
    POLICE_ALARM_MARKERS,
    SWITCH_OFF,
    SWITCH_ON,
)
from .types import CanonicalAlarmState, PanelMode, RawPanelSnapshot

_MODE_STATES = {
    PanelMode.NONE: CanonicalAlarmState.DISARMED,
    PanelMode.SOME: CanonicalAlarmState.ARMED_HOME,
}


@dataclass(frozen=True, slots=True)
class Translation:
    """Canonical state plus the remaining exit delay when arming."""

    state: CanonicalAlarmState
    exit_delay_s: Optional[float] = None

    @property
    def needs_exit_delay_wait(self) -> bool:
        return self.state is CanonicalAlarmState.ARMING and bool(self.exit_delay_s)


def is_active_alarm(condition: Optional[str]) -> bool:
    return condition is not None and condition in ACTIVE_ALARM_STATES


def exit_delay_remaining(snapshot: RawPanelSnapshot, *, now: Optional[float] = None) -> float:
    """Return seconds left in the exit delay, or 0.0 if none is running."""
    if snapshot.exit_delay_deadline is None:
        return 0.0
    if now is None:
        now = time.time()
    return max(0.0, snapshot.exit_delay_deadline - now)


def translate(snapshot: RawPanelSnapshot, *, now: Optional[float] = None) -> Translation:
    """Map a raw snapshot onto the canonical alarm state."""
    if is_active_alarm(snapshot.alarm_condition):
        if snapshot.alarm_condition == ENTRY_DELAY:
            return Translation(CanonicalAlarmState.PENDING)
        return Translation(CanonicalAlarmState.TRIGGERED)
    mode = PanelMode.from_value(snapshot.mode)
    if mode is PanelMode.ALL:
        remaining = exit_delay_remaining(snapshot, now=now)
        if remaining > 0:
            return Translation(CanonicalAlarmState.ARMING, exit_delay_s=remaining)
        return Translation(CanonicalAlarmState.ARMED_AWAY)
    return Translation(_MODE_STATES.get(mode, CanonicalAlarmState.UNKNOWN))


def alarm_state(snapshot: RawPanelSnapshot, *, now: Optional[float] = None) -> CanonicalAlarmState:
    return translate(snapshot, now=now).state


def switch_value(on: bool) -> str:
    return SWITCH_ON if on else SWITCH_OFF


def siren_state(snapshot: RawPanelSnapshot) -> str:
    return switch_value(snapshot.siren_on)


def police_state(snapshot: RawPanelSnapshot) -> str:
    """Return ON while the alarm condition names a burglar or panic alarm."""
    return switch_value(_condition_matches(snapshot, POLICE_ALARM_MARKERS))


def fire_state(snapshot: RawPanelSnapshot) -> str:
    """Return ON while the alarm condition names a fire or CO alarm."""
    return switch_value(_condition_matches(snapshot, FIRE_ALARM_MARKERS))


def _condition_matches(snapshot: RawPanelSnapshot, markers: tuple[str, ...]) -> bool:
    condition = snapshot.alarm_condition
    if not condition:
        return False
    tokens = condition.split("-")
    return any(marker in tokens for marker in markers)
