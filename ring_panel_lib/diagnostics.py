"""Diagnostics support for a security panel."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .const import REDACTED, UNKNOWN
from .translator import translate

if TYPE_CHECKING:
    from .panel import SecurityPanel

TO_REDACT = frozenset(
    {
        "actor_name",
        "actor_email",
        "initiatingUserName",
        "initiatingUserEmail",
        "location_id",
    }
)
_NOT_SENSITIVE = (None, "", UNKNOWN)


def panel_diagnostics(panel: SecurityPanel) -> dict[str, Any]:
    """Return a JSON-safe, redacted dump of the panel's current state."""
    snapshot = panel.snapshot()
    translation = translate(snapshot)
    return {
        "device_id": panel.device_id,
        "name": panel.name,
        "entities": list(panel.entities),
        "config": redact_for_diagnostics(_to_jsonable(panel.config)),
        "snapshot": _to_jsonable(snapshot),
        "alarm_state": translation.state.value,
        "exit_delay_s": translation.exit_delay_s,
        "exit_delay_monitor": panel.exit_delay.state.value,
        "attribution": redact_for_diagnostics(_to_jsonable(panel.attribution)),
        "pending_tasks": panel.pending_tasks,
        "last_command_attempts": panel.controller.last_attempts,
    }


def redact_for_diagnostics(data: Any, to_redact: Iterable[str] = TO_REDACT) -> Any:
    """Replace the values of sensitive keys, recursively."""
    keys = frozenset(to_redact)
    if isinstance(data, Mapping):
        return {
            key: REDACTED if key in keys and value not in _NOT_SENSITIVE
            else redact_for_diagnostics(value, keys)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_for_diagnostics(item, keys) for item in data]
    return data


def _to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {field.name: _to_jsonable(getattr(value, field.name)) for field in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(key): _to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    return value
