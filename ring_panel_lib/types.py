"""Public types for ring_panel_lib (transport-agnostic surface)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .const import UNKNOWN


class CanonicalAlarmState(str, Enum):
    """Externally published alarm state."""

    DISARMED = "disarmed"
    ARMED_HOME = "armed_home"
    ARMED_AWAY = "armed_away"
    ARMING = "arming"
    PENDING = "pending"
    TRIGGERED = "triggered"
    UNKNOWN = "unknown"


class PanelMode(str, Enum):
    """Raw arming mode reported by the vendor."""

    NONE = "none"
    SOME = "some"
    ALL = "all"
    UNKNOWN = "unknown"

    @classmethod
    def from_value(cls, value: Any) -> "PanelMode":
        if isinstance(value, PanelMode):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return cls.UNKNOWN


class AlarmCommand(str, Enum):
    """Inbound alarm command tokens."""

    DISARM = "disarm"
    ARM_HOME = "arm_home"
    ARM_AWAY = "arm_away"

    @property
    def target_mode(self) -> PanelMode:
        """Return the vendor mode that confirms this command took effect."""
        return _COMMAND_TARGET_MODES[self]

    @classmethod
    def from_message(cls, message: Any) -> Optional["AlarmCommand"]:
        """Parse a case-insensitive command token, or None if unrecognized."""
        return _parse_token(cls, message)


_COMMAND_TARGET_MODES = {
    AlarmCommand.DISARM: PanelMode.NONE,
    AlarmCommand.ARM_HOME: PanelMode.SOME,
    AlarmCommand.ARM_AWAY: PanelMode.ALL,
}


class SwitchCommand(str, Enum):
    """Inbound siren/panic command tokens."""

    ON = "on"
    OFF = "off"

    @classmethod
    def from_message(cls, message: Any) -> Optional["SwitchCommand"]:
        return _parse_token(cls, message)


class BypassPolicy(str, Enum):
    """Per-sensor bypass configuration."""

    NEVER = "Never"
    ALWAYS = "Always"
    FAULTED = "Faulted"

    @classmethod
    def from_value(cls, value: Any) -> "BypassPolicy":
        if isinstance(value, BypassPolicy):
            return value
        if isinstance(value, str):
            for policy in cls:
                if policy.value.lower() == value.strip().lower():
                    return policy
        return cls.NEVER


class SensorType(str, Enum):
    """Sensor device types, using the vendor's device type strings."""

    CONTACT = "sensor.contact"
    MOTION = "sensor.motion"
    TILT = "sensor.tilt"
    GLASSBREAK = "sensor.glassbreak"
    RETROFIT_ZONE = "sensor.zone"
    OTHER = "other"

    @classmethod
    def from_device_type(cls, value: Any) -> "SensorType":
        try:
            return cls(str(value))
        except ValueError:
            return cls.OTHER


class TopicKey(str, Enum):
    """Keys of the values published to the sink."""

    ALARM_STATE = "alarm/state"
    ALARM_ATTRIBUTES = "alarm/attributes"
    SIREN_STATE = "siren/state"
    POLICE_STATE = "police/state"
    FIRE_STATE = "fire/state"


class CommandKey(str, Enum):
    """Keys of the inbound command channels."""

    ALARM = "alarm/command"
    SIREN = "siren/command"
    POLICE = "police/command"
    FIRE = "fire/command"

    @property
    def entity(self) -> str:
        return self.value.split("/")[0]


@dataclass(frozen=True, slots=True)
class RawPanelSnapshot:
    """
    Point-in-time view of the vendor's panel data.

    Owned by the vendor connection; every read returns the freshest copy.
    `exit_delay_deadline` is an absolute epoch timestamp in seconds.
    """

    mode: PanelMode = PanelMode.UNKNOWN
    alarm_condition: Optional[str] = None
    exit_delay_deadline: Optional[float] = None
    siren_on: bool = False

    @classmethod
    def from_device_data(cls, data: Mapping[str, Any]) -> "RawPanelSnapshot":
        """Build a snapshot from the vendor's raw panel device data."""
        alarm_info = data.get("alarmInfo")
        condition = alarm_info.get("state") if isinstance(alarm_info, Mapping) else None
        deadline_ms = data.get("transitionDelayEndTimestamp")
        deadline = (
            float(deadline_ms) / 1000.0
            if isinstance(deadline_ms, (int, float)) and not isinstance(deadline_ms, bool)
            else None
        )
        siren = data.get("siren")
        siren_on = isinstance(siren, Mapping) and siren.get("state") == "on"
        return cls(
            mode=PanelMode.from_value(data.get("mode")),
            alarm_condition=condition if isinstance(condition, str) else None,
            exit_delay_deadline=deadline,
            siren_on=siren_on,
        )


@dataclass(frozen=True, slots=True)
class DeviceRecord:
    """Catalog entry for a device at the panel's location."""

    device_id: str
    name: str
    device_type: str
    faulted: bool = False


@dataclass(frozen=True, slots=True)
class SensorRecord:
    """Live fault status joined with the saved bypass policy."""

    sensor_id: str
    name: str
    sensor_type: SensorType
    faulted: bool
    bypass_policy: BypassPolicy = BypassPolicy.NEVER


@dataclass(frozen=True, slots=True)
class ArmRequest:
    """One arm/disarm attempt; built fresh for every retry."""

    command: AlarmCommand
    bypass_ids: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class BypassSelection:
    bypass_ids: tuple[str, ...] = ()
    trace: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.bypass_ids)


@dataclass(frozen=True, slots=True)
class EventContext:
    """Actor context attached to a raw vendor event."""

    actor_id: Optional[str] = None
    actor_type: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "EventContext":
        if not isinstance(data, Mapping):
            return cls()
        actor_id = data.get("initiatingEntityId")
        actor_type = data.get("initiatingEntityType")
        return cls(
            actor_id=str(actor_id) if actor_id else None,
            actor_type=str(actor_type) if actor_type else None,
        )


@dataclass(frozen=True, slots=True)
class ActorSummary:
    first_name: str = ""
    last_name: str = ""
    email: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True, slots=True)
class Attribution:
    """
    Actor responsible for the most recent mode-switch event.

    Immutable: each new triggering event produces a fresh Attribution.
    """

    actor_id: Optional[str] = None
    actor_type: Optional[str] = None
    actor_name: str = UNKNOWN
    actor_email: str = UNKNOWN

    def to_json(self) -> dict[str, str]:
        """Return the published attribute record."""
        return {
            "initiatingEntityId": self.actor_id or UNKNOWN,
            "initiatingEntityType": self.actor_type or UNKNOWN,
            "initiatingUserName": self.actor_name,
            "initiatingUserEmail": self.actor_email,
        }


def _parse_token(enum_cls: Any, message: Any) -> Any:
    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    if not isinstance(message, str):
        return None
    try:
        return enum_cls(message.strip().lower())
    except ValueError:
        return None
