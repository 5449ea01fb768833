"""Reconciliation core for a cloud security panel bridge."""

from __future__ import annotations

from .attribution import AttributionResolver
from .bypass import BypassSelector, select_bypass
from .commands import CommandRetryController
from .config import BridgeConfig, load_config
from .const import UNKNOWN, UNKNOWN_COMMAND
from .diagnostics import panel_diagnostics, redact_for_diagnostics
from .dispatcher import EventDispatcher, is_mode_switch_event
from .errors import BypassPolicyError, ConfigError, IdentityLookupError, RingPanelError
from .exit_delay import ExitDelayMonitor, MonitorState
from .identity import RingIdentityService
from .panel import SecurityPanel
from .policy_store import JsonBypassPolicyStore, MappingBypassPolicyStore
from .translator import Translation, alarm_state, translate
from .types import (
    ActorSummary,
    AlarmCommand,
    ArmRequest,
    Attribution,
    BypassPolicy,
    BypassSelection,
    CanonicalAlarmState,
    CommandKey,
    DeviceRecord,
    EventContext,
    PanelMode,
    RawPanelSnapshot,
    SensorRecord,
    SensorType,
    SwitchCommand,
    TopicKey,
)

__all__ = [
    "ActorSummary",
    "AlarmCommand",
    "ArmRequest",
    "Attribution",
    "AttributionResolver",
    "BridgeConfig",
    "BypassPolicy",
    "BypassPolicyError",
    "BypassSelection",
    "BypassSelector",
    "CanonicalAlarmState",
    "CommandKey",
    "CommandRetryController",
    "ConfigError",
    "DeviceRecord",
    "EventContext",
    "EventDispatcher",
    "ExitDelayMonitor",
    "IdentityLookupError",
    "JsonBypassPolicyStore",
    "MappingBypassPolicyStore",
    "MonitorState",
    "PanelMode",
    "RawPanelSnapshot",
    "RingIdentityService",
    "RingPanelError",
    "SecurityPanel",
    "SensorRecord",
    "SensorType",
    "SwitchCommand",
    "TopicKey",
    "Translation",
    "UNKNOWN",
    "UNKNOWN_COMMAND",
    "alarm_state",
    "is_mode_switch_event",
    "load_config",
    "panel_diagnostics",
    "redact_for_diagnostics",
    "select_bypass",
    "translate",
]
