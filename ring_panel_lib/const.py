"""Constants for ring_panel_lib."""

from __future__ import annotations

from typing import Final

UNKNOWN: Final = "Unknown"
UNKNOWN_COMMAND: Final = "unknown"

# Vendor vocabulary of alarm conditions that mean an alarm is in progress.
ACTIVE_ALARM_STATES: Final = frozenset(
    {
        "burglar-alarm",
        "entry-delay",
        "fire-alarm",
        "co-alarm",
        "panic",
        "user-verified-co-or-fire-alarm",
        "user-verified-burglar-alarm",
    }
)
ENTRY_DELAY: Final = "entry-delay"
POLICE_ALARM_MARKERS: Final = ("burglar", "panic")
FIRE_ALARM_MARKERS: Final = ("co", "fire")

SWITCH_ON: Final = "ON"
SWITCH_OFF: Final = "OFF"

DEFAULT_COMMAND_RETRIES: Final = 5
DEFAULT_CONVERGENCE_DELAY_S: Final = 1.0
DEFAULT_RETRY_BACKOFF_S: Final = 10.0
MAX_COMMAND_RETRIES: Final = 20

DEFAULT_LOCATION_NAME: Final = "Home"
DEFAULT_IDENTITY_BASE_URL: Final = "https://app.ring.com"
DEFAULT_IDENTITY_TIMEOUT_S: Final = 10.0
USER_SUMMARIES_PATH: Final = "/api/v1/rs/users/summaries"

# Raw location event filter.
DEVICE_INFO_DATATYPE: Final = "DeviceInfoDocType"
MODE_SWITCH_COMMAND_TYPE: Final = "security-panel.switch-mode"

CONF_ENABLE_PANIC: Final = "enable_panic"
CONF_COMMAND_RETRIES: Final = "command_retries"
CONF_CONVERGENCE_DELAY: Final = "convergence_delay_s"
CONF_RETRY_BACKOFF: Final = "retry_backoff_s"
CONF_LOCATION_ID: Final = "location_id"
CONF_LOCATION_NAME: Final = "location_name"
CONF_IDENTITY_BASE_URL: Final = "identity_base_url"
CONF_IDENTITY_TIMEOUT: Final = "identity_timeout_s"
CONF_BYPASS_POLICY_FILE: Final = "bypass_policy_file"

REDACTED: Final = "**REDACTED**"
