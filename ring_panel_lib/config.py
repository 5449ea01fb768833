"""Bridge configuration loading and validation."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import voluptuous as vol

from .const import (
    CONF_BYPASS_POLICY_FILE,
    CONF_COMMAND_RETRIES,
    CONF_CONVERGENCE_DELAY,
    CONF_ENABLE_PANIC,
    CONF_IDENTITY_BASE_URL,
    CONF_IDENTITY_TIMEOUT,
    CONF_LOCATION_ID,
    CONF_LOCATION_NAME,
    CONF_RETRY_BACKOFF,
    DEFAULT_COMMAND_RETRIES,
    DEFAULT_CONVERGENCE_DELAY_S,
    DEFAULT_IDENTITY_BASE_URL,
    DEFAULT_IDENTITY_TIMEOUT_S,
    DEFAULT_LOCATION_NAME,
    DEFAULT_RETRY_BACKOFF_S,
    MAX_COMMAND_RETRIES,
)
from .errors import ConfigError

_LOGGER = logging.getLogger(__name__)

_SECONDS = vol.All(vol.Coerce(float), vol.Range(min=0))

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_ENABLE_PANIC, default=False): vol.Boolean(),
        vol.Optional(CONF_COMMAND_RETRIES, default=DEFAULT_COMMAND_RETRIES): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=MAX_COMMAND_RETRIES)
        ),
        vol.Optional(CONF_CONVERGENCE_DELAY, default=DEFAULT_CONVERGENCE_DELAY_S): _SECONDS,
        vol.Optional(CONF_RETRY_BACKOFF, default=DEFAULT_RETRY_BACKOFF_S): _SECONDS,
        vol.Optional(CONF_LOCATION_ID, default=""): vol.Coerce(str),
        vol.Optional(CONF_LOCATION_NAME, default=DEFAULT_LOCATION_NAME): vol.All(
            vol.Coerce(str), vol.Length(min=1)
        ),
        vol.Optional(CONF_IDENTITY_BASE_URL, default=DEFAULT_IDENTITY_BASE_URL): vol.All(
            vol.Url(), vol.Coerce(str)
        ),
        vol.Optional(CONF_IDENTITY_TIMEOUT, default=DEFAULT_IDENTITY_TIMEOUT_S): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(CONF_BYPASS_POLICY_FILE, default=None): vol.Any(None, vol.Coerce(str)),
    },
    extra=vol.PREVENT_EXTRA,
)


@dataclass(frozen=True, slots=True)
class BridgeConfig:
    """
    Immutable bridge configuration.

    Provided once at panel construction and treated as read-only thereafter.
    """

    enable_panic: bool = False
    command_retries: int = DEFAULT_COMMAND_RETRIES
    convergence_delay_s: float = DEFAULT_CONVERGENCE_DELAY_S
    retry_backoff_s: float = DEFAULT_RETRY_BACKOFF_S
    location_id: str = ""
    location_name: str = DEFAULT_LOCATION_NAME
    identity_base_url: str = DEFAULT_IDENTITY_BASE_URL
    identity_timeout_s: float = DEFAULT_IDENTITY_TIMEOUT_S
    bypass_policy_file: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "BridgeConfig":
        """Validate a raw mapping and build a config from it."""
        try:
            validated = CONFIG_SCHEMA(dict(data or {}))
        except vol.Invalid as err:
            raise ConfigError(f"Invalid bridge configuration: {err}") from err
        return cls(
            enable_panic=validated[CONF_ENABLE_PANIC],
            command_retries=validated[CONF_COMMAND_RETRIES],
            convergence_delay_s=validated[CONF_CONVERGENCE_DELAY],
            retry_backoff_s=validated[CONF_RETRY_BACKOFF],
            location_id=validated[CONF_LOCATION_ID],
            location_name=validated[CONF_LOCATION_NAME],
            identity_base_url=validated[CONF_IDENTITY_BASE_URL].rstrip("/"),
            identity_timeout_s=validated[CONF_IDENTITY_TIMEOUT],
            bypass_policy_file=validated[CONF_BYPASS_POLICY_FILE],
        )


def load_config(path: str | Path) -> BridgeConfig:
    """Read a JSON config file and validate it."""
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as err:
        raise ConfigError(f"Unable to read config file {config_path}: {err}") from err
    except ValueError as err:
        raise ConfigError(f"Config file {config_path} is not valid JSON: {err}") from err
    if not isinstance(raw, Mapping):
        raise ConfigError(f"Config file {config_path} must contain a JSON object")
    config = BridgeConfig.from_mapping(raw)
    _LOGGER.debug("Loaded bridge config from %s", config_path)
    return config
