"""Saved per-device bypass policy stores."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from .errors import BypassPolicyError
from .types import BypassPolicy

_LOGGER = logging.getLogger(__name__)


class MappingBypassPolicyStore:
    """In-memory policy store."""

    def __init__(self, policies: Mapping[str, BypassPolicy | str] | None = None) -> None:
        self._policies: dict[str, BypassPolicy] = {
            str(device_id): BypassPolicy.from_value(policy)
            for device_id, policy in (policies or {}).items()
        }

    def set_policy(self, device_id: str, policy: BypassPolicy | str) -> None:
        self._policies[device_id] = BypassPolicy.from_value(policy)

    def get_saved_bypass_policies(self) -> Mapping[str, BypassPolicy]:
        return dict(self._policies)


class JsonBypassPolicyStore:
    """
    Policy store backed by a JSON file owned by another process.

    The file maps device ids to a policy string or to an object carrying
    `bypass_mode`. It is re-read on every call so external edits apply to
    the next arming attempt.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get_saved_bypass_policies(self) -> Mapping[str, BypassPolicy]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            _LOGGER.debug("Bypass policy file %s not found; no saved policies", self._path)
            return {}
        except OSError as err:
            raise BypassPolicyError(f"Unable to read {self._path}: {err}") from err
        try:
            raw = json.loads(text)
        except ValueError as err:
            raise BypassPolicyError(f"{self._path} is not valid JSON: {err}") from err
        if not isinstance(raw, dict):
            raise BypassPolicyError(f"{self._path} must contain a JSON object")
        return {str(device_id): _policy_from_entry(entry) for device_id, entry in raw.items()}


def _policy_from_entry(entry: Any) -> BypassPolicy:
    if isinstance(entry, Mapping):
        entry = entry.get("bypass_mode")
    return BypassPolicy.from_value(entry)
