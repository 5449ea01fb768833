"""Bypass sensor selection performed before every arming attempt."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from .protocols import BypassPolicyStore, DeviceCatalog
from .types import (
    AlarmCommand,
    BypassPolicy,
    BypassSelection,
    DeviceRecord,
    SensorRecord,
    SensorType,
)

_LOGGER = logging.getLogger(__name__)

BYPASS_ELIGIBLE_TYPES = frozenset(
    {
        SensorType.CONTACT,
        SensorType.MOTION,
        SensorType.TILT,
        SensorType.GLASSBREAK,
        SensorType.RETROFIT_ZONE,
    }
)


def join_sensor_records(
    devices: Iterable[DeviceRecord],
    policies: Mapping[str, BypassPolicy | str],
) -> list[SensorRecord]:
    """Join catalog devices with their saved bypass policies."""
    return [
        SensorRecord(
            sensor_id=device.device_id,
            name=device.name,
            sensor_type=SensorType.from_device_type(device.device_type),
            faulted=bool(device.faulted),
            bypass_policy=BypassPolicy.from_value(policies.get(device.device_id)),
        )
        for device in devices
    ]


def bypass_reason(sensor: SensorRecord) -> Optional[BypassPolicy]:
    """Return the policy that bypasses this sensor, or None."""
    if sensor.sensor_type not in BYPASS_ELIGIBLE_TYPES:
        return None
    if sensor.bypass_policy is BypassPolicy.ALWAYS:
        return BypassPolicy.ALWAYS
    if sensor.bypass_policy is BypassPolicy.FAULTED and sensor.faulted:
        return BypassPolicy.FAULTED
    return None


def select_bypass(sensors: Iterable[SensorRecord], command: AlarmCommand) -> BypassSelection:
    """Pick the sensors to exclude from the arming check."""
    if command is AlarmCommand.DISARM:
        return BypassSelection()
    ids: list[str] = []
    trace: list[str] = []
    for sensor in sensors:
        reason = bypass_reason(sensor)
        if reason is None:
            continue
        ids.append(sensor.sensor_id)
        trace.append(f"{sensor.name} [{reason.value}]")
    return BypassSelection(bypass_ids=tuple(ids), trace=tuple(trace))


class BypassSelector:
    """Recompute the bypass set from live catalog data on each call."""

    def __init__(self, catalog: DeviceCatalog, policy_store: BypassPolicyStore) -> None:
        self._catalog = catalog
        self._policy_store = policy_store

    async def async_select(self, command: AlarmCommand) -> BypassSelection:
        if command is AlarmCommand.DISARM:
            return BypassSelection()
        devices = await self._catalog.list_devices()
        policies = self._policy_store.get_saved_bypass_policies()
        selection = select_bypass(join_sensor_records(devices, policies), command)
        if selection:
            _LOGGER.debug(
                "The following sensors will be bypassed [Reason]: %s",
                ", ".join(selection.trace),
            )
        else:
            _LOGGER.debug("No sensors will be bypassed")
        return selection
