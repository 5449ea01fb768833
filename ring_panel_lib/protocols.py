"""Interfaces of the collaborators a security panel is composed with."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, Sequence

from .types import (
    ActorSummary,
    BypassPolicy,
    DeviceRecord,
    PanelMode,
    RawPanelSnapshot,
    TopicKey,
)

Unsubscribe = Callable[[], None]
LocationEventCallback = Callable[[Mapping[str, Any]], None]


class VendorConnection(Protocol):
    """Cloud connection for a single location's security panel."""

    def get_raw_snapshot(self) -> RawPanelSnapshot: ...

    def subscribe_to_location_events(self, callback: LocationEventCallback) -> Unsubscribe: ...

    def subscribe_to_panel_updates(self, callback: Callable[[], None]) -> Unsubscribe: ...

    async def disarm(self) -> None: ...

    async def arm_home(self, bypass_ids: Sequence[str]) -> None: ...

    async def arm_away(self, bypass_ids: Sequence[str]) -> None: ...

    async def sound_siren(self) -> None: ...

    async def silence_siren(self) -> None: ...

    async def trigger_burglar_alarm(self) -> None: ...

    async def trigger_fire_alarm(self) -> None: ...

    async def set_alarm_mode(self, mode: PanelMode) -> None: ...


class DeviceCatalog(Protocol):
    async def list_devices(self) -> Sequence[DeviceRecord]: ...


class BypassPolicyStore(Protocol):
    """Read view of the externally persisted per-device bypass policies."""

    def get_saved_bypass_policies(self) -> Mapping[str, BypassPolicy | str]: ...


class IdentityService(Protocol):
    async def lookup_actor(self, actor_id: str) -> ActorSummary: ...


class PublishSink(Protocol):
    def publish(self, topic: TopicKey, value: str) -> None: ...
