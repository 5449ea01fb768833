"""Exceptions raised by ring_panel_lib."""

from __future__ import annotations


class RingPanelError(Exception):
    """Base class for all ring_panel_lib errors."""


class ConfigError(RingPanelError):
    """Bridge configuration failed validation."""


class IdentityLookupError(RingPanelError):
    """The identity service could not resolve an actor."""

    def __init__(self, message: str, *, actor_id: str | None = None) -> None:
        super().__init__(message)
        self.actor_id = actor_id


class BypassPolicyError(RingPanelError):
    """Saved bypass policies could not be read."""
