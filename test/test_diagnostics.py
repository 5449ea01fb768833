from __future__ import annotations

import json

from ring_panel_lib.config import BridgeConfig
from ring_panel_lib.const import REDACTED
from ring_panel_lib.diagnostics import panel_diagnostics, redact_for_diagnostics
from ring_panel_lib.panel import SecurityPanel
from ring_panel_lib.types import Attribution, PanelMode, RawPanelSnapshot


class _Vendor:
    def get_raw_snapshot(self) -> RawPanelSnapshot:
        return RawPanelSnapshot(mode=PanelMode.SOME, siren_on=True)


class _Catalog:
    async def list_devices(self):
        return []


class _Sink:
    def publish(self, topic, value) -> None:
        pass


def test_redact_nested_values() -> None:
    data = {
        "attribution": {"actor_name": "Ada Lovelace", "actor_email": "Unknown"},
        "items": [{"location_id": "loc-1"}, {"location_id": ""}],
        "mode": "some",
    }

    redacted = redact_for_diagnostics(data)

    assert redacted == {
        "attribution": {"actor_name": REDACTED, "actor_email": "Unknown"},
        "items": [{"location_id": REDACTED}, {"location_id": ""}],
        "mode": "some",
    }


def test_panel_diagnostics_is_json_safe_and_redacted() -> None:
    panel = SecurityPanel(
        "panel-zid",
        _Vendor(),
        _Catalog(),
        _Sink(),
        config=BridgeConfig(location_id="loc-1", enable_panic=True),
    )
    panel._attribution = Attribution(
        actor_id="user-1", actor_type="user", actor_name="Ada", actor_email="ada@example.com"
    )

    diagnostics = panel_diagnostics(panel)

    json.dumps(diagnostics)
    assert diagnostics["alarm_state"] == "armed_home"
    assert diagnostics["snapshot"]["mode"] == "some"
    assert diagnostics["snapshot"]["siren_on"] is True
    assert diagnostics["entities"] == ["alarm", "siren", "police", "fire"]
    assert diagnostics["config"]["location_id"] == REDACTED
    assert diagnostics["attribution"]["actor_id"] == "user-1"
    assert diagnostics["attribution"]["actor_name"] == REDACTED
    assert diagnostics["attribution"]["actor_email"] == REDACTED
    assert diagnostics["exit_delay_monitor"] == "idle"
    assert diagnostics["last_command_attempts"] == 0


def test_to_jsonable_handles_library_types() -> None:
    from ring_panel_lib.diagnostics import _to_jsonable

    value = {"modes": (PanelMode.ALL, PanelMode.NONE), "snapshot": RawPanelSnapshot()}

    assert _to_jsonable(value) == {
        "modes": ["all", "none"],
        "snapshot": {
            "mode": "unknown",
            "alarm_condition": None,
            "exit_delay_deadline": None,
            "siren_on": False,
        },
    }
