from __future__ import annotations

import asyncio
import logging

import pytest

from ring_panel_lib.bypass import BypassSelector
from ring_panel_lib.commands import CommandRetryController
from ring_panel_lib.policy_store import MappingBypassPolicyStore
from ring_panel_lib.types import DeviceRecord, PanelMode, RawPanelSnapshot


class _FakeVendor:
    """Reports `target` only once `converge_after` requests have been issued."""

    def __init__(self, *, target: PanelMode, converge_after: int | None, fail: bool = False) -> None:
        self.mode = PanelMode.NONE if target is not PanelMode.NONE else PanelMode.ALL
        self.target = target
        self.converge_after = converge_after
        self.fail = fail
        self.calls: list[tuple[str, tuple[str, ...]]] = []

    def get_raw_snapshot(self) -> RawPanelSnapshot:
        return RawPanelSnapshot(mode=self.mode)

    async def _request(self, name: str, bypass_ids=()) -> None:
        self.calls.append((name, tuple(bypass_ids)))
        if self.converge_after is not None and len(self.calls) >= self.converge_after:
            self.mode = self.target
        if self.fail:
            raise ConnectionError("request rejected")

    async def disarm(self) -> None:
        await self._request("disarm")

    async def arm_home(self, bypass_ids) -> None:
        await self._request("arm_home", bypass_ids)

    async def arm_away(self, bypass_ids) -> None:
        await self._request("arm_away", bypass_ids)


class _FakeCatalog:
    def __init__(self, devices=()) -> None:
        self.devices = list(devices)
        self.calls = 0
        self.error: Exception | None = None

    async def list_devices(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.devices)


def _controller(vendor, catalog=None, store=None, **kwargs) -> CommandRetryController:
    selector = BypassSelector(catalog or _FakeCatalog(), store or MappingBypassPolicyStore())
    kwargs.setdefault("convergence_delay_s", 0)
    kwargs.setdefault("retry_backoff_s", 0)
    return CommandRetryController(vendor, selector, **kwargs)


@pytest.mark.asyncio
async def test_converges_on_third_attempt() -> None:
    vendor = _FakeVendor(target=PanelMode.ALL, converge_after=3)
    controller = _controller(vendor)

    result = await controller.async_set_alarm_mode("arm_away")

    assert result is True
    assert controller.last_attempts == 3
    assert [name for name, _ in vendor.calls] == ["arm_away"] * 3


@pytest.mark.asyncio
async def test_never_converging_gives_up_after_five_attempts(caplog) -> None:
    vendor = _FakeVendor(target=PanelMode.SOME, converge_after=None)
    controller = _controller(vendor)

    with caplog.at_level(logging.WARNING):
        result = await controller.async_set_alarm_mode("arm_home")

    assert result is False
    assert controller.last_attempts == 5
    assert len(vendor.calls) == 5
    assert "giving up" in caplog.text


@pytest.mark.asyncio
async def test_retry_bound_is_configurable() -> None:
    vendor = _FakeVendor(target=PanelMode.SOME, converge_after=None)
    controller = _controller(vendor, retries=2)

    assert await controller.async_set_alarm_mode("arm_home") is False
    assert len(vendor.calls) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("message", ["FOO", "", "arm_night"])
async def test_unknown_command_issues_no_vendor_calls(message) -> None:
    vendor = _FakeVendor(target=PanelMode.ALL, converge_after=1)
    catalog = _FakeCatalog()
    controller = _controller(vendor, catalog)

    result = await controller.async_set_alarm_mode(message)

    assert result == "unknown"
    assert vendor.calls == []
    assert catalog.calls == 0


@pytest.mark.asyncio
async def test_command_tokens_are_case_insensitive() -> None:
    vendor = _FakeVendor(target=PanelMode.NONE, converge_after=1)

    assert await _controller(vendor).async_set_alarm_mode("DISARM") is True
    assert vendor.calls == [("disarm", ())]


@pytest.mark.asyncio
async def test_failed_requests_do_not_abort_the_loop() -> None:
    vendor = _FakeVendor(target=PanelMode.ALL, converge_after=2, fail=True)
    controller = _controller(vendor)

    result = await controller.async_set_alarm_mode("arm_away")
    await asyncio.sleep(0)

    assert result is True
    assert len(vendor.calls) == 2


@pytest.mark.asyncio
async def test_bypass_set_recomputed_every_attempt() -> None:
    vendor = _FakeVendor(target=PanelMode.ALL, converge_after=None)
    catalog = _FakeCatalog([DeviceRecord("d1", "Back Door", "sensor.contact", faulted=True)])
    store = MappingBypassPolicyStore({"d1": "Faulted"})
    controller = _controller(vendor, catalog, store, retries=2)

    async def _flip_fault(*args, **kwargs) -> None:
        catalog.devices = [DeviceRecord("d1", "Back Door", "sensor.contact", faulted=False)]

    original = vendor._request

    async def _request(name, bypass_ids=()) -> None:
        await original(name, bypass_ids)
        await _flip_fault()

    vendor._request = _request  # type: ignore[method-assign]

    await controller.async_set_alarm_mode("arm_away")

    assert catalog.calls == 2
    assert vendor.calls == [("arm_away", ("d1",)), ("arm_away", ())]


@pytest.mark.asyncio
async def test_disarm_skips_bypass_selection() -> None:
    vendor = _FakeVendor(target=PanelMode.NONE, converge_after=1)
    catalog = _FakeCatalog()

    await _controller(vendor, catalog).async_set_alarm_mode("disarm")

    assert catalog.calls == 0


@pytest.mark.asyncio
async def test_catalog_failure_counts_as_failed_attempt() -> None:
    vendor = _FakeVendor(target=PanelMode.ALL, converge_after=1)
    catalog = _FakeCatalog()
    catalog.error = RuntimeError("catalog unavailable")
    controller = _controller(vendor, catalog, retries=3)

    result = await controller.async_set_alarm_mode("arm_away")

    assert result is False
    assert controller.last_attempts == 3
    assert vendor.calls == []


@pytest.mark.asyncio
async def test_backoff_only_between_attempts(monkeypatch) -> None:
    vendor = _FakeVendor(target=PanelMode.SOME, converge_after=None)
    controller = _controller(vendor, retries=3, convergence_delay_s=0.001, retry_backoff_s=0.01)
    delays: list[float] = []
    real_sleep = asyncio.sleep

    async def _sleep(delay, *args, **kwargs):
        delays.append(delay)
        await real_sleep(0)

    monkeypatch.setattr("ring_panel_lib.commands.asyncio.sleep", _sleep)

    await controller.async_set_alarm_mode("arm_home")

    assert delays == [0.001, 0.01, 0.001, 0.01, 0.001]


@pytest.mark.asyncio
async def test_overlapping_commands_each_get_full_retry_budget(caplog) -> None:
    vendor = _FakeVendor(target=PanelMode.NONE, converge_after=None)
    vendor.mode = PanelMode.NONE
    controller = _controller(vendor, convergence_delay_s=0.005, retry_backoff_s=0.005)

    with caplog.at_level(logging.WARNING):
        away = asyncio.create_task(controller.async_set_alarm_mode("arm_away"))
        await asyncio.sleep(0.012)
        home = await controller.async_set_alarm_mode("arm_home")
        assert await away is False

    assert home is False
    names = [name for name, _ in vendor.calls]
    assert names.count("arm_away") == 5
    assert names.count("arm_home") == 5
    assert caplog.text.count("after 5 attempts...giving up") == 2


@pytest.mark.asyncio
async def test_unknown_token_does_not_reset_running_retry_loop() -> None:
    vendor = _FakeVendor(target=PanelMode.ALL, converge_after=None)
    controller = _controller(vendor, convergence_delay_s=0.005, retry_backoff_s=0.005)

    away = asyncio.create_task(controller.async_set_alarm_mode("arm_away"))
    await asyncio.sleep(0.012)

    assert await controller.async_set_alarm_mode("FOO") == "unknown"
    assert await away is False
    assert len(vendor.calls) == 5
    assert controller.last_attempts == 5
