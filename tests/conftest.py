"""Common fixtures for iZone tests."""
import asyncio
from datetime import datetime

import pytest
from unittest.mock import AsyncMock, MagicMock
from homeassistant.core import HomeAssistant
from homeassistant.config_entries import ConfigEntry

from custom_components.izone.models import ApiResult, SystemInfo, ZoneInfo
from custom_components.izone.state import StateStore


def _system_payload(**overrides):
    """Build a SystemV2 response body."""
    system = {
        "SysOn": 1,
        "SysMode": 1,
        "SysFan": 2,
        "Temp": 2410,
        "Setpoint": 2300,
        "NoOfZones": 4,
    }
    system.update(overrides)
    return {"SystemV2": system}


def _zone_payload(index, **overrides):
    """Build a ZonesV2 response body."""
    zone = {
        "Index": index,
        "Name": f"Zone {index}",
        "ZoneType": 1,
        "Mode": 3,
        "Setpoint": 2200,
        "Temp": 2350,
    }
    zone.update(overrides)
    return {"ZonesV2": zone}


@pytest.fixture
def system_payload():
    """Factory for SystemV2 response bodies."""
    return _system_payload


@pytest.fixture
def zone_payload():
    """Factory for ZonesV2 response bodies."""
    return _zone_payload


@pytest.fixture
def mock_hass():
    """Create a mock Home Assistant instance."""
    hass = MagicMock(spec=HomeAssistant)
    hass.data = {}
    hass.loop = None
    hass.async_create_task = MagicMock()
    hass.add_job = MagicMock()
    return hass


@pytest.fixture
def mock_config_entry():
    """Create a mock config entry."""
    entry = MagicMock(spec=ConfigEntry)
    entry.entry_id = "test_entry_id"
    entry.data = {"host": "192.168.1.100"}
    entry.options = {}
    return entry


@pytest.fixture
def mock_api():
    """Create a mock IZoneAPI instance."""
    api = MagicMock()
    api.host = "192.168.1.100"
    api.async_get_system_info = AsyncMock(return_value=ApiResult.success(data=_system_payload()))
    api.async_get_zone_info = AsyncMock(
        side_effect=lambda index: ApiResult.success(data=_zone_payload(index))
    )
    api.async_get_firmware = AsyncMock(
        return_value=ApiResult.success(data={"Fmw": [{"Name": "CB", "Ver": "1.12"}]})
    )
    api.async_send_command = AsyncMock(return_value=ApiResult.success(text="{OK}"))
    api.async_reset_bridge = AsyncMock(return_value=ApiResult.success(text="{OK}"))
    api.close = AsyncMock()
    return api


@pytest.fixture
def mock_notifier():
    """Create a mock entity notifier."""
    notifier = MagicMock()
    notifier.notify_entity_changed = MagicMock()
    notifier.notify_all_unavailable = MagicMock()
    return notifier


@pytest.fixture
def store():
    """StateStore with system info and four zones.

    Zone 0 Auto 2400, zone 1 Close 2600, zone 2 Open 2100, zone 3 Auto 2300.
    """
    state = StateStore()
    state.set_system_info(SystemInfo.from_api(_system_payload(Setpoint=2300)))
    zones = [
        (0, 3, 2400),
        (1, 2, 2600),
        (2, 1, 2100),
        (3, 3, 2300),
    ]
    for index, mode, setpoint in zones:
        state.set_zone(ZoneInfo.from_api(_zone_payload(index, Mode=mode, Setpoint=setpoint)))
    return state


@pytest.fixture
def mock_hub(store):
    """Create a mock IZoneHub backed by a real StateStore."""
    hub = MagicMock()
    hub.host = "192.168.1.100"
    hub.store = store
    hub.current_system_info = MagicMock(side_effect=lambda: store.system_info)
    hub.current_zone = MagicMock(side_effect=store.zone)
    hub.current_firmware = MagicMock(return_value=None)
    hub.pairable_zones = MagicMock(side_effect=store.pairable_zones)
    ok = ApiResult.success(text="{OK}")
    hub.async_set_system_on = AsyncMock(return_value=ok)
    hub.async_set_system_mode = AsyncMock(return_value=ok)
    hub.async_set_system_fan = AsyncMock(return_value=ok)
    hub.async_set_system_setpoint = AsyncMock(return_value=[ok])
    hub.async_set_zone_mode = AsyncMock(return_value=ok)
    hub.async_set_zone_on = AsyncMock(return_value=ok)
    hub.async_set_zone_setpoint = AsyncMock(return_value=ok)
    hub.async_reset_bridge = AsyncMock(return_value=ok)
    hub.async_refresh = AsyncMock()
    return hub


class _Timer:
    """One captured timer registration."""

    def __init__(self, action, once=False, **schedule):
        self.action = action
        self.once = once
        self.schedule = schedule
        self.cancelled = False
        self.done = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        assert not (self.cancelled or self.done), "fired an inactive timer"
        self.done = self.once
        self.action(datetime(2024, 5, 1, 3, 0))


class FakeTimers:
    """Stands in for the Home Assistant event helpers used by the scheduler."""

    def __init__(self):
        self.later = []
        self.intervals = []
        self.time_changes = []

    def call_later(self, hass, delay, action):
        timer = _Timer(action, once=True, delay=delay)
        self.later.append(timer)
        return timer.cancel

    def track_time_interval(self, hass, action, interval, **kwargs):
        timer = _Timer(action, interval=interval)
        self.intervals.append(timer)
        return timer.cancel

    def track_time_change(self, hass, action, hour=None, minute=None, second=None):
        timer = _Timer(action, hour=hour, minute=minute, second=second)
        self.time_changes.append(timer)
        return timer.cancel

    @staticmethod
    def active(timers):
        return [timer for timer in timers if not (timer.cancelled or timer.done)]


@pytest.fixture
def timers(monkeypatch):
    """Capture scheduler timers instead of arming them on the event loop."""
    fake = FakeTimers()
    monkeypatch.setattr("custom_components.izone.scheduler.async_call_later", fake.call_later)
    monkeypatch.setattr(
        "custom_components.izone.scheduler.async_track_time_interval", fake.track_time_interval
    )
    monkeypatch.setattr(
        "custom_components.izone.scheduler.async_track_time_change", fake.track_time_change
    )
    return fake


@pytest.fixture
def task_hass(mock_hass):
    """Mock hass whose background tasks run on the test event loop."""

    def _create_task(target, name, eager_start=True):
        return asyncio.get_running_loop().create_task(target, name=name)

    mock_hass.async_create_background_task = MagicMock(side_effect=_create_task)
    return mock_hass
