"""Tests for iZone integration setup."""
import pytest
from unittest.mock import MagicMock, AsyncMock, patch
from homeassistant.exceptions import ConfigEntryNotReady

from custom_components.izone import (
    DispatcherNotifier,
    EntrySettings,
    async_setup,
    async_setup_entry,
    async_unload_entry,
    async_update_options,
)
from custom_components.izone.infrastructure.errors import TransportError
from custom_components.izone.models import ApiResult, PollResult


def _mock_hub(connect_result, poll_result=None):
    hub = MagicMock()
    hub.async_connect = AsyncMock(return_value=connect_result)
    hub.async_refresh = AsyncMock(return_value=poll_result or PollResult(system_ok=True))
    hub.async_start = AsyncMock()
    hub.async_shutdown = AsyncMock()
    hub.scheduler.async_settings_changed = AsyncMock()
    return hub


@pytest.fixture
def setup_hass(mock_hass):
    mock_hass.config_entries = MagicMock()
    mock_hass.config_entries.async_forward_entry_setups = AsyncMock()
    mock_hass.config_entries.async_unload_platforms = AsyncMock(return_value=True)
    mock_hass.services = MagicMock()
    mock_hass.services.has_service = MagicMock(return_value=False)
    return mock_hass


@pytest.mark.asyncio
async def test_async_setup():
    """Test async_setup returns True."""
    result = await async_setup(MagicMock(), {})

    assert result is True


@pytest.mark.asyncio
async def test_async_setup_entry(setup_hass, mock_config_entry):
    """Test async_setup_entry connects, polls, forwards platforms and starts timers."""
    hub = _mock_hub(ApiResult.success(data={"Fmw": []}))

    with patch("custom_components.izone.IZoneHub", return_value=hub):
        result = await async_setup_entry(setup_hass, mock_config_entry)

    assert result is True
    assert setup_hass.data["izone"]["test_entry_id"]["hub"] is hub
    hub.async_connect.assert_awaited_once()
    hub.async_refresh.assert_awaited_once()
    hub.async_start.assert_awaited_once()
    platforms = setup_hass.config_entries.async_forward_entry_setups.call_args[0][1]
    assert platforms == ["climate", "select"]
    registered = [c.args[1] for c in setup_hass.services.async_register.call_args_list]
    assert registered == ["reset_bridge", "refresh"]


@pytest.mark.asyncio
async def test_async_setup_entry_not_ready(setup_hass, mock_config_entry):
    """A failed firmware fetch defers setup."""
    hub = _mock_hub(ApiResult.failure(TransportError("refused")))

    with patch("custom_components.izone.IZoneHub", return_value=hub):
        with pytest.raises(ConfigEntryNotReady):
            await async_setup_entry(setup_hass, mock_config_entry)

    hub.async_shutdown.assert_awaited_once()
    hub.async_refresh.assert_not_called()


@pytest.mark.asyncio
async def test_async_setup_entry_first_poll_failed(setup_hass, mock_config_entry):
    """Firmware answered but system info did not: setup is retried later."""
    hub = _mock_hub(
        ApiResult.success(data={"Fmw": []}),
        PollResult(system_ok=False, errors=[TransportError("refused")]),
    )

    with patch("custom_components.izone.IZoneHub", return_value=hub):
        with pytest.raises(ConfigEntryNotReady):
            await async_setup_entry(setup_hass, mock_config_entry)

    hub.async_shutdown.assert_awaited_once()
    hub.async_start.assert_not_called()
    setup_hass.config_entries.async_forward_entry_setups.assert_not_called()
    assert "test_entry_id" not in setup_hass.data["izone"]


@pytest.mark.asyncio
async def test_async_unload_entry(setup_hass, mock_config_entry):
    hub = _mock_hub(None)
    setup_hass.data = {"izone": {"test_entry_id": {"hub": hub}}}

    result = await async_unload_entry(setup_hass, mock_config_entry)

    assert result is True
    assert "test_entry_id" not in setup_hass.data["izone"]
    hub.async_shutdown.assert_awaited_once()


@pytest.mark.asyncio
async def test_async_update_options_forwards_changed_keys(setup_hass, mock_config_entry):
    hub = _mock_hub(None)
    settings = EntrySettings(setup_hass, mock_config_entry)
    setup_hass.data = {
        "izone": {"test_entry_id": {"hub": hub, "settings": settings, "snapshot": settings.snapshot()}}
    }

    mock_config_entry.options = {"polling_interval": 60000}
    await async_update_options(setup_hass, mock_config_entry)

    hub.scheduler.async_settings_changed.assert_awaited_once_with("polling_interval")
    assert setup_hass.data["izone"]["test_entry_id"]["snapshot"]["polling_interval"] == 60000


def test_entry_settings_options_over_data(setup_hass, mock_config_entry):
    mock_config_entry.options = {"polling_interval": 30000}
    settings = EntrySettings(setup_hass, mock_config_entry)

    assert settings.get("host") == "192.168.1.100"
    assert settings.get("polling_interval") == 30000
    assert settings.get("maintenance_enabled") is None


def test_entry_settings_set_host_updates_data(setup_hass, mock_config_entry):
    settings = EntrySettings(setup_hass, mock_config_entry)

    settings.set("host", "192.168.1.40")

    setup_hass.config_entries.async_update_entry.assert_called_once_with(
        mock_config_entry, data={"host": "192.168.1.40"}
    )


def test_dispatcher_notifier(setup_hass):
    notifier = DispatcherNotifier(setup_hass, "test_entry_id")

    with patch("custom_components.izone.async_dispatcher_send") as send:
        notifier.notify_entity_changed("zone2")
        notifier.notify_all_unavailable()

    assert send.call_args_list[0].args == (setup_hass, "izone_test_entry_id_changed_zone2")
    assert send.call_args_list[1].args == (setup_hass, "izone_test_entry_id_unavailable")


@pytest.mark.asyncio
async def test_async_update_options_host_change(setup_hass, mock_config_entry):
    hub = _mock_hub(None)
    settings = EntrySettings(setup_hass, mock_config_entry)
    setup_hass.data = {
        "izone": {"test_entry_id": {"hub": hub, "settings": settings, "snapshot": settings.snapshot()}}
    }

    mock_config_entry.options = {"host": ""}
    await async_update_options(setup_hass, mock_config_entry)

    hub.scheduler.async_settings_changed.assert_awaited_once_with("host")
