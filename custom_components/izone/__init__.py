"""The iZone integration."""

import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.dispatcher import async_dispatcher_send

from .constants import (
    DOMAIN,
    EVENT_SETTINGS_CHANGED,
    PLATFORMS,
    SIGNAL_ALL_UNAVAILABLE,
    SIGNAL_ENTITY_CHANGED,
)
from .hub import IZoneHub
from .scheduler import WATCHED_SETTINGS
from .services import async_register_services

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)

_LOGGER = logging.getLogger(__name__)


class EntrySettings:
    """Settings of one bridge stored on its config entry.

    Options take precedence over entry data; a discovered address is written
    to the entry data.
    """

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry):
        self._hass = hass
        self._entry = entry

    def get(self, key: str) -> Any:
        if key in self._entry.options:
            return self._entry.options[key]
        return self._entry.data.get(key)

    def set(self, key: str, value: Any) -> None:
        if key in self._entry.options:
            options = {**self._entry.options, key: value}
            self._hass.config_entries.async_update_entry(self._entry, options=options)
        else:
            data = {**self._entry.data, key: value}
            self._hass.config_entries.async_update_entry(self._entry, data=data)

    def snapshot(self) -> dict[str, Any]:
        return {key: self.get(key) for key in WATCHED_SETTINGS}


class DispatcherNotifier:
    """Forward poll outcomes to entities through the dispatcher."""

    def __init__(self, hass: HomeAssistant, entry_id: str):
        self._hass = hass
        self._entry_id = entry_id

    def notify_entity_changed(self, entity_key: str) -> None:
        async_dispatcher_send(
            self._hass, SIGNAL_ENTITY_CHANGED.format(entry_id=self._entry_id, key=entity_key)
        )

    def notify_all_unavailable(self) -> None:
        async_dispatcher_send(self._hass, SIGNAL_ALL_UNAVAILABLE.format(entry_id=self._entry_id))


async def async_setup(hass: HomeAssistant, config: dict):
    return True  # configured through config entries only


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    hass.data.setdefault(DOMAIN, {})
    settings = EntrySettings(hass, entry)

    def _settings_applied() -> None:
        hass.bus.async_fire(EVENT_SETTINGS_CHANGED, {"entry_id": entry.entry_id})

    hub = IZoneHub(
        hass,
        settings,
        DispatcherNotifier(hass, entry.entry_id),
        on_settings_applied=_settings_applied,
    )

    result = await hub.async_connect()
    if not result.ok:
        await hub.async_shutdown()
        raise ConfigEntryNotReady(f"iZone bridge not reachable: {result.error}")

    poll = await hub.async_refresh()
    if not poll.system_ok:
        await hub.async_shutdown()
        raise ConfigEntryNotReady(f"iZone bridge did not return system info: {poll.failure}")

    hass.data[DOMAIN][entry.entry_id] = {
        "hub": hub,
        "settings": settings,
        "snapshot": settings.snapshot(),
    }

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    await hub.async_start()

    entry.async_on_unload(entry.add_update_listener(async_update_options))
    async_register_services(hass)
    return True


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Pass changed settings on to the scheduler."""
    data = hass.data[DOMAIN].get(entry.entry_id)
    if data is None:
        return
    previous = data["snapshot"]
    current = data["settings"].snapshot()
    data["snapshot"] = current
    for key, value in current.items():
        if previous.get(key) != value:
            _LOGGER.debug("Setting %s changed: %s -> %s", key, previous.get(key), value)
            await data["hub"].scheduler.async_settings_changed(key)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        data = hass.data[DOMAIN].pop(entry.entry_id)
        await data["hub"].async_shutdown()
    return unload_ok
