"""Service handlers for iZone integration.

This module contains all service call handlers:
- reset_bridge: Restart the iZone bridge
- refresh: Run one poll cycle now
"""

import logging

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import HomeAssistantError

from .constants import DOMAIN

_LOGGER = logging.getLogger(__name__)

ATTR_ENTRY_ID = "entry_id"

SERVICE_RESET_BRIDGE = "reset_bridge"
SERVICE_REFRESH = "refresh"

SERVICE_SCHEMA = vol.Schema({vol.Optional(ATTR_ENTRY_ID): str})


def _get_hubs(hass: HomeAssistant, call: ServiceCall) -> list:
    """Return the hubs a service call targets (one entry, or all)."""
    entries = hass.data.get(DOMAIN, {})
    entry_id = call.data.get(ATTR_ENTRY_ID)
    if entry_id is None:
        return [data["hub"] for data in entries.values()]
    if entry_id not in entries:
        raise HomeAssistantError(f"Unknown iZone config entry: {entry_id}")
    return [entries[entry_id]["hub"]]


def async_register_services(hass: HomeAssistant) -> None:
    """Register the iZone services once for all bridges."""
    if hass.services.has_service(DOMAIN, SERVICE_RESET_BRIDGE):
        return

    async def handle_reset_bridge(call: ServiceCall):
        for hub in _get_hubs(hass, call):
            result = await hub.async_reset_bridge()
            if not result.ok:
                raise HomeAssistantError(f"Bridge reset failed for {hub.host}: {result.error}")
            _LOGGER.info("iZone bridge %s reset", hub.host)

    async def handle_refresh(call: ServiceCall):
        for hub in _get_hubs(hass, call):
            result = await hub.async_refresh()
            if not result.succeeded:
                _LOGGER.warning("Refresh of %s incomplete: %s", hub.host, result.failure)

    hass.services.async_register(DOMAIN, SERVICE_RESET_BRIDGE, handle_reset_bridge, schema=SERVICE_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_REFRESH, handle_refresh, schema=SERVICE_SCHEMA)
