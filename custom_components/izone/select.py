import logging

from homeassistant.components.select import SelectEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .constants import DOMAIN, ZoneMode
from .entity_base import IZoneZoneEntity

_LOGGER = logging.getLogger(__name__)

ZONE_MODE_OPTIONS = {
    ZoneMode.OPEN: "open",
    ZoneMode.CLOSE: "close",
    ZoneMode.AUTO: "auto",
}

ZONE_MODE_OPTIONS_REVERSE = {v: k for k, v in ZONE_MODE_OPTIONS.items()}


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
):
    hub = hass.data[DOMAIN][entry.entry_id]["hub"]
    async_add_entities(
        IZoneZoneModeSelect(hub, entry.entry_id, zone.index)
        for zone in hub.pairable_zones()
    )


class IZoneZoneModeSelect(IZoneZoneEntity, SelectEntity):
    _attr_translation_key = "zone_mode"
    _attr_options = list(ZONE_MODE_OPTIONS_REVERSE)

    def __init__(self, hub, entry_id, zone_index):
        super().__init__(hub, entry_id, zone_index)
        self._attr_unique_id = f"{entry_id}_{self._entity_key}_mode"

    @property
    def current_option(self):
        zone = self._zone
        if zone is None:
            return None
        return ZONE_MODE_OPTIONS.get(zone.zone_mode)

    async def async_select_option(self, option: str) -> None:
        if option not in ZONE_MODE_OPTIONS_REVERSE:
            raise HomeAssistantError(f"Unknown zone mode: {option}")
        result = await self._hub.async_set_zone_mode(self._zone_index, ZONE_MODE_OPTIONS_REVERSE[option])
        if not result.ok:
            raise HomeAssistantError(f"Failed to set {self._zone_name} to {option}: {result.error}")
