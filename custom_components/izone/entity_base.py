"""Base entity for all iZone entities.

Entities do not poll. They subscribe to the dispatcher signals sent by the
poll engine: a changed signal for their own store key marks them available
and writes state, the unavailable signal marks every entity of the bridge
unavailable until its key is updated again.
"""

from __future__ import annotations

from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity import Entity

from .constants import DOMAIN, SIGNAL_ALL_UNAVAILABLE, SIGNAL_ENTITY_CHANGED
from .hub import IZoneHub


class IZoneBaseEntity(Entity):
    """Common dispatcher wiring and device info."""

    _attr_should_poll = False
    _attr_has_entity_name = True

    def __init__(self, hub: IZoneHub, entry_id: str, entity_key: str):
        self._hub = hub
        self._entry_id = entry_id
        self._entity_key = entity_key
        self._attr_available = True

    async def async_added_to_hass(self) -> None:
        self.async_on_remove(
            async_dispatcher_connect(
                self.hass,
                SIGNAL_ENTITY_CHANGED.format(entry_id=self._entry_id, key=self._entity_key),
                self._handle_changed,
            )
        )
        self.async_on_remove(
            async_dispatcher_connect(
                self.hass,
                SIGNAL_ALL_UNAVAILABLE.format(entry_id=self._entry_id),
                self._handle_unavailable,
            )
        )

    @callback
    def _handle_changed(self) -> None:
        self._attr_available = True
        self.async_write_ha_state()

    @callback
    def _handle_unavailable(self) -> None:
        self._attr_available = False
        self.async_write_ha_state()

    @property
    def _bridge_device_info(self) -> DeviceInfo:
        firmware = self._hub.current_firmware()
        return DeviceInfo(
            identifiers={(DOMAIN, self._entry_id)},
            name="iZone",
            manufacturer="iZone",
            model="iZone V2 bridge",
            sw_version=firmware.summary if firmware else None,
        )

    @property
    def device_info(self) -> DeviceInfo:
        """Return device information for the entity registry."""
        return self._bridge_device_info


class IZoneZoneEntity(IZoneBaseEntity):
    """Entity belonging to one zone, shown as its own device."""

    def __init__(self, hub: IZoneHub, entry_id: str, zone_index: int):
        zone = hub.current_zone(zone_index)
        super().__init__(hub, entry_id, zone.key)
        self._zone_index = zone_index
        self._zone_name = zone.name or f"Zone {zone_index + 1}"

    @property
    def _zone(self):
        return self._hub.current_zone(self._zone_index)

    @property
    def device_info(self) -> DeviceInfo:
        return DeviceInfo(
            identifiers={(DOMAIN, f"{self._entry_id}_{self._entity_key}")},
            name=self._zone_name,
            manufacturer="iZone",
            model="Zone",
            via_device=(DOMAIN, self._entry_id),
        )
