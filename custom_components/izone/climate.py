"""Climate platform for iZone integration."""
import logging
from typing import Any

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACMode,
)
from homeassistant.components.climate.const import (
    FAN_AUTO,
    FAN_HIGH,
    FAN_LOW,
    FAN_MEDIUM,
    FAN_TOP,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .constants import DOMAIN, SYSTEM_ENTITY_KEY, SysFan, SysMode, ZoneMode
from .entity_base import IZoneBaseEntity, IZoneZoneEntity
from .models import ApiResult, from_centidegrees, to_centidegrees

_LOGGER = logging.getLogger(__name__)

MIN_TEMP = 15.0
MAX_TEMP = 30.0
TEMP_STEP = 0.5

# System mode mapping
HVAC_MODE_MAPPING = {
    SysMode.COOL: HVACMode.COOL,
    SysMode.HEAT: HVACMode.HEAT,
    SysMode.VENT: HVACMode.FAN_ONLY,
    SysMode.DRY: HVACMode.DRY,
    SysMode.AUTO: HVACMode.HEAT_COOL,
}

HVAC_MODE_REVERSE_MAPPING = {v: k for k, v in HVAC_MODE_MAPPING.items()}

FAN_MODE_MAPPING = {
    SysFan.LOW: FAN_LOW,
    SysFan.MEDIUM: FAN_MEDIUM,
    SysFan.HIGH: FAN_HIGH,
    SysFan.AUTO: FAN_AUTO,
    SysFan.TOP: FAN_TOP,
}

FAN_MODE_REVERSE_MAPPING = {v: k for k, v in FAN_MODE_MAPPING.items()}

# Zone mode mapping
ZONE_HVAC_MODE_MAPPING = {
    ZoneMode.CLOSE: HVACMode.OFF,
    ZoneMode.OPEN: HVACMode.FAN_ONLY,
    ZoneMode.AUTO: HVACMode.HEAT_COOL,
}

ZONE_HVAC_MODE_REVERSE_MAPPING = {v: k for k, v in ZONE_HVAC_MODE_MAPPING.items()}


def _raise_on_failure(results: ApiResult | list[ApiResult], action: str) -> None:
    if isinstance(results, ApiResult):
        results = [results]
    for result in results:
        if not result.ok:
            raise HomeAssistantError(f"Failed to {action}: {result.error}")


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up iZone climate entities."""
    hub = hass.data[DOMAIN][config_entry.entry_id]["hub"]

    entities: list[ClimateEntity] = []
    if hub.current_system_info() is not None:
        entities.append(IZoneACClimate(hub, config_entry.entry_id))
    else:
        _LOGGER.warning("No system info yet - AC climate entity not created")

    entities.extend(
        IZoneZoneClimate(hub, config_entry.entry_id, zone.index)
        for zone in hub.pairable_zones()
    )
    async_add_entities(entities)


class IZoneACClimate(IZoneBaseEntity, ClimateEntity):
    """The air conditioner as a whole."""

    _attr_name = None
    _attr_translation_key = "ac"
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_precision = TEMP_STEP
    _attr_target_temperature_step = TEMP_STEP
    _attr_min_temp = MIN_TEMP
    _attr_max_temp = MAX_TEMP
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.FAN_MODE
        | ClimateEntityFeature.TURN_ON
        | ClimateEntityFeature.TURN_OFF
    )
    _attr_hvac_modes = [HVACMode.OFF, *HVAC_MODE_REVERSE_MAPPING]
    _attr_fan_modes = list(FAN_MODE_REVERSE_MAPPING)

    def __init__(self, hub, entry_id: str):
        super().__init__(hub, entry_id, SYSTEM_ENTITY_KEY)
        self._attr_unique_id = f"{entry_id}_ac"

    @property
    def current_temperature(self) -> float | None:
        info = self._hub.current_system_info()
        return from_centidegrees(info.temp) if info else None

    @property
    def target_temperature(self) -> float | None:
        info = self._hub.current_system_info()
        return from_centidegrees(info.setpoint) if info else None

    @property
    def hvac_mode(self) -> HVACMode | None:
        """Return OFF while the system is off, else the mapped system mode."""
        info = self._hub.current_system_info()
        if info is None:
            return None
        if not info.is_on:
            return HVACMode.OFF
        return HVAC_MODE_MAPPING.get(info.mode)

    @property
    def fan_mode(self) -> str | None:
        info = self._hub.current_system_info()
        if info is None:
            return None
        return FAN_MODE_MAPPING.get(info.fan)

    async def async_set_temperature(self, **kwargs: Any) -> None:
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return
        results = await self._hub.async_set_system_setpoint(to_centidegrees(temperature))
        _raise_on_failure(results, f"set temperature to {temperature}")

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        if hvac_mode == HVACMode.OFF:
            await self.async_turn_off()
            return
        if hvac_mode not in HVAC_MODE_REVERSE_MAPPING:
            raise HomeAssistantError(f"Unsupported HVAC mode: {hvac_mode}")

        result = await self._hub.async_set_system_mode(HVAC_MODE_REVERSE_MAPPING[hvac_mode])
        _raise_on_failure(result, f"set HVAC mode {hvac_mode}")

        info = self._hub.current_system_info()
        if info is None or not info.is_on:
            await self.async_turn_on()

    async def async_set_fan_mode(self, fan_mode: str) -> None:
        if fan_mode not in FAN_MODE_REVERSE_MAPPING:
            raise HomeAssistantError(f"Unsupported fan mode: {fan_mode}")
        result = await self._hub.async_set_system_fan(FAN_MODE_REVERSE_MAPPING[fan_mode])
        _raise_on_failure(result, f"set fan mode {fan_mode}")

    async def async_turn_on(self) -> None:
        result = await self._hub.async_set_system_on(True)
        _raise_on_failure(result, "turn on")

    async def async_turn_off(self) -> None:
        result = await self._hub.async_set_system_on(False)
        _raise_on_failure(result, "turn off")


class IZoneZoneClimate(IZoneZoneEntity, ClimateEntity):
    """One controllable zone."""

    _attr_name = None
    _attr_translation_key = "zone"
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_precision = TEMP_STEP
    _attr_target_temperature_step = TEMP_STEP
    _attr_min_temp = MIN_TEMP
    _attr_max_temp = MAX_TEMP
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.TURN_ON
        | ClimateEntityFeature.TURN_OFF
    )
    _attr_hvac_modes = list(ZONE_HVAC_MODE_REVERSE_MAPPING)

    def __init__(self, hub, entry_id: str, zone_index: int):
        super().__init__(hub, entry_id, zone_index)
        self._attr_unique_id = f"{entry_id}_{self._entity_key}_climate"

    @property
    def current_temperature(self) -> float | None:
        zone = self._zone
        return from_centidegrees(zone.temp) if zone else None

    @property
    def target_temperature(self) -> float | None:
        zone = self._zone
        return from_centidegrees(zone.setpoint) if zone else None

    @property
    def hvac_mode(self) -> HVACMode | None:
        zone = self._zone
        if zone is None:
            return None
        return ZONE_HVAC_MODE_MAPPING.get(zone.zone_mode)

    async def async_set_temperature(self, **kwargs: Any) -> None:
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return
        result = await self._hub.async_set_zone_setpoint(self._zone_index, to_centidegrees(temperature))
        _raise_on_failure(result, f"set {self._zone_name} temperature to {temperature}")

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        if hvac_mode not in ZONE_HVAC_MODE_REVERSE_MAPPING:
            raise HomeAssistantError(f"Unsupported HVAC mode: {hvac_mode}")
        result = await self._hub.async_set_zone_mode(
            self._zone_index, ZONE_HVAC_MODE_REVERSE_MAPPING[hvac_mode]
        )
        _raise_on_failure(result, f"set {self._zone_name} mode {hvac_mode}")

    async def async_turn_on(self) -> None:
        result = await self._hub.async_set_zone_on(self._zone_index, True)
        _raise_on_failure(result, f"turn on {self._zone_name}")

    async def async_turn_off(self) -> None:
        result = await self._hub.async_set_zone_on(self._zone_index, False)
        _raise_on_failure(result, f"turn off {self._zone_name}")
