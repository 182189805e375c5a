"""Translation of user intents into bridge commands.

Commands are fire-and-forget: nothing here waits for the bridge to apply a
change or writes to the StateStore. The next poll cycle brings the store in
line with the bridge.
"""

from __future__ import annotations

import logging

from .constants import SysFan, SysMode, ZoneMode
from .izone_api import IZoneAPI
from .models import ApiResult
from .state import StateStore

_LOGGER = logging.getLogger(__name__)

# Bridge command names
CMD_SYS_ON = "SysOn"
CMD_SYS_MODE = "SysMode"
CMD_SYS_FAN = "SysFan"
CMD_SYS_SETPOINT = "SysSetpoint"
CMD_ZONE_MODE = "ZoneMode"
CMD_ZONE_SETPOINT = "ZoneSetpoint"

# Zones whose setpoint follows a system setpoint change
_CASCADE_MODES = (ZoneMode.AUTO, ZoneMode.OPEN)


class IZoneCommands:
    """Issue bridge commands for system and zone intents.

    The StateStore is read-only here; it supplies the previous system
    setpoint and the zone snapshots used by the setpoint cascade.
    """

    def __init__(self, api: IZoneAPI, store: StateStore):
        self.api = api
        self.store = store

    async def _async_send(self, name: str, value) -> ApiResult:
        result = await self.api.async_send_command(name, value)
        if result.ok:
            _LOGGER.debug("Command %s=%s sent, bridge replied %r", name, value, result.text)
        else:
            _LOGGER.warning("Command %s=%s failed: %s", name, value, result.error)
        return result

    async def async_set_system_on(self, on: bool) -> ApiResult:
        return await self._async_send(CMD_SYS_ON, 1 if on else 0)

    async def async_set_system_mode(self, mode: SysMode) -> ApiResult:
        return await self._async_send(CMD_SYS_MODE, int(SysMode(mode)))

    async def async_set_system_fan(self, fan: SysFan) -> ApiResult:
        return await self._async_send(CMD_SYS_FAN, int(SysFan(fan)))

    async def async_set_zone_mode(self, zone_index: int, mode: ZoneMode) -> ApiResult:
        return await self._async_send(
            CMD_ZONE_MODE, {"Index": zone_index, "Mode": int(ZoneMode(mode))}
        )

    async def async_set_zone_on(self, zone_index: int, on: bool) -> ApiResult:
        """Switch a zone to thermostatic control, or close it."""
        return await self.async_set_zone_mode(zone_index, ZoneMode.AUTO if on else ZoneMode.CLOSE)

    async def async_set_zone_setpoint(self, zone_index: int, setpoint: int) -> ApiResult:
        """Set a zone setpoint in centidegrees."""
        return await self._async_send(
            CMD_ZONE_SETPOINT, {"Index": zone_index, "Setpoint": int(setpoint)}
        )

    async def async_set_system_setpoint(self, target: int) -> list[ApiResult]:
        """Move the system setpoint and drag outlying zones along.

        When lowering, every Auto or Open zone set above the target is pushed
        down to it; when raising, every such zone set below the target is
        pushed up to it. Zones already on the target's side of the move, and
        closed zones, keep their setpoint. The system setpoint is sent last.

        Without a previous system setpoint there is no direction, so no zone
        is touched.

        Args:
            target: New system setpoint in centidegrees

        Returns:
            Results of the zone commands in issue order, then the system command.
        """
        target = int(target)
        results = []

        system_info = self.store.system_info
        if system_info is None:
            _LOGGER.debug("No system info yet, sending system setpoint only")
        else:
            is_lowering = target < system_info.setpoint
            for zone in self.store.zones.values():
                if zone.zone_mode not in _CASCADE_MODES:
                    continue
                outlying = zone.setpoint > target if is_lowering else zone.setpoint < target
                if not outlying:
                    continue
                _LOGGER.debug(
                    "Moving zone %d setpoint %d -> %d with system setpoint",
                    zone.index,
                    zone.setpoint,
                    target,
                )
                results.append(await self.async_set_zone_setpoint(zone.index, target))

        results.append(await self._async_send(CMD_SYS_SETPOINT, target))
        return results
