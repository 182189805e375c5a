"""Context object owning one bridge connection and its state.

The hub wires the bridge client, state store, poll engine, command
translator and scheduler together and is the only surface the entity layer
talks to. After every command it schedules a short-delay re-poll so the
store converges on what the bridge applied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from homeassistant.core import HomeAssistant

from .commands import IZoneCommands
from .constants import COMMAND_REFRESH_DELAY, SysFan, SysMode, ZoneMode
from .coordinator import EntityNotifier, IZonePollEngine
from .infrastructure.discovery import AddressResolver
from .izone_api import IZoneAPI
from .models import ApiResult, Firmware, PollResult, SystemInfo, ZoneInfo
from .scheduler import IZoneScheduler, SettingsProvider
from .state import StateStore

_LOGGER = logging.getLogger(__name__)


class IZoneHub:
    """One bridge: client, store, poll engine, commands and timers."""

    def __init__(
        self,
        hass: HomeAssistant,
        settings: SettingsProvider,
        notifier: EntityNotifier,
        *,
        api: IZoneAPI | None = None,
        resolver: AddressResolver | None = None,
        on_settings_applied: Callable[[], None] | None = None,
    ):
        self.api = api or IZoneAPI()
        self.store = StateStore()
        self.engine = IZonePollEngine(self.api, self.store, notifier)
        self.commands = IZoneCommands(self.api, self.store)
        self.scheduler = IZoneScheduler(
            hass,
            self.engine,
            resolver or AddressResolver(),
            settings,
            on_settings_applied=on_settings_applied,
        )

    @property
    def host(self) -> str | None:
        return self.api.host

    async def async_connect(self) -> ApiResult:
        """Load settings, resolve the address and fetch firmware.

        Returns:
            Result of the firmware fetch; a failed result means the bridge is
            not reachable yet.
        """
        self.scheduler.update_settings()
        await self.scheduler.async_ensure_address()
        return await self.engine.async_fetch_firmware()

    async def async_start(self) -> None:
        await self.scheduler.async_start()

    async def async_shutdown(self) -> None:
        await self.scheduler.async_stop()
        await self.api.close()

    # -------------------------------------------------------------------------
    # Polling
    # -------------------------------------------------------------------------

    async def async_refresh(self) -> PollResult:
        """Run one poll cycle now."""
        return await self.engine.async_refresh()

    def schedule_refresh(self, delay: float = COMMAND_REFRESH_DELAY) -> None:
        self.scheduler.refresh_polling(delay)

    # -------------------------------------------------------------------------
    # State accessors
    # -------------------------------------------------------------------------

    def current_system_info(self) -> SystemInfo | None:
        return self.store.system_info

    def current_zone(self, index: int) -> ZoneInfo | None:
        return self.store.zone(index)

    def current_firmware(self) -> Firmware | None:
        return self.store.firmware

    def pairable_zones(self) -> list[ZoneInfo]:
        return self.store.pairable_zones()

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def async_set_system_on(self, on: bool) -> ApiResult:
        result = await self.commands.async_set_system_on(on)
        self.schedule_refresh()
        return result

    async def async_set_system_mode(self, mode: SysMode) -> ApiResult:
        result = await self.commands.async_set_system_mode(mode)
        self.schedule_refresh()
        return result

    async def async_set_system_fan(self, fan: SysFan) -> ApiResult:
        result = await self.commands.async_set_system_fan(fan)
        self.schedule_refresh()
        return result

    async def async_set_system_setpoint(self, target: int) -> list[ApiResult]:
        results = await self.commands.async_set_system_setpoint(target)
        self.schedule_refresh()
        return results

    async def async_set_zone_mode(self, zone_index: int, mode: ZoneMode) -> ApiResult:
        result = await self.commands.async_set_zone_mode(zone_index, mode)
        self.schedule_refresh()
        return result

    async def async_set_zone_on(self, zone_index: int, on: bool) -> ApiResult:
        result = await self.commands.async_set_zone_on(zone_index, on)
        self.schedule_refresh()
        return result

    async def async_set_zone_setpoint(self, zone_index: int, setpoint: int) -> ApiResult:
        result = await self.commands.async_set_zone_setpoint(zone_index, setpoint)
        self.schedule_refresh()
        return result

    async def async_reset_bridge(self) -> ApiResult:
        result = await self.api.async_reset_bridge()
        if not result.ok:
            _LOGGER.warning("Bridge reset failed: %s", result.error)
        return result
