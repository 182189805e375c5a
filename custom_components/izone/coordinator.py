"""Poll cycle for the iZone bridge.

One cycle fetches system info, then every zone the system reports, writes
each successful result to the StateStore and tells the entity layer what
changed. A failed system fetch ends the cycle; a failed zone fetch does not.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from pydantic import ValidationError

from .constants import SYSTEM_ENTITY_KEY
from .infrastructure.errors import ProtocolError
from .izone_api import IZoneAPI
from .models import ApiResult, Firmware, PollResult, SystemInfo, ZoneInfo
from .state import StateStore

_LOGGER = logging.getLogger(__name__)


class EntityNotifier(Protocol):
    """Receiver of poll outcomes, implemented by the entity layer."""

    def notify_entity_changed(self, entity_key: str) -> None:
        """Fresh state is stored for ``"ac.sysInfo"`` or ``"zone<N>"``."""

    def notify_all_unavailable(self) -> None:
        """The last cycle was incomplete; published state is stale."""


class IZonePollEngine:
    """Runs poll cycles against one bridge, one cycle at a time."""

    def __init__(self, api: IZoneAPI, store: StateStore, notifier: EntityNotifier):
        self.api = api
        self.store = store
        self._notifier = notifier
        self._cycle_lock = asyncio.Lock()
        self.last_result: PollResult | None = None

    @property
    def last_update_success(self) -> bool:
        return self.last_result is not None and self.last_result.succeeded

    async def async_fetch_firmware(self) -> ApiResult:
        """Fetch and store the firmware descriptor. Called once at startup."""
        result = await self.api.async_get_firmware()
        if not result.ok:
            _LOGGER.warning("Firmware fetch failed: %s", result.error)
            return result
        self.store.set_firmware(Firmware.from_api(result.data))
        return result

    async def async_refresh(self) -> PollResult:
        """Run one poll cycle now.

        Concurrent callers are serialized; each gets the result of its own
        cycle.
        """
        async with self._cycle_lock:
            result = await self._async_run_cycle()
        self.last_result = result
        return result

    async def _async_run_cycle(self) -> PollResult:
        result = PollResult()

        system_info = await self._async_fetch_system(result)
        if system_info is not None:
            for zone_index in range(system_info.no_of_zones):
                await self._async_fetch_zone(zone_index, result)

        if not result.succeeded:
            _LOGGER.warning("Poll cycle incomplete: %s", result.failure)
            self._notifier.notify_all_unavailable()
        else:
            _LOGGER.debug("Poll cycle complete, %d zones", len(result.zones))
        return result

    async def _async_fetch_system(self, result: PollResult) -> SystemInfo | None:
        response = await self.api.async_get_system_info()
        if not response.ok:
            _LOGGER.warning("System info fetch failed: %s", response.error)
            result.errors.append(response.error)
            return None
        try:
            info = SystemInfo.from_api(response.data)
        except ValidationError as e:
            _LOGGER.warning("Invalid SystemV2 payload from %s", self.api.host)
            result.errors.append(ProtocolError(f"Invalid SystemV2 payload: {e}"))
            return None

        self.store.set_system_info(info)
        result.system_ok = True
        self._notifier.notify_entity_changed(SYSTEM_ENTITY_KEY)
        return info

    async def _async_fetch_zone(self, zone_index: int, result: PollResult) -> None:
        response = await self.api.async_get_zone_info(zone_index)
        if not response.ok:
            _LOGGER.warning("Zone %d fetch failed: %s", zone_index, response.error)
            result.zones[zone_index] = False
            result.errors.append(response.error)
            return
        try:
            info = ZoneInfo.from_api(response.data)
        except ValidationError as e:
            _LOGGER.warning("Invalid ZonesV2 payload for zone %d", zone_index)
            result.zones[zone_index] = False
            result.errors.append(ProtocolError(f"Invalid ZonesV2 payload for zone {zone_index}: {e}"))
            return

        self.store.set_zone(info)
        result.zones[zone_index] = True
        self._notifier.notify_entity_changed(info.key)
