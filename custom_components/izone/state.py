"""In-memory state of the iZone bridge.

Holds the last known system info, zone snapshots and firmware. Only the poll
engine writes here; each write swaps a whole immutable snapshot so readers
see either the old or the new value.
"""

from __future__ import annotations

import logging

from .models import Firmware, SystemInfo, ZoneInfo, zone_key

_LOGGER = logging.getLogger(__name__)


class StateStore:
    """Last-known bridge state.

    Zones are keyed by ``"zone<N>"``. A zone missing from a cycle keeps its
    stale entry; entries are only ever overwritten, never evicted.
    """

    def __init__(self):
        self._system_info: SystemInfo | None = None
        self._zones: dict[str, ZoneInfo] = {}
        self._firmware: Firmware | None = None

    @property
    def system_info(self) -> SystemInfo | None:
        return self._system_info

    @property
    def firmware(self) -> Firmware | None:
        return self._firmware

    @property
    def zones(self) -> dict[str, ZoneInfo]:
        """Copy of the zone map, safe to iterate while a cycle is running."""
        return dict(self._zones)

    def zone(self, index: int) -> ZoneInfo | None:
        return self._zones.get(zone_key(index))

    def pairable_zones(self) -> list[ZoneInfo]:
        """Zones that can be exposed to the user, ordered by index."""
        return sorted(
            (zone for zone in self._zones.values() if zone.is_pairable),
            key=lambda zone: zone.index,
        )

    def set_system_info(self, info: SystemInfo) -> None:
        self._system_info = info

    def set_zone(self, info: ZoneInfo) -> None:
        self._zones[info.key] = info

    def set_firmware(self, firmware: Firmware) -> None:
        _LOGGER.debug("Firmware stored: %s", firmware.summary)
        self._firmware = firmware
