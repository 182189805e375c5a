"""Timers driving the iZone integration.

The scheduler resolves the bridge address at startup, runs the periodic poll,
re-polls shortly after commands, applies settings changes after a debounce
and optionally resets the bridge once a day.

Every timer is a Home Assistant event listener. Rescheduling always calls the
stored unsubscribe first, so there is never more than one interval ticking.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, Protocol

from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.event import (
    async_call_later,
    async_track_time_change,
    async_track_time_interval,
)

from .constants import (
    CONF_HOST,
    CONF_MAINTENANCE_ENABLED,
    CONF_MAINTENANCE_HOUR,
    CONF_MAINTENANCE_MINUTE,
    CONF_POLLING_INTERVAL,
    DEFAULT_MAINTENANCE_HOUR,
    DEFAULT_MAINTENANCE_MINUTE,
    SETTINGS_DEBOUNCE,
    STARTUP_POLL_DELAY,
)
from .coordinator import IZonePollEngine
from .infrastructure.discovery import AddressResolver
from .infrastructure.errors import DiscoveryTimeoutError, NetworkError
from .infrastructure.validation import (
    clamp_polling_interval,
    is_valid_address,
    validate_maintenance_time,
)

_LOGGER = logging.getLogger(__name__)

# Settings whose change reschedules polling
WATCHED_SETTINGS = (
    CONF_HOST,
    CONF_POLLING_INTERVAL,
    CONF_MAINTENANCE_ENABLED,
    CONF_MAINTENANCE_HOUR,
    CONF_MAINTENANCE_MINUTE,
)


class SettingsProvider(Protocol):
    """Persisted user settings, implemented by the host layer."""

    def get(self, key: str) -> Any:
        """Return the stored value for key, or None."""

    def set(self, key: str, value: Any) -> None:
        """Persist a value, e.g. a discovered bridge address."""


class IZoneScheduler:
    """Owns all timers of one bridge.

    Attributes:
        polling_interval: Current poll interval in milliseconds
        maintenance_enabled: Whether the daily bridge reset is armed
        maintenance_time: (hour, minute) of the daily reset
    """

    def __init__(
        self,
        hass: HomeAssistant,
        engine: IZonePollEngine,
        resolver: AddressResolver,
        settings: SettingsProvider,
        *,
        on_settings_applied: Callable[[], None] | None = None,
    ):
        self.hass = hass
        self.engine = engine
        self.resolver = resolver
        self.settings = settings
        self._on_settings_applied = on_settings_applied

        self.polling_interval = clamp_polling_interval(None)
        self.maintenance_enabled = False
        self.maintenance_time = (DEFAULT_MAINTENANCE_HOUR, DEFAULT_MAINTENANCE_MINUTE)

        self._running = False
        self._unsub_start: Callable[[], None] | None = None
        self._unsub_interval: Callable[[], None] | None = None
        self._unsub_settings: Callable[[], None] | None = None
        self._unsub_maintenance: Callable[[], None] | None = None
        self._poll_task: asyncio.Task | None = None
        self._repoll_pending = False
        self._tasks: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def update_settings(self) -> None:
        """Reload address, interval and maintenance time from settings."""
        self.engine.api.host = self.settings.get(CONF_HOST) or None
        self.polling_interval = clamp_polling_interval(self.settings.get(CONF_POLLING_INTERVAL))

        hour = self.settings.get(CONF_MAINTENANCE_HOUR)
        minute = self.settings.get(CONF_MAINTENANCE_MINUTE)
        hour = DEFAULT_MAINTENANCE_HOUR if hour is None else hour
        minute = DEFAULT_MAINTENANCE_MINUTE if minute is None else minute
        is_valid, error = validate_maintenance_time(hour, minute)
        if is_valid:
            self.maintenance_time = (int(hour), int(minute))
        else:
            _LOGGER.warning("Ignoring maintenance time %s:%s: %s", hour, minute, error)
        self.maintenance_enabled = bool(self.settings.get(CONF_MAINTENANCE_ENABLED)) and is_valid

        _LOGGER.info("Remote address: %s", self.engine.api.host)
        _LOGGER.info("Polling interval: %d ms", self.polling_interval)

    async def async_settings_changed(self, key: str) -> None:
        """React to a settings change.

        The new values are read at once; rescheduling waits for the settings
        debounce so a burst of changes reschedules only once.
        """
        if key not in WATCHED_SETTINGS:
            return
        self.update_settings()
        if self._unsub_settings is not None:
            self._unsub_settings()
        self._unsub_settings = async_call_later(self.hass, SETTINGS_DEBOUNCE, self._apply_settings)

    @callback
    def _apply_settings(self, _now: datetime) -> None:
        self._unsub_settings = None
        self._spawn(self._async_apply_settings(), "izone_apply_settings")

    async def _async_apply_settings(self) -> None:
        await self.async_ensure_address()
        self.refresh_polling()
        self._arm_maintenance()
        if self._on_settings_applied is not None:
            self._on_settings_applied()

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    async def async_ensure_address(self) -> bool:
        """Discover the bridge if no valid address is configured.

        A discovered address is written back to the settings.

        Returns:
            True if a valid address is configured afterwards.
        """
        if is_valid_address(self.engine.api.host):
            return True
        try:
            address = await self.resolver.async_discover()
        except (DiscoveryTimeoutError, NetworkError) as e:
            _LOGGER.error("Bridge discovery failed: %s", e)
            return False
        self.engine.api.host = address
        self.settings.set(CONF_HOST, address)
        return True

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def async_start(self, poll_delay: float = STARTUP_POLL_DELAY) -> None:
        """Arm polling and the daily reset."""
        self._running = True
        self.refresh_polling(poll_delay)
        self._arm_maintenance()

    async def async_stop(self) -> None:
        """Cancel every timer and any running work."""
        self._running = False
        self._repoll_pending = False
        self._cancel_polling()
        for unsub in (self._unsub_settings, self._unsub_maintenance):
            if unsub is not None:
                unsub()
        self._unsub_settings = None
        self._unsub_maintenance = None

        pending = [task for task in (self._poll_task, *self._tasks) if task is not None and not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # -------------------------------------------------------------------------
    # Polling
    # -------------------------------------------------------------------------

    @property
    def is_polling(self) -> bool:
        """Whether a poll interval timer is armed."""
        return self._unsub_interval is not None

    def refresh_polling(self, delay: float = 0.0) -> None:
        """Poll after ``delay`` seconds, then restart the interval from there.

        Cancels the previous interval and any pending restart first. A poll
        requested while a cycle is running is queued behind it.
        """
        if not self._running:
            return
        self._cancel_polling()
        self._unsub_start = async_call_later(self.hass, delay, self._start_interval)

    def _cancel_polling(self) -> None:
        if self._unsub_interval is not None:
            self._unsub_interval()
            self._unsub_interval = None
        if self._unsub_start is not None:
            self._unsub_start()
            self._unsub_start = None

    @callback
    def _start_interval(self, _now: datetime) -> None:
        self._unsub_start = None
        if not self._running:
            return
        self._trigger_poll(queue=True)
        self._unsub_interval = async_track_time_interval(
            self.hass, self._on_tick, timedelta(milliseconds=self.polling_interval)
        )

    @callback
    def _on_tick(self, _now: datetime) -> None:
        self._trigger_poll()

    def _trigger_poll(self, *, queue: bool = False) -> None:
        if not self._running:
            return
        if self._poll_task is not None and not self._poll_task.done():
            if queue:
                _LOGGER.debug("Poll cycle running, queueing another one")
                self._repoll_pending = True
            else:
                _LOGGER.debug("Previous poll cycle still running, skipping tick")
            return
        self._poll_task = self.hass.async_create_background_task(self._async_poll(), "izone_poll")

    async def _async_poll(self) -> None:
        await self.engine.async_refresh()
        while self._repoll_pending and self._running:
            self._repoll_pending = False
            await self.engine.async_refresh()

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def _arm_maintenance(self) -> None:
        if self._unsub_maintenance is not None:
            self._unsub_maintenance()
            self._unsub_maintenance = None
        if not (self._running and self.maintenance_enabled):
            return
        hour, minute = self.maintenance_time
        self._unsub_maintenance = async_track_time_change(
            self.hass, self._on_maintenance_time, hour=hour, minute=minute, second=0
        )
        _LOGGER.debug("Daily bridge reset armed for %02d:%02d", hour, minute)

    @callback
    def _on_maintenance_time(self, _now: datetime) -> None:
        self._spawn(self.async_run_maintenance(), "izone_maintenance")

    async def async_run_maintenance(self) -> None:
        """Reset the bridge; the regular poll picks it up again afterwards."""
        _LOGGER.info("Running daily bridge reset")
        result = await self.engine.api.async_reset_bridge()
        if not result.ok:
            _LOGGER.warning("Daily bridge reset failed: %s", result.error)

    def _spawn(self, coro, name: str) -> None:
        task = self.hass.async_create_background_task(coro, name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
