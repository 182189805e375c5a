"""Constants and Enums for iZone integration."""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, Field

# Integration Domain
DOMAIN = "izone"

# Supported Platforms
PLATFORMS = ["climate", "select"]

# --- Wire protocol ---
HTTP_PORT = 80
REQUEST_PATH = "/iZoneRequestV2"
COMMAND_PATH = "/iZoneCommandV2"

DISCOVERY_PORT = 12107
DISCOVERY_BROADCAST_ADDRESS = "255.255.255.255"
DISCOVERY_MESSAGE = b"IASD"
DISCOVERY_TIMEOUT = 1.0

# Body of the daily maintenance command
RESET_COMMAND = "ReSetMe"
RESET_MAGIC = 12345

# --- Store keys ---
SYSTEM_ENTITY_KEY = "ac.sysInfo"
ZONE_KEY_PREFIX = "zone"

# --- Configuration keys ---
CONF_HOST = "host"
CONF_POLLING_INTERVAL = "polling_interval"
CONF_MAINTENANCE_ENABLED = "maintenance_enabled"
CONF_MAINTENANCE_HOUR = "maintenance_hour"
CONF_MAINTENANCE_MINUTE = "maintenance_minute"

# Polling interval limits in milliseconds
MIN_POLLING_INTERVAL = 15000
MAX_POLLING_INTERVAL = 300000

DEFAULT_MAINTENANCE_HOUR = 3
DEFAULT_MAINTENANCE_MINUTE = 0

# --- Scheduler timing (seconds) ---
STARTUP_POLL_DELAY = 2.0
SETTINGS_DEBOUNCE = 1.0
COMMAND_REFRESH_DELAY = 0.5

# Host bus event fired after new settings were applied
EVENT_SETTINGS_CHANGED = f"{DOMAIN}_settings_changed"

# Dispatcher signal templates
SIGNAL_ENTITY_CHANGED = f"{DOMAIN}_{{entry_id}}_changed_{{key}}"
SIGNAL_ALL_UNAVAILABLE = f"{DOMAIN}_{{entry_id}}_unavailable"


class RequestType(IntEnum):
    """Read request types understood by the bridge."""

    SYSTEM_INFO = 1
    ZONE_INFO = 2
    FIRMWARE = 6

    @property
    def response_key(self) -> str:
        """Top-level key a valid response for this request must carry."""
        keys = {
            RequestType.SYSTEM_INFO: "SystemV2",
            RequestType.ZONE_INFO: "ZonesV2",
            RequestType.FIRMWARE: "Fmw",
        }
        return keys[self]


class SysMode(IntEnum):
    """System-wide operating mode as encoded by the bridge."""

    COOL = 1
    HEAT = 2
    VENT = 3
    DRY = 4
    AUTO = 5


class SysFan(IntEnum):
    """System fan speed as encoded by the bridge."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    AUTO = 4
    TOP = 5


class ZoneMode(IntEnum):
    """Zone damper mode.

    - OPEN: damper held open, no setpoint enforcement
    - CLOSE: damper closed
    - AUTO: thermostatic control against the zone setpoint
    """

    OPEN = 1
    CLOSE = 2
    AUTO = 3

    @property
    def is_active(self) -> bool:
        """Whether air is delivered to the zone in this mode."""
        return self in (ZoneMode.OPEN, ZoneMode.AUTO)


class ZoneType(IntEnum):
    """Zone hardware type. Constant zones cannot be controlled."""

    OPENING = 1
    OPEN_CLOSE = 2
    CONSTANT = 3


class APIDefaults(BaseModel):
    """Default values for API configuration.

    Immutable configuration values for the bridge client. These values can be
    overridden when instantiating IZoneAPI.
    """

    model_config = {"frozen": True}

    REQUEST_TIMEOUT: float = Field(default=5.0, description="Connect plus response timeout per request in seconds")
    MAX_CONNECTIONS: int = Field(
        default=1,
        description="Connections allowed to the bridge at once - its embedded HTTP stack is single-threaded",
    )


# Create a default instance for easy access
API_DEFAULTS = APIDefaults()
