"""Input validation for iZone integration.

This module provides validation functions for values that come from user
settings before they reach the bridge client or the scheduler:
- Bridge addresses (strict dotted-quad IPv4, no hostnames)
- Polling interval (clamped to the range the bridge tolerates)
- Maintenance time of day
"""

from __future__ import annotations

import math
import re
from typing import Any

from ..constants import MAX_POLLING_INTERVAL, MIN_POLLING_INTERVAL

_OCTET = r"(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
_IPV4_PATTERN = re.compile(rf"{_OCTET}\.{_OCTET}\.{_OCTET}\.{_OCTET}")


def is_valid_address(address: Any) -> bool:
    """Check whether a value is a dotted-quad IPv4 address.

    The bridge is only ever reached by the address it answered discovery
    from, so hostnames are rejected rather than resolved.

    Example:
        >>> is_valid_address("192.168.1.100")
        True
        >>> is_valid_address("192.168.1.256")
        False
        >>> is_valid_address(None)
        False
    """
    if not isinstance(address, str):
        return False
    return _IPV4_PATTERN.fullmatch(address) is not None


def validate_host(host: str | None) -> tuple[bool, str | None]:
    """Validate a host entered by the user.

    An empty host is accepted and means "discover the bridge".

    Returns:
        Tuple of (is_valid, error_message).
        error_message is None if valid, otherwise contains description of the error.

    Example:
        >>> validate_host("10.0.0.5")
        (True, None)
        >>> validate_host("")
        (True, None)
        >>> validate_host("izone.local")
        (False, 'Host must be an IPv4 address')
    """
    if host is None or not host.strip():
        return True, None

    if "://" in host:
        return False, "Host should not include URL scheme"

    if not is_valid_address(host.strip()):
        return False, "Host must be an IPv4 address"

    return True, None


def clamp_polling_interval(value: Any) -> int:
    """Convert a configured polling interval to milliseconds within limits.

    Non-numeric or missing values fall back to the minimum interval. Numeric
    strings are parsed by their leading integer part.

    Example:
        >>> clamp_polling_interval("abc")
        15000
        >>> clamp_polling_interval(999999)
        300000
        >>> clamp_polling_interval("1000")
        15000
    """
    interval = _parse_int(value)
    if interval is None:
        return MIN_POLLING_INTERVAL
    return max(MIN_POLLING_INTERVAL, min(MAX_POLLING_INTERVAL, interval))


def validate_maintenance_time(hour: Any, minute: Any) -> tuple[bool, str | None]:
    """Validate the wall-clock time of the daily bridge reset.

    Example:
        >>> validate_maintenance_time(3, 30)
        (True, None)
        >>> validate_maintenance_time(24, 0)
        (False, 'Hour must be between 0 and 23')
    """
    hour = _parse_int(hour)
    minute = _parse_int(minute)
    if hour is None or not 0 <= hour <= 23:
        return False, "Hour must be between 0 and 23"
    if minute is None or not 0 <= minute <= 59:
        return False, "Minute must be between 0 and 59"
    return True, None


def _parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = re.match(r"^\s*([+-]?\d+)", str(value))
    if match is None:
        return None
    return int(match.group(1))
