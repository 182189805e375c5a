"""Infrastructure layer for iZone integration.

This package contains core infrastructure components:
- UDP discovery of the bridge address
- Validation logic
- Error definitions
"""

from .discovery import AddressResolver
from .errors import (
    DiscoveryTimeoutError,
    InvalidAddressError,
    IZoneError,
    NetworkError,
    PartialCycleFailure,
    ProtocolError,
    TransportError,
)
from .validation import (
    clamp_polling_interval,
    is_valid_address,
    validate_host,
    validate_maintenance_time,
)

__all__ = [
    # Discovery
    "AddressResolver",
    # Errors
    "IZoneError",
    "InvalidAddressError",
    "DiscoveryTimeoutError",
    "NetworkError",
    "TransportError",
    "ProtocolError",
    "PartialCycleFailure",
    # Validation
    "is_valid_address",
    "validate_host",
    "clamp_polling_interval",
    "validate_maintenance_time",
]
