"""Custom exceptions for iZone integration."""


class IZoneError(Exception):
    """Base exception for iZone."""


class InvalidAddressError(IZoneError):
    """Raised when the bridge address is unset or not a dotted-quad IPv4 address."""


class DiscoveryTimeoutError(IZoneError):
    """Raised when no bridge answered the discovery broadcast in time."""


class NetworkError(IZoneError):
    """Raised when the discovery socket cannot be bound or written."""


class TransportError(IZoneError):
    """Connection refused, reset or timed out, or a non-200 HTTP status."""


class ProtocolError(IZoneError):
    """The bridge answered but the body is malformed or lacks the expected key."""


class PartialCycleFailure(IZoneError):
    """System info was fetched but at least one zone fetch failed."""
