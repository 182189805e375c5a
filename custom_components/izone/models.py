"""Data models for iZone integration.

This module provides Pydantic models for the bridge payloads (system info,
zone info, firmware), the tagged result returned by the bridge client and
the per-cycle poll result. Also includes the centidegree conversion helpers
used at the entity boundary.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .constants import (
    RequestType,
    SysFan,
    SysMode,
    ZONE_KEY_PREFIX,
    ZoneMode,
    ZoneType,
)
from .infrastructure.errors import IZoneError, PartialCycleFailure


def zone_key(index: int) -> str:
    """Return the store key of a zone.

    Example:
        >>> zone_key(3)
        'zone3'
    """
    return f"{ZONE_KEY_PREFIX}{index}"


def to_centidegrees(celsius: float) -> int:
    """Convert degrees to the bridge's integer centidegree encoding.

    Example:
        >>> to_centidegrees(21.5)
        2150
    """
    return int(round(celsius * 100))


def from_centidegrees(value: int | None) -> float | None:
    """Convert a centidegree value from the bridge to degrees."""
    if value is None:
        return None
    return value / 100


def _enum_or_none(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return None


# Base model for all bridge payloads
class IZoneModel(BaseModel):
    """Base model for bridge data structures.

    Snapshots are immutable so a reader never observes a half-updated value;
    the store swaps whole objects. Fields the integration does not use are
    kept as extras.
    """

    model_config = {"frozen": True, "populate_by_name": True, "extra": "allow"}


class SystemInfo(IZoneModel):
    """Bridge-wide state from a ``SystemV2`` response.

    Temperatures are centidegrees.

    Example:
        >>> info = SystemInfo.from_api({"SystemV2": {
        ...     "SysOn": 1, "SysMode": 1, "SysFan": 2,
        ...     "Temp": 2410, "Setpoint": 2300, "NoOfZones": 4,
        ... }})
        >>> info.mode
        <SysMode.COOL: 1>
    """

    sys_on: int = Field(..., alias="SysOn")
    sys_mode: int = Field(..., alias="SysMode")
    sys_fan: int = Field(..., alias="SysFan")
    temp: int = Field(..., alias="Temp")
    setpoint: int = Field(..., alias="Setpoint")
    no_of_zones: int = Field(..., ge=0, alias="NoOfZones")

    @classmethod
    def from_api(cls, response_data: dict) -> SystemInfo:
        """Parse the salient part of a system info response.

        Raises:
            KeyError: If the response lacks ``SystemV2``.
            pydantic.ValidationError: If the payload does not validate.
        """
        return cls.model_validate(response_data[RequestType.SYSTEM_INFO.response_key])

    @property
    def is_on(self) -> bool:
        return self.sys_on == 1

    @property
    def mode(self) -> SysMode | None:
        return _enum_or_none(SysMode, self.sys_mode)

    @property
    def fan(self) -> SysFan | None:
        return _enum_or_none(SysFan, self.sys_fan)


class ZoneInfo(IZoneModel):
    """Per-zone state from a ``ZonesV2`` response.

    Attributes:
        index: Zero-based zone index, the stable identity of the zone.
        name: Display name configured on the bridge.
        zone_type: Raw ZoneType code.
        mode: Raw ZoneMode code.
        setpoint: Zone setpoint in centidegrees.
        temp: Measured zone temperature in centidegrees.
    """

    index: int = Field(..., ge=0, alias="Index")
    name: str = Field(default="", alias="Name")
    zone_type: int = Field(..., alias="ZoneType")
    mode: int = Field(..., alias="Mode")
    setpoint: int = Field(..., alias="Setpoint")
    temp: int = Field(..., alias="Temp")

    @classmethod
    def from_api(cls, response_data: dict) -> ZoneInfo:
        """Parse the salient part of a zone info response."""
        return cls.model_validate(response_data[RequestType.ZONE_INFO.response_key])

    @property
    def key(self) -> str:
        return zone_key(self.index)

    @property
    def zone_mode(self) -> ZoneMode | None:
        return _enum_or_none(ZoneMode, self.mode)

    @property
    def is_on(self) -> bool:
        return self.zone_mode is not None and self.zone_mode.is_active

    @property
    def is_pairable(self) -> bool:
        """Constant zones are not user controllable."""
        return self.zone_type != ZoneType.CONSTANT


class Firmware(IZoneModel):
    """Opaque firmware descriptor from an ``Fmw`` response.

    Fetched once at startup and only shown as device metadata.
    """

    raw: Any = None

    @classmethod
    def from_api(cls, response_data: dict) -> Firmware:
        return cls(raw=response_data[RequestType.FIRMWARE.response_key])

    @property
    def summary(self) -> str | None:
        """Short human-readable version string, if one can be derived."""
        if self.raw is None:
            return None
        if isinstance(self.raw, list):
            parts = []
            for entry in self.raw:
                if isinstance(entry, dict):
                    parts.append("/".join(str(v) for v in entry.values()))
                else:
                    parts.append(str(entry))
            return ", ".join(parts)
        return str(self.raw)


class ApiResult(BaseModel):
    """Tagged outcome of one bridge round trip.

    The bridge client never raises across its boundary; every failure is
    carried here with the classified error.

    Example:
        >>> ApiResult.failure(TransportError("refused")).status
        'failed: refused'
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    ok: bool = Field(..., description="True when the round trip produced a usable response")
    data: dict[str, Any] | None = Field(default=None, description="Parsed body of a read response")
    text: str | None = Field(default=None, description="Verbatim body of a command response")
    error: IZoneError | None = Field(default=None, description="Classified failure")

    @classmethod
    def success(cls, data: dict[str, Any] | None = None, text: str | None = None) -> ApiResult:
        return cls(ok=True, data=data, text=text)

    @classmethod
    def failure(cls, error: IZoneError) -> ApiResult:
        return cls(ok=False, error=error)

    @property
    def status(self) -> str:
        if self.ok:
            return "ok"
        return f"failed: {self.error}"


class PollResult(BaseModel):
    """Per-step status of one poll cycle. Never stored."""

    model_config = {"arbitrary_types_allowed": True}

    system_ok: bool = False
    zones: dict[int, bool] = Field(default_factory=dict, description="Zone index to fetch status")
    errors: list[IZoneError] = Field(default_factory=list)

    @property
    def failed_zones(self) -> list[int]:
        return [index for index, ok in self.zones.items() if not ok]

    @property
    def succeeded(self) -> bool:
        return self.system_ok and not self.failed_zones

    @property
    def failure(self) -> IZoneError | None:
        """Error that best describes why the cycle did not fully succeed."""
        if self.succeeded:
            return None
        if self.system_ok:
            return PartialCycleFailure(f"Zone fetch failed for zones {self.failed_zones}")
        return self.errors[0] if self.errors else None
