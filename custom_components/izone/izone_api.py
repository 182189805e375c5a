# izone_api.py
"""Client for the iZone V2 bridge protocol.

Reads are POSTed to ``/iZoneRequestV2`` as ``{"iZoneV2Request": {...}}`` and
answered with JSON; writes are POSTed to ``/iZoneCommandV2`` as
``{"<Command>": <value>}`` and answered with opaque text.
"""

import asyncio
import logging
from typing import Any

import aiohttp

from .constants import (
    API_DEFAULTS,
    COMMAND_PATH,
    HTTP_PORT,
    REQUEST_PATH,
    RESET_COMMAND,
    RESET_MAGIC,
    RequestType,
)
from .infrastructure.errors import InvalidAddressError, ProtocolError, TransportError
from .infrastructure.validation import is_valid_address
from .models import ApiResult

_LOGGER = logging.getLogger(__name__)

# Timeout configuration
DEFAULT_REQUEST_TIMEOUT = API_DEFAULTS.REQUEST_TIMEOUT


def _describe(error: Exception) -> str:
    if str(error):
        return f"{type(error).__name__}: {error}"
    return type(error).__name__


class IZoneAPI:
    """Sequential, non-raising client for one bridge.

    All requests share one lock and a connector limited to a single
    connection that is closed after every exchange, so a bridge restart is
    never hidden behind a kept-alive socket.
    """

    def __init__(self, host=None, request_timeout: float = DEFAULT_REQUEST_TIMEOUT):
        self.host = host
        self.request_timeout = request_timeout
        self._request_lock = asyncio.Lock()
        self._session = None

    def _build_url(self, path: str) -> str:
        return f"http://{self.host}:{HTTP_PORT}{path}"

    async def _get_session(self):
        """Get or create the aiohttp session.

        Note: Timeouts are set per-request, not on the session level.
        """
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=API_DEFAULTS.MAX_CONNECTIONS, force_close=True
            )
            self._session = aiohttp.ClientSession(connector=connector)
        return self._session

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _async_post(self, path: str, body: dict, *, expect_json: bool):
        """POST one body to the bridge and return the decoded response body.

        Raises:
            TransportError: Non-200 status.
            TimeoutError, aiohttp.ClientError: Transport failures.
            ValueError: Malformed JSON when expect_json is set. Text bodies
                are decoded leniently and never raise.
        """
        url = self._build_url(path)
        timeout = aiohttp.ClientTimeout(total=self.request_timeout)
        async with self._request_lock:
            session = await self._get_session()
            _LOGGER.debug("POST %s body=%s", url, body)
            async with session.post(url, json=body, timeout=timeout) as response:
                if response.status != 200:
                    raise TransportError(f"HTTP status {response.status}")
                if expect_json:
                    data = await response.json(content_type=None)
                else:
                    data = await response.text(errors="replace")
        _LOGGER.debug("POST %s returned: %s", url, data)
        return data

    def _check_address(self) -> ApiResult | None:
        if is_valid_address(self.host):
            return None
        return ApiResult.failure(InvalidAddressError(f"Invalid bridge address: {self.host!r}"))

    async def async_request(self, request_type: RequestType, no: int = 0, no1: int = 0) -> ApiResult:
        """Send a read request and validate the response.

        A response is only successful when it is a JSON object carrying the
        key expected for the request type, even if the HTTP exchange itself
        succeeded.

        Args:
            request_type: Kind of data to read
            no: First request parameter (zone index for zone reads)
            no1: Second request parameter, unused by the reads in this client

        Returns:
            ApiResult with the parsed body in ``data`` on success.
        """
        request_type = RequestType(request_type)
        invalid = self._check_address()
        if invalid is not None:
            _LOGGER.debug("Skipping %s request: %s", request_type.name, invalid.error)
            return invalid

        body = {"iZoneV2Request": {"Type": int(request_type), "No": no, "No1": no1}}
        try:
            data = await self._async_post(REQUEST_PATH, body, expect_json=True)
        except TransportError as e:
            return self._failed(request_type.name, e)
        except (TimeoutError, aiohttp.ClientError) as e:
            return self._failed(request_type.name, TransportError(_describe(e)))
        except ValueError as e:
            return self._failed(request_type.name, ProtocolError(f"Malformed JSON: {e}"))

        expected_key = request_type.response_key
        if not isinstance(data, dict) or expected_key not in data:
            return self._failed(
                request_type.name, ProtocolError(f"Response lacks {expected_key}")
            )
        return ApiResult.success(data=data)

    async def async_get_system_info(self) -> ApiResult:
        return await self.async_request(RequestType.SYSTEM_INFO)

    async def async_get_zone_info(self, zone_index: int) -> ApiResult:
        return await self.async_request(RequestType.ZONE_INFO, zone_index)

    async def async_get_firmware(self) -> ApiResult:
        return await self.async_request(RequestType.FIRMWARE)

    async def async_send_command(self, name: str, value: Any) -> ApiResult:
        """Send a write command.

        Args:
            name: Command name, e.g. "SysOn" or "ZoneSetpoint"
            value: Scalar, or an object such as {"Index": 2, "Setpoint": 2200}

        Returns:
            ApiResult with the verbatim response body in ``text`` on success.
        """
        invalid = self._check_address()
        if invalid is not None:
            _LOGGER.debug("Skipping command %s: %s", name, invalid.error)
            return invalid

        try:
            text = await self._async_post(COMMAND_PATH, {name: value}, expect_json=False)
        except TransportError as e:
            return self._failed(name, e)
        except (TimeoutError, aiohttp.ClientError) as e:
            return self._failed(name, TransportError(_describe(e)))
        return ApiResult.success(text=text)

    async def async_reset_bridge(self) -> ApiResult:
        """Ask the bridge to restart itself."""
        return await self.async_send_command(RESET_COMMAND, RESET_MAGIC)

    @staticmethod
    def _failed(operation: str, error) -> ApiResult:
        _LOGGER.debug("%s failed: %s", operation, error)
        return ApiResult.failure(error)
