"""Tests for IZoneAPI."""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from custom_components.izone.constants import RequestType
from custom_components.izone.infrastructure.errors import (
    InvalidAddressError,
    ProtocolError,
    TransportError,
)
from custom_components.izone.izone_api import IZoneAPI


def _mock_session(response=None, side_effect=None):
    session = AsyncMock()
    if side_effect is not None:
        session.post = MagicMock(side_effect=side_effect)
    else:
        session.post = MagicMock(return_value=AsyncMock(__aenter__=AsyncMock(return_value=response)))
    return session


def _json_response(body, status=200):
    response = AsyncMock()
    response.status = status
    response.json = AsyncMock(return_value=body)
    return response


class TestIZoneAPI:
    """Test IZoneAPI class."""

    def test_api_initialization(self):
        """Test API initialization."""
        api = IZoneAPI("192.168.1.100")

        assert api.host == "192.168.1.100"
        assert api.request_timeout == 5.0
        assert api._build_url("/iZoneRequestV2") == "http://192.168.1.100:80/iZoneRequestV2"

    @pytest.mark.asyncio
    async def test_get_system_info(self, system_payload):
        """Test a read request body and a valid response."""
        api = IZoneAPI("192.168.1.100")
        session = _mock_session(_json_response(system_payload()))

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_get_system_info()

        assert result.ok is True
        assert result.data["SystemV2"]["NoOfZones"] == 4
        args, kwargs = session.post.call_args
        assert args[0] == "http://192.168.1.100:80/iZoneRequestV2"
        assert kwargs["json"] == {"iZoneV2Request": {"Type": 1, "No": 0, "No1": 0}}

    @pytest.mark.asyncio
    async def test_get_zone_info_sends_index(self, zone_payload):
        api = IZoneAPI("192.168.1.100")
        session = _mock_session(_json_response(zone_payload(3)))

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_get_zone_info(3)

        assert result.ok is True
        assert session.post.call_args.kwargs["json"] == {"iZoneV2Request": {"Type": 2, "No": 3, "No1": 0}}

    @pytest.mark.asyncio
    async def test_get_firmware(self):
        api = IZoneAPI("192.168.1.100")
        session = _mock_session(_json_response({"Fmw": []}))

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_request(RequestType.FIRMWARE)

        assert result.ok is True
        assert session.post.call_args.kwargs["json"]["iZoneV2Request"]["Type"] == 6

    @pytest.mark.asyncio
    async def test_missing_expected_key(self):
        """An empty object is a protocol failure even with HTTP 200."""
        api = IZoneAPI("192.168.1.100")
        session = _mock_session(_json_response({}))

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_get_system_info()

        assert result.ok is False
        assert isinstance(result.error, ProtocolError)

    @pytest.mark.asyncio
    async def test_wrong_key_for_request_type(self, zone_payload):
        api = IZoneAPI("192.168.1.100")
        session = _mock_session(_json_response(zone_payload(0)))

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_get_system_info()

        assert isinstance(result.error, ProtocolError)

    @pytest.mark.asyncio
    async def test_non_object_body(self):
        api = IZoneAPI("192.168.1.100")
        session = _mock_session(_json_response(["SystemV2"]))

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_get_system_info()

        assert isinstance(result.error, ProtocolError)

    @pytest.mark.asyncio
    async def test_malformed_json(self):
        api = IZoneAPI("192.168.1.100")
        response = AsyncMock()
        response.status = 200
        response.json = AsyncMock(side_effect=ValueError("Expecting value"))
        session = _mock_session(response)

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_get_system_info()

        assert result.ok is False
        assert isinstance(result.error, ProtocolError)
        assert "Malformed JSON" in str(result.error)

    @pytest.mark.asyncio
    async def test_non_200_status(self):
        api = IZoneAPI("192.168.1.100")
        session = _mock_session(_json_response({}, status=500))

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_get_system_info()

        assert isinstance(result.error, TransportError)
        assert "500" in str(result.error)

    @pytest.mark.asyncio
    async def test_timeout(self):
        api = IZoneAPI("192.168.1.100")
        session = _mock_session(side_effect=TimeoutError())

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_get_system_info()

        assert isinstance(result.error, TransportError)
        assert "TimeoutError" in str(result.error)

    @pytest.mark.asyncio
    async def test_connection_error(self):
        api = IZoneAPI("192.168.1.100")
        session = _mock_session(side_effect=aiohttp.ClientConnectionError("refused"))

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_send_command("SysOn", 1)

        assert isinstance(result.error, TransportError)
        assert "refused" in str(result.error)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("host", [None, "", "izone.local", "192.168.1.300"])
    async def test_invalid_address_no_io(self, host):
        """No request is made without a valid dotted-quad address."""
        api = IZoneAPI(host)
        session = _mock_session(_json_response({}))

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            read = await api.async_get_system_info()
            command = await api.async_send_command("SysOn", 1)

        assert isinstance(read.error, InvalidAddressError)
        assert isinstance(command.error, InvalidAddressError)
        session.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_command_returns_text(self):
        api = IZoneAPI("192.168.1.100")
        response = AsyncMock()
        response.status = 200
        response.text = AsyncMock(return_value="{OK}")
        session = _mock_session(response)

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_send_command("ZoneSetpoint", {"Index": 2, "Setpoint": 2200})

        assert result.ok is True
        assert result.text == "{OK}"
        args, kwargs = session.post.call_args
        assert args[0] == "http://192.168.1.100:80/iZoneCommandV2"
        assert kwargs["json"] == {"ZoneSetpoint": {"Index": 2, "Setpoint": 2200}}

    @pytest.mark.asyncio
    async def test_send_command_undecodable_body(self):
        """A command reply that is not valid UTF-8 still yields a result."""
        api = IZoneAPI("192.168.1.100")
        response = AsyncMock()
        response.status = 200
        response.text = AsyncMock(
            side_effect=lambda encoding=None, errors="strict": b"\xff\xfe{OK}".decode("utf-8", errors)
        )
        session = _mock_session(response)

        with patch.object(api, "_get_session", AsyncMock(return_value=session)):
            result = await api.async_send_command("SysOn", 1)

        assert result.ok is True
        assert result.text.endswith("{OK}")

    @pytest.mark.asyncio
    async def test_reset_bridge(self):
        api = IZoneAPI("192.168.1.100")

        with patch.object(api, "async_send_command", AsyncMock()) as send:
            await api.async_reset_bridge()

        send.assert_awaited_once_with("ReSetMe", 12345)

    @pytest.mark.asyncio
    async def test_close(self):
        api = IZoneAPI("192.168.1.100")
        session = MagicMock()
        session.closed = False
        session.close = AsyncMock()
        api._session = session

        await api.close()

        session.close.assert_awaited_once()
