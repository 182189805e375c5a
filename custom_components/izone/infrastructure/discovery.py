"""UDP broadcast discovery of the iZone bridge.

The bridge answers any ``IASD`` datagram sent to its discovery port. Only the
sender address of the reply matters, the payload is not parsed.

Example:
    >>> resolver = AddressResolver()
    >>> address = await resolver.async_discover()
    >>> address
    '192.168.1.40'
"""

from __future__ import annotations

import asyncio
import logging

from ..constants import (
    DISCOVERY_BROADCAST_ADDRESS,
    DISCOVERY_MESSAGE,
    DISCOVERY_PORT,
    DISCOVERY_TIMEOUT,
)
from .errors import DiscoveryTimeoutError, NetworkError

_LOGGER = logging.getLogger(__name__)


class _DiscoveryProtocol(asyncio.DatagramProtocol):
    """Resolve a future with the address of the first datagram received."""

    def __init__(self, reply: asyncio.Future):
        self._reply = reply

    def datagram_received(self, data: bytes, addr: tuple) -> None:
        _LOGGER.debug("Discovery reply from %s:%s - %r", addr[0], addr[1], data)
        if not self._reply.done():
            self._reply.set_result(addr[0])

    def error_received(self, exc: Exception) -> None:
        _LOGGER.debug("Discovery socket error: %s", exc)
        if not self._reply.done():
            self._reply.set_exception(NetworkError(f"Discovery socket error: {exc}"))


class AddressResolver:
    """Single-shot discovery of the bridge address.

    The resolver sends one broadcast and waits for one reply. Retry policy is
    left to the caller.

    Attributes:
        broadcast_address: Destination of the discovery datagram
        port: Vendor discovery port
    """

    def __init__(
        self,
        broadcast_address: str = DISCOVERY_BROADCAST_ADDRESS,
        port: int = DISCOVERY_PORT,
    ):
        self.broadcast_address = broadcast_address
        self.port = port

    async def async_discover(self, timeout: float = DISCOVERY_TIMEOUT) -> str:
        """Broadcast a discovery request and return the first responder's address.

        Args:
            timeout: Seconds to wait for a reply

        Returns:
            IPv4 address of the bridge.

        Raises:
            DiscoveryTimeoutError: No reply arrived within the timeout.
            NetworkError: The socket could not be bound or the datagram not sent.
        """
        loop = asyncio.get_running_loop()
        reply = loop.create_future()

        try:
            transport, _ = await loop.create_datagram_endpoint(
                lambda: _DiscoveryProtocol(reply),
                local_addr=("0.0.0.0", 0),
                allow_broadcast=True,
            )
        except OSError as e:
            raise NetworkError(f"Cannot open discovery socket: {e}") from e

        try:
            _LOGGER.debug(
                "Sending discovery broadcast to %s:%d", self.broadcast_address, self.port
            )
            # Send failures arrive through error_received, not as exceptions
            transport.sendto(DISCOVERY_MESSAGE, (self.broadcast_address, self.port))
            address = await asyncio.wait_for(reply, timeout)
        except TimeoutError as e:
            raise DiscoveryTimeoutError("No response received") from e
        finally:
            transport.close()

        _LOGGER.info("Discovered iZone bridge at %s", address)
        return address
