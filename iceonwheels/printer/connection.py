# iceonwheels/printer/connection.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Protocol

from ..errors import ConnectFailed, ConnectFailure, NotConnected, PrinterBusy
from ..schemas.orders import Order
from .escpos import encode_receipt, encode_self_test
from .transport import WriteChannel, transmit

logger = logging.getLogger(__name__)

LOCAL_HOSTS = {"localhost", "127.0.0.1"}


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class DeviceRequester(Protocol):
    """
    Discovers a printer, lets the user pick one and opens its write channel.

    Must raise ConnectFailed with a classified reason; a user backing out of
    the selection is ConnectFailure.CANCELLED.
    """

    async def request(self, address: Optional[str] = None) -> WriteChannel: ...


def ensure_secure_context(scheme: str, host: Optional[str]) -> None:
    if scheme == "https" or (host or "").lower() in LOCAL_HOSTS:
        return
    raise ConnectFailed(
        ConnectFailure.INSECURE_CONTEXT,
        "Bluetooth access requires HTTPS. Please access this site over a secure connection.",
    )


class PrinterConnection:
    """
    The single printer link owned by the application.

    Created once by the app and handed to whoever prints; callers should not
    start a second connect while one is in flight (PrinterBusy is raised).
    """

    def __init__(self, requester: DeviceRequester, chunk_size: Optional[int] = None):
        self._requester = requester
        self._chunk_size = chunk_size
        self._channel: Optional[WriteChannel] = None
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_connected(self) -> bool:
        if self._state is not ConnectionState.CONNECTED:
            return False
        if self._channel is None or not self._channel.is_connected():
            logger.warning("printer link lost")
            self._channel = None
            self._state = ConnectionState.DISCONNECTED
            return False
        return True

    async def connect(self, address: Optional[str] = None) -> bool:
        """
        Returns True once connected, False if the user cancelled the device
        selection. Other failures raise ConnectFailed.
        """
        if self._state is ConnectionState.CONNECTING:
            raise PrinterBusy()
        if self._channel is not None:
            await self.disconnect()

        self._state = ConnectionState.CONNECTING
        try:
            channel = await self._requester.request(address)
        except ConnectFailed as e:
            self._state = ConnectionState.DISCONNECTED
            if e.is_cancelled:
                logger.info("printer selection cancelled")
                return False
            logger.error("printer connect failed (%s): %s", e.reason.value, e.message)
            raise
        except Exception as e:
            self._state = ConnectionState.DISCONNECTED
            logger.error("printer connect failed: %s", e)
            raise ConnectFailed(ConnectFailure.OTHER, f"Failed to connect to printer: {e}") from e

        self._channel = channel
        self._state = ConnectionState.CONNECTED
        logger.info("printer connected")
        return True

    async def disconnect(self) -> None:
        channel, self._channel = self._channel, None
        self._state = ConnectionState.DISCONNECTED
        if channel is None:
            return
        try:
            await channel.close()
        except Exception as e:
            # the link is gone either way
            logger.warning("error while closing printer channel: %s", e)
        logger.info("printer disconnected")

    def _require_channel(self) -> WriteChannel:
        if not self.is_connected():
            raise NotConnected()
        return self._channel

    async def send(self, data: bytes) -> int:
        return await transmit(data, self._require_channel(), self._chunk_size)

    async def print_receipt(self, order: Order) -> int:
        return await self.send(encode_receipt(order))

    async def print_self_test(self) -> int:
        return await self.send(encode_self_test())
