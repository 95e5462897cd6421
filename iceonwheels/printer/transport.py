# iceonwheels/printer/transport.py
from __future__ import annotations

import logging
from typing import Iterator, Optional, Protocol

from ..errors import NotConnected, TransmitFailed
from ..settings import settings

logger = logging.getLogger(__name__)


class WriteChannel(Protocol):
    """A connected, chunk-at-a-time byte sink (a GATT characteristic)."""

    def is_connected(self) -> bool: ...

    async def write(self, chunk: bytes) -> None: ...

    async def close(self) -> None: ...


def iter_chunks(buffer: bytes, chunk_size: int) -> Iterator[bytes]:
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    for start in range(0, len(buffer), chunk_size):
        yield buffer[start:start + chunk_size]


async def transmit(buffer: bytes, channel: WriteChannel, chunk_size: Optional[int] = None) -> int:
    """
    Write `buffer` to `channel` in order, one awaited chunk at a time.

    Raises NotConnected before the first write if the channel is down, and
    TransmitFailed on the first failing write; later chunks are not sent.
    Returns the number of chunks written.
    """
    if not channel.is_connected():
        raise NotConnected()

    size = chunk_size or settings.printer_chunk_size
    sent = 0
    index = -1
    logger.debug("transmitting %d bytes in chunks of %d", len(buffer), size)
    for index, chunk in enumerate(iter_chunks(buffer, size)):
        try:
            await channel.write(chunk)
        except Exception as e:
            logger.warning("printer write failed at chunk %d (%d bytes sent): %s", index, sent, e)
            raise TransmitFailed(index, sent, e) from e
        sent += len(chunk)
    return index + 1
