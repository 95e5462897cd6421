"""Typed outcomes raised by the pricing, order and printer services.

Routes translate these into HTTP responses; nothing here is fatal to the
process.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class InvalidPromo(ValueError):
    """Promo code unknown, expired, used up, inapplicable, or minimum unmet."""

    def __init__(self, message: str = "Invalid promo code or not applicable to your order"):
        super().__init__(message)
        self.message = message


class MinimumOrderNotMet(InvalidPromo):
    def __init__(self, code: str, minimum_order: int, message: str):
        super().__init__(message)
        self.code = code
        self.minimum_order = minimum_order


class OrderNotFound(LookupError):
    def __init__(self, order_id: str):
        super().__init__(f"order not found: {order_id}")
        self.order_id = order_id


class PrinterError(Exception):
    """Base class for everything that can go wrong talking to the printer."""


class NotConnected(PrinterError):
    def __init__(self, message: str = "Printer not connected"):
        super().__init__(message)


class PrinterBusy(PrinterError):
    def __init__(self, message: str = "A printer connection attempt is already in progress"):
        super().__init__(message)


class ConnectFailure(str, Enum):
    UNSUPPORTED = "unsupported"            # switch environment
    INSECURE_CONTEXT = "insecure_context"  # switch to a secure transport
    CANCELLED = "cancelled"                # user closed the device picker
    OTHER = "other"                        # transient


class ConnectFailed(PrinterError):
    def __init__(self, reason: ConnectFailure, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

    @property
    def is_cancelled(self) -> bool:
        return self.reason is ConnectFailure.CANCELLED


class TransmitFailed(PrinterError):
    def __init__(self, chunk_index: int, bytes_sent: int, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"write failed at chunk {chunk_index} after {bytes_sent} bytes{detail}")
        self.chunk_index = chunk_index
        self.bytes_sent = bytes_sent
