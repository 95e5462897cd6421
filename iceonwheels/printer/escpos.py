# iceonwheels/printer/escpos.py
"""
ESC/POS receipt encoding for 58mm thermal printers.

A receipt is a flat byte string: fixed command tokens interleaved with
UTF-8 text. Alignment and size/weight are sticky on the printer, so every
block switches its own modes on and back off.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from ..schemas.orders import Order, OrderLine
from ..services.pricing import format_amount
from ..settings import settings

LINE_WIDTH = 32
NAME_MAX = 20         # longer names get truncated ...
NAME_KEEP = 17        # ... to this many chars plus "..."
NAME_COLUMN = 22
QTY_COLUMN = 2

ITEMS_HEADER = "Item                    Qty  Price"


class Command(bytes, Enum):
    INIT = b"\x1b\x40"

    BOLD_ON = b"\x1b\x45\x01"
    BOLD_OFF = b"\x1b\x45\x00"
    DOUBLE_HEIGHT_ON = b"\x1b\x21\x10"
    DOUBLE_WIDTH_ON = b"\x1b\x21\x20"
    NORMAL_SIZE = b"\x1b\x21\x00"

    ALIGN_LEFT = b"\x1b\x61\x00"
    ALIGN_CENTER = b"\x1b\x61\x01"
    ALIGN_RIGHT = b"\x1b\x61\x02"

    CUT_PAPER = b"\x1d\x56\x42\x00"

    LF = b"\x0a"
    CR = b"\x0d"


class ReceiptBuilder:
    """Accumulates commands and text in emission order."""

    def __init__(self):
        self._buf = bytearray()

    def cmd(self, *commands: Command) -> "ReceiptBuilder":
        for c in commands:
            self._buf += c.value
        return self

    def text(self, s: str) -> "ReceiptBuilder":
        self._buf += s.encode("utf-8")
        return self

    def line(self, s: str = "") -> "ReceiptBuilder":
        return self.text(s + "\n")

    def divider(self, char: str = "=") -> "ReceiptBuilder":
        return self.line(char * LINE_WIDTH)

    def build(self) -> bytes:
        return bytes(self._buf)


def format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    local = ts.astimezone(timezone(timedelta(minutes=settings.receipt_utc_offset_minutes)))
    return local.strftime("%d/%m/%Y, %I:%M:%S %p")


def truncate_name(name: str) -> str:
    if len(name) > NAME_MAX:
        return name[:NAME_KEEP] + "..."
    return name


def item_row(line: OrderLine) -> str:
    name = truncate_name(line.name).ljust(NAME_COLUMN)
    qty = str(line.quantity).rjust(QTY_COLUMN)
    return f"{name}{qty} {format_amount(line.lineTotal)}"


def _header(b: ReceiptBuilder, title: str) -> None:
    b.cmd(Command.ALIGN_CENTER, Command.DOUBLE_HEIGHT_ON, Command.BOLD_ON)
    b.line(title)
    b.cmd(Command.NORMAL_SIZE, Command.BOLD_OFF)


def encode_receipt(order: Order) -> bytes:
    b = ReceiptBuilder()
    b.cmd(Command.INIT)

    _header(b, settings.store_name)
    for byline in settings.store_bylines:
        b.line(byline)
    b.line()

    b.cmd(Command.ALIGN_LEFT, Command.BOLD_ON)
    b.line(f"Order ID: {order.orderId}")
    b.line(f"Date: {format_timestamp(order.timestamp)}")
    b.line(f"Customer: {order.customer.name}")
    b.line(f"Phone: {order.customer.phone}")
    b.line(f"Type: {order.orderType.label}")
    b.line(f"Payment: {order.paymentMethod.label}")
    b.cmd(Command.BOLD_OFF)
    b.divider("=")

    b.cmd(Command.BOLD_ON).line(ITEMS_HEADER).cmd(Command.BOLD_OFF)
    b.divider("-")

    for line in order.lines:
        b.line(item_row(line))
        if line.size:
            b.line(f"  Size: {line.size}")
        if line.toppings:
            b.line(f"  Toppings: {', '.join(line.toppings)}")

    b.divider("=")

    totals = order.totals
    b.cmd(Command.ALIGN_RIGHT)
    b.line(f"Subtotal: {format_amount(totals.subtotal)}")
    if totals.discount > 0:
        b.line(f"Discount: -{format_amount(totals.discount)}")
    b.cmd(Command.BOLD_ON, Command.DOUBLE_HEIGHT_ON)
    b.line(f"TOTAL: {format_amount(totals.total)}")
    b.cmd(Command.NORMAL_SIZE, Command.BOLD_OFF)

    b.cmd(Command.ALIGN_CENTER)
    b.line()
    for footer in settings.store_footer:
        b.line(footer)
    b.line()
    b.line(settings.store_website)

    b.cmd(Command.CUT_PAPER)
    return b.build()


def encode_self_test(now: Optional[datetime] = None) -> bytes:
    b = ReceiptBuilder()
    b.cmd(Command.INIT)
    _header(b, "🧪 PRINTER TEST 🧪")
    b.line("Ice on Wheels")
    b.line("Printer connection successful!")
    b.line(format_timestamp(now or datetime.now(timezone.utc)))
    b.cmd(Command.CUT_PAPER)
    return b.build()
