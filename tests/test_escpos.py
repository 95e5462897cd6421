"""Tests for the ESC/POS receipt layout."""
from __future__ import annotations

from datetime import datetime, timezone

from iceonwheels.printer.escpos import (
    Command,
    encode_receipt,
    encode_self_test,
    format_timestamp,
    item_row,
    truncate_name,
)
from iceonwheels.schemas.orders import OrderLine, OrderType, PaymentMethod, TotalsOut


def test_command_table_bytes():
    assert Command.INIT.value == b"\x1b@"
    assert Command.BOLD_ON.value == b"\x1bE\x01"
    assert Command.ALIGN_CENTER.value == b"\x1ba\x01"
    assert Command.CUT_PAPER.value == b"\x1dVB\x00"
    assert Command.LF.value == b"\n"


def test_receipt_frame(sample_order):
    data = encode_receipt(sample_order)
    assert data.startswith(Command.INIT.value + Command.ALIGN_CENTER.value
                           + Command.DOUBLE_HEIGHT_ON.value + Command.BOLD_ON.value)
    assert data.endswith(Command.CUT_PAPER.value)
    assert "🍨 ICE ON WHEELS 🍨\n".encode() in data


def test_metadata_block_is_left_aligned_and_bold(sample_order):
    data = encode_receipt(sample_order)
    block = Command.ALIGN_LEFT.value + Command.BOLD_ON.value + b"Order ID: ORD1700000000000\n"
    assert block in data
    assert b"Customer: Asha\n" in data
    assert b"Phone: 9876543210\n" in data
    assert b"Type: Pickup\n" in data
    assert b"Payment: Cash\n" in data
    assert Command.BOLD_OFF.value + b"=" * 32 + b"\n" in data


def test_item_and_totals_lines(sample_order):
    data = encode_receipt(sample_order)
    assert ("Vanilla".ljust(22) + " 2 ₹78.00\n").encode() in data
    assert Command.ALIGN_RIGHT.value + "Subtotal: ₹78.00\n".encode() in data
    total = (Command.BOLD_ON.value + Command.DOUBLE_HEIGHT_ON.value
             + "TOTAL: ₹78.00\n".encode() + Command.NORMAL_SIZE.value + Command.BOLD_OFF.value)
    assert total in data


def test_zero_discount_line_omitted(sample_order):
    assert b"Discount" not in encode_receipt(sample_order)


def test_discount_line_present(sample_order):
    order = sample_order.model_copy(update={
        "totals": TotalsOut(subtotal=7800, discount=780, total=7020),
    })
    data = encode_receipt(order)
    assert "Discount: -₹7.80\n".encode() in data
    assert "TOTAL: ₹70.20\n".encode() in data
    assert data.index(b"Subtotal") < data.index(b"Discount") < data.index(b"TOTAL")


def test_customization_lines(sample_order):
    line = OrderLine(id="sundae", name="Hot Fudge Sundae", unitPrice=9900, quantity=1,
                     size="large", toppings=["nuts", "sprinkles"])
    order = sample_order.model_copy(update={
        "lines": [line],
        "paymentMethod": PaymentMethod.UPI,
        "orderType": OrderType.DINE_IN,
    })
    data = encode_receipt(order)
    assert b"  Size: large\n  Toppings: nuts, sprinkles\n" in data
    assert b"Type: Dine In\n" in data
    assert b"Payment: UPI\n" in data


def test_footer_before_cut(sample_order):
    data = encode_receipt(sample_order)
    tail = Command.ALIGN_CENTER.value + b"\nThank you for choosing\nIce on Wheels!\n"
    assert tail in data
    assert data.endswith(b"www.iceonwheels.com\n" + Command.CUT_PAPER.value)


def test_truncate_long_names():
    assert truncate_name("Vanilla") == "Vanilla"
    assert truncate_name("x" * 20) == "x" * 20
    assert truncate_name("Triple Chocolate Brownie Blast") == "Triple Chocolate ..."


def test_item_row_columns():
    row = item_row(OrderLine(id="a", name="Triple Chocolate Brownie Blast", unitPrice=12900, quantity=12))
    assert row == "Triple Chocolate ...  12 ₹1548.00"
    assert row.index("12") == 22


def test_timestamp_rendered_in_store_offset():
    ts = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert format_timestamp(ts) == "01/01/2024, 05:30:00 PM"
    assert format_timestamp(datetime(2024, 1, 1, 12, 0)) == "01/01/2024, 05:30:00 PM"


def test_self_test_payload():
    data = encode_self_test(datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc))
    assert data.startswith(Command.INIT.value + Command.ALIGN_CENTER.value)
    assert b"Printer connection successful!\n" in data
    assert b"01/01/2024, 05:30:00 AM\n" in data
    assert data.endswith(Command.CUT_PAPER.value)
