# iceonwheels/routes/printer.py
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from ..errors import ConnectFailed, ConnectFailure, NotConnected, OrderNotFound, PrinterBusy, TransmitFailed
from ..printer.connection import PrinterConnection, ensure_secure_context
from ..services.orders import get_order
from ..settings import settings

router = APIRouter(prefix="/printer", tags=["printer"])

_CONNECT_STATUS = {
    ConnectFailure.UNSUPPORTED: 503,
    ConnectFailure.INSECURE_CONTEXT: 403,
    ConnectFailure.OTHER: 502,
}


class ConnectBody(BaseModel):
    address: Optional[str] = None


class PrinterStatusOut(BaseModel):
    connected: bool
    state: str


def get_printer(request: Request) -> PrinterConnection:
    return request.app.state.printer


def _status(printer: PrinterConnection) -> PrinterStatusOut:
    connected = printer.is_connected()
    return PrinterStatusOut(connected=connected, state=printer.state.value)


async def _send(coro, what: str):
    try:
        chunks = await coro
    except NotConnected:
        raise HTTPException(status_code=409, detail="Please connect to printer first.")
    except TransmitFailed:
        raise HTTPException(
            status_code=502,
            detail=f"Failed to print {what}. Please check printer connection.",
        )
    return {"ok": True, "chunks": chunks}


@router.get("/status", response_model=PrinterStatusOut)
def printer_status(printer: PrinterConnection = Depends(get_printer)):
    return _status(printer)


@router.post("/connect", response_model=PrinterStatusOut)
async def printer_connect(
    request: Request,
    body: Optional[ConnectBody] = None,
    printer: PrinterConnection = Depends(get_printer),
):
    address = body.address if body else None
    try:
        if settings.printer_require_secure_context:
            ensure_secure_context(request.url.scheme, request.url.hostname)
        await printer.connect(address)
    except PrinterBusy as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ConnectFailed as e:
        raise HTTPException(status_code=_CONNECT_STATUS[e.reason], detail=e.message)
    return _status(printer)


@router.post("/disconnect", response_model=PrinterStatusOut)
async def printer_disconnect(printer: PrinterConnection = Depends(get_printer)):
    await printer.disconnect()
    return _status(printer)


@router.post("/test")
async def printer_test(printer: PrinterConnection = Depends(get_printer)):
    return await _send(printer.print_self_test(), "test receipt")


@router.post("/orders/{order_id}/print")
async def printer_print_order(order_id: str, printer: PrinterConnection = Depends(get_printer)):
    try:
        order = get_order(order_id)
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="order not found")
    return await _send(printer.print_receipt(order), "receipt")
