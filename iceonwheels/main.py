# iceonwheels/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .logging import setup_logging
from .printer.ble import BleakDeviceRequester
from .printer.connection import PrinterConnection
from .routes import cart, orders, printer, promos
from .settings import settings

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Ice on Wheels Ordering API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cart.router)
app.include_router(promos.router)
app.include_router(orders.router)
app.include_router(printer.router)

# the one printer link for this process; routes get it via printer.get_printer
app.state.printer = PrinterConnection(
    BleakDeviceRequester(), chunk_size=settings.printer_chunk_size
)


@app.get("/")
def root():
    return {"message": "Ice on Wheels API is running 🍦"}


@app.on_event("shutdown")
async def _shutdown_printer():
    await app.state.printer.disconnect()
    logger.info("shutdown complete")
