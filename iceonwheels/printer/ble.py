# iceonwheels/printer/ble.py
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice
from bleak.exc import BleakError

from ..errors import ConnectFailed, ConnectFailure
from ..settings import settings

logger = logging.getLogger(__name__)

Selector = Callable[[Sequence[BLEDevice], Optional[str]], Optional[BLEDevice]]

_UNSUPPORTED_HINTS = ("not supported", "unsupported", "no bluetooth adapter", "not available", "turned off")


def select_device(candidates: Sequence[BLEDevice], address: Optional[str]) -> Optional[BLEDevice]:
    """Pick the requested address, or the first candidate if none was given."""
    if address:
        wanted = address.lower()
        return next((d for d in candidates if d.address.lower() == wanted), None)
    return candidates[0] if candidates else None


def classify_bleak_error(exc: BleakError) -> ConnectFailed:
    msg = str(exc) or exc.__class__.__name__
    if any(h in msg.lower() for h in _UNSUPPORTED_HINTS):
        return ConnectFailed(
            ConnectFailure.UNSUPPORTED,
            f"Bluetooth is not available on this machine: {msg}",
        )
    return ConnectFailed(ConnectFailure.OTHER, f"Failed to connect to printer: {msg}")


class BleakWriteChannel:
    def __init__(self, client: BleakClient, characteristic_uuid: str):
        self._client = client
        self._char = characteristic_uuid

    def is_connected(self) -> bool:
        return bool(self._client.is_connected)

    async def write(self, chunk: bytes) -> None:
        await self._client.write_gatt_char(self._char, chunk, response=True)

    async def close(self) -> None:
        if self._client.is_connected:
            await self._client.disconnect()


class BleakDeviceRequester:
    """
    Scans for thermal printers by name prefix or advertised service and
    opens the write characteristic of the selected one.
    """

    def __init__(
        self,
        name_prefixes: Optional[List[str]] = None,
        service_uuid: Optional[str] = None,
        characteristic_uuid: Optional[str] = None,
        scan_timeout: Optional[float] = None,
        selector: Selector = select_device,
    ):
        self.name_prefixes = name_prefixes or settings.printer_name_prefixes
        self.service_uuid = (service_uuid or settings.printer_service_uuid).lower()
        self.characteristic_uuid = characteristic_uuid or settings.printer_characteristic_uuid
        self.scan_timeout = scan_timeout or settings.printer_scan_timeout
        self.selector = selector

    def _is_printer(self, device: BLEDevice, service_uuids: Sequence[str]) -> bool:
        name = device.name or ""
        if any(name.startswith(p) for p in self.name_prefixes):
            return True
        return self.service_uuid in {u.lower() for u in service_uuids}

    async def _discover(self) -> List[BLEDevice]:
        found = await BleakScanner.discover(timeout=self.scan_timeout, return_adv=True)
        return [dev for dev, adv in found.values() if self._is_printer(dev, adv.service_uuids)]

    async def request(self, address: Optional[str] = None) -> BleakWriteChannel:
        try:
            candidates = await self._discover()
            device = self.selector(candidates, address)
            if device is None:
                raise ConnectFailed(ConnectFailure.CANCELLED, "No printer selected")

            logger.info("connecting to printer %s (%s)", device.name, device.address)
            client = BleakClient(device)
            await client.connect()
            if client.services.get_characteristic(self.characteristic_uuid) is None:
                await client.disconnect()
                raise ConnectFailed(
                    ConnectFailure.OTHER,
                    f"Failed to connect to printer: {device.name or device.address} "
                    "has no printer write characteristic",
                )
        except BleakError as e:
            raise classify_bleak_error(e) from e

        return BleakWriteChannel(client, self.characteristic_uuid)
