"""Tests for the bleak-backed printer discovery, with the BLE stack faked out."""
from __future__ import annotations

from types import SimpleNamespace

import pytest
from bleak.exc import BleakError

from iceonwheels.errors import ConnectFailed, ConnectFailure
from iceonwheels.printer import ble
from iceonwheels.printer.ble import BleakDeviceRequester, classify_bleak_error, select_device

SERVICE = "000018f0-0000-1000-8000-00805f9b34fb"
CHAR = "00002af1-0000-1000-8000-00805f9b34fb"


def _dev(name, address):
    return SimpleNamespace(name=name, address=address)


def _adv(*uuids):
    return SimpleNamespace(service_uuids=list(uuids))


class _FakeClient:
    instances = []

    def __init__(self, device):
        self.device = device
        self.is_connected = False
        self.written = []
        self.services = SimpleNamespace(
            get_characteristic=lambda uuid: object() if uuid == CHAR and device.name != "POS-broken" else None
        )
        _FakeClient.instances.append(self)

    async def connect(self):
        self.is_connected = True

    async def disconnect(self):
        self.is_connected = False

    async def write_gatt_char(self, uuid, data, response=False):
        self.written.append((uuid, bytes(data), response))


def _patch_scan(monkeypatch, found):
    class _Scanner:
        @staticmethod
        async def discover(timeout=5.0, return_adv=False):
            return found

    monkeypatch.setattr(ble, "BleakScanner", _Scanner)
    monkeypatch.setattr(ble, "BleakClient", _FakeClient)
    _FakeClient.instances.clear()


def test_select_device_by_address_or_first():
    a, b = _dev("Printer-1", "AA:AA"), _dev("POS-2", "BB:BB")
    assert select_device([a, b], None) is a
    assert select_device([a, b], "bb:bb") is b
    assert select_device([a, b], "CC:CC") is None
    assert select_device([], None) is None


def test_classify_bleak_errors():
    assert classify_bleak_error(BleakError("No Bluetooth adapters found.")).reason is ConnectFailure.UNSUPPORTED
    assert classify_bleak_error(BleakError("Device disconnected")).reason is ConnectFailure.OTHER


@pytest.mark.asyncio
async def test_request_filters_and_opens_channel(monkeypatch):
    _patch_scan(monkeypatch, {
        "11": (_dev("Headphones", "11"), _adv()),
        "22": (_dev(None, "22"), _adv(SERVICE.upper())),
        "33": (_dev("Thermal58", "33"), _adv()),
    })
    requester = BleakDeviceRequester(name_prefixes=["Printer", "POS", "Thermal"], service_uuid=SERVICE,
                                     characteristic_uuid=CHAR, scan_timeout=0.1)

    channel = await requester.request("33")
    assert channel.is_connected()
    await channel.write(b"\x1b@")
    client = _FakeClient.instances[-1]
    assert client.device.address == "33"
    assert client.written == [(CHAR, b"\x1b@", True)]

    await channel.close()
    assert not channel.is_connected()


@pytest.mark.asyncio
async def test_request_advertised_service_matches(monkeypatch):
    _patch_scan(monkeypatch, {"22": (_dev(None, "22"), _adv(SERVICE))})
    requester = BleakDeviceRequester(name_prefixes=["Printer"], service_uuid=SERVICE, characteristic_uuid=CHAR)
    channel = await requester.request()
    assert channel.is_connected()


@pytest.mark.asyncio
async def test_no_candidate_is_cancelled(monkeypatch):
    _patch_scan(monkeypatch, {"11": (_dev("Headphones", "11"), _adv())})
    requester = BleakDeviceRequester(name_prefixes=["Printer"], service_uuid=SERVICE, characteristic_uuid=CHAR)
    with pytest.raises(ConnectFailed) as exc:
        await requester.request()
    assert exc.value.reason is ConnectFailure.CANCELLED


@pytest.mark.asyncio
async def test_missing_characteristic_fails(monkeypatch):
    _patch_scan(monkeypatch, {"44": (_dev("POS-broken", "44"), _adv())})
    requester = BleakDeviceRequester(name_prefixes=["POS"], service_uuid=SERVICE, characteristic_uuid=CHAR)
    with pytest.raises(ConnectFailed) as exc:
        await requester.request()
    assert exc.value.reason is ConnectFailure.OTHER
    assert not _FakeClient.instances[-1].is_connected


@pytest.mark.asyncio
async def test_bleak_error_is_classified(monkeypatch):
    class _Scanner:
        @staticmethod
        async def discover(timeout=5.0, return_adv=False):
            raise BleakError("Bluetooth device is turned off")

    monkeypatch.setattr(ble, "BleakScanner", _Scanner)
    requester = BleakDeviceRequester(name_prefixes=["POS"], service_uuid=SERVICE, characteristic_uuid=CHAR)
    with pytest.raises(ConnectFailed) as exc:
        await requester.request()
    assert exc.value.reason is ConnectFailure.UNSUPPORTED
