"""Shared fixtures: in-memory Firestore and a fake printer link so tests run without credentials or hardware."""
from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

# Set dummy env vars BEFORE any app imports
os.environ.setdefault("FIREBASE_PROJECT_ID", "iceonwheels-test")
os.environ.setdefault("PRINTER_REQUIRE_SECURE_CONTEXT", "true")

import pytest


# ---------- Fake Firestore ----------

class FakeSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict[str, Any]]):
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocRef:
    def __init__(self, store: Dict[str, Dict[str, Any]], doc_id: str):
        self._store = store
        self.id = doc_id

    def set(self, data, merge=False):
        if merge and self.id in self._store:
            self._store[self.id].update(data)
        else:
            self._store[self.id] = dict(data)

    def get(self):
        return FakeSnapshot(self.id, self._store.get(self.id))


class FakeQuery:
    def __init__(self, store: Dict[str, Dict[str, Any]], order=None, limit=None):
        self._store = store
        self._order = order
        self._limit = limit

    def order_by(self, field, direction="ASCENDING"):
        return FakeQuery(self._store, (field, direction == "DESCENDING"), self._limit)

    def limit(self, n):
        return FakeQuery(self._store, self._order, n)

    def stream(self):
        rows = list(self._store.items())
        if self._order:
            field, reverse = self._order
            rows.sort(key=lambda kv: kv[1].get(field), reverse=reverse)
        if self._limit is not None:
            rows = rows[: self._limit]
        return [FakeSnapshot(k, v) for k, v in rows]


class FakeCollection(FakeQuery):
    _counter = 0

    def document(self, doc_id: Optional[str] = None):
        if doc_id is None:
            FakeCollection._counter += 1
            doc_id = f"auto{FakeCollection._counter}"
        return FakeDocRef(self._store, doc_id)


class FakeFirestore:
    def __init__(self):
        self.data: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def collection(self, name: str):
        return FakeCollection(self.data.setdefault(name, {}))


@pytest.fixture(autouse=True)
def fake_db(monkeypatch):
    """Route every ensure_firestore() call to one in-memory store."""
    db = FakeFirestore()
    monkeypatch.setattr("iceonwheels.services.promos.ensure_firestore", lambda: db)
    monkeypatch.setattr("iceonwheels.services.orders.ensure_firestore", lambda: db)
    return db


# ---------- Fake printer link ----------

class FakeChannel:
    def __init__(self, fail_on: Optional[int] = None):
        self.connected = True
        self.fail_on = fail_on
        self.attempts = 0
        self.writes: List[bytes] = []
        self.closed = False

    def is_connected(self) -> bool:
        return self.connected

    async def write(self, chunk: bytes) -> None:
        index = self.attempts
        self.attempts += 1
        if self.fail_on is not None and index == self.fail_on:
            raise OSError("GATT write failed")
        self.writes.append(bytes(chunk))

    async def close(self) -> None:
        self.closed = True
        self.connected = False

    @property
    def data(self) -> bytes:
        return b"".join(self.writes)


class FakeRequester:
    """Hands out queued channels or raises queued errors, in order."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.addresses: List[Optional[str]] = []

    async def request(self, address=None):
        self.addresses.append(address)
        outcome = self.outcomes.pop(0) if self.outcomes else FakeChannel()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture()
def channel():
    return FakeChannel()


@pytest.fixture()
def printer(channel):
    from iceonwheels.printer.connection import PrinterConnection
    return PrinterConnection(FakeRequester(channel), chunk_size=20)


# ---------- Domain helpers ----------

@pytest.fixture()
def sample_order():
    from iceonwheels.schemas.orders import (
        CustomerIn, Order, OrderLine, OrderType, PaymentMethod, TotalsOut,
    )
    return Order(
        orderId="ORD1700000000000",
        customer=CustomerIn(name="Asha", phone="9876543210"),
        lines=[OrderLine(id="vanilla", name="Vanilla", unitPrice=3900, quantity=2)],
        totals=TotalsOut(subtotal=7800, discount=0, total=7800),
        paymentMethod=PaymentMethod.CASH,
        orderType=OrderType.PICKUP,
        timestamp=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture()
def client(printer):
    """FastAPI TestClient (sync) with the fake printer injected."""
    from fastapi.testclient import TestClient
    from iceonwheels.main import app
    from iceonwheels.routes.printer import get_printer

    app.dependency_overrides[get_printer] = lambda: printer
    yield TestClient(app)
    app.dependency_overrides.clear()
