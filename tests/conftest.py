import os
import tempfile
import uuid
from datetime import date, time
from decimal import Decimal

_tmpdir = tempfile.mkdtemp(prefix="barbershop-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmpdir}/test.db"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASS"] = ""

import pytest
from fastapi.testclient import TestClient

from barbershop.db import db
from barbershop.main import app
from barbershop.models import Reservation

BARBER_ID = "123e4567-e89b-12d3-a456-426614174000"
OTHER_BARBER_ID = "223e4567-e89b-12d3-a456-426614174001"


def reservation_payload(**overrides):
    payload = {
        "customerName": "John Doe",
        "customerEmail": "john@example.com",
        "customerPhone": "+1234567890",
        "barberId": BARBER_ID,
        "barberName": "John Smith",
        "serviceType": "haircut",
        "appointmentDate": "2025-12-25",
        "appointmentTime": "10:00:00",
        "price": 25.00,
    }
    payload.update(overrides)
    return payload


def make_reservation(**fields):
    values = {
        "id": str(uuid.uuid4()),
        "customer_name": "Test User",
        "customer_email": "test@example.com",
        "customer_phone": "+1234567890",
        "barber_id": BARBER_ID,
        "barber_name": "John Smith",
        "service_type": "haircut",
        "appointment_date": date(2025, 12, 25),
        "appointment_time": time(10, 0),
        "duration": 30,
        "price": Decimal("25.00"),
        "status": "pending",
    }
    values.update(fields)
    return Reservation(**values)


class InMemoryRepository:
    """Stands in for ReservationRepository in unit tests."""

    def __init__(self, reservations=()):
        self.rows = {r.id: r for r in reservations}

    async def insert(self, reservation):
        if reservation.id is None:
            reservation.id = str(uuid.uuid4())
        self.rows[reservation.id] = reservation
        return reservation

    async def find_by_id(self, reservation_id):
        return self.rows.get(reservation_id)

    async def find_all(self, status=None, appointment_date=None, barber_id=None):
        statuses = {status} if isinstance(status, str) else (set(status) if status is not None else None)
        found = [
            r for r in self.rows.values()
            if (statuses is None or r.status in statuses)
            and (appointment_date is None or r.appointment_date == appointment_date)
            and (barber_id is None or r.barber_id == barber_id)
        ]
        return sorted(found, key=lambda r: (r.appointment_date, r.appointment_time), reverse=True)

    async def update(self, reservation_id, patch):
        reservation = self.rows.get(reservation_id)
        if reservation is None:
            return None
        for field, value in patch.items():
            setattr(reservation, field, value)
        return reservation


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def _client():
    with TestClient(app) as client:
        yield client


@pytest.fixture
def client(_client):
    async def reset_tables():
        await db.drop_all()
        await db.create_all()

    _client.portal.call(reset_tables)
    return _client


@pytest.fixture
def seed(client):
    """Inserts a reservation directly, bypassing the booking flow. Returns its id."""
    def _seed(**fields):
        reservation = make_reservation(**fields)
        reservation_id = reservation.id

        async def insert():
            async with db.Session() as session:
                session.add(reservation)
                await session.commit()

        client.portal.call(insert)
        return reservation_id

    return _seed


@pytest.fixture
def sent_notifications(monkeypatch):
    """Records every notification handed to a channel instead of delivering it."""
    sent = []

    def record(cls, channel, message):
        sent.append((channel, message))
        return {"success": True, "messageId": f"test-{len(sent)}"}

    monkeypatch.setattr("barbershop.notifications.NotificationFactory.send", classmethod(record))
    return sent
