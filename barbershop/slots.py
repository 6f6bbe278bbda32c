"""
This module contains the availability calculation for the booking form's time picker.
"""
import logging
from datetime import date, time
from typing import Iterable

from .models import BLOCKING_STATUSES
from .repository import ReservationRepository

logger = logging.getLogger(__name__)

OPENING_HOUR = 9
CLOSING_HOUR = 18
SLOT_MINUTES = 30


def generate_time_slots() -> list[time]:
    """
    Generates the fixed daily grid: every 30 minutes from 09:00 up to, not including, 18:00.
    """
    return [
        time(hour, minute)
        for hour in range(OPENING_HOUR, CLOSING_HOUR)
        for minute in range(0, 60, SLOT_MINUTES)
    ]


def filter_available(grid: Iterable[time], booked_times: Iterable[time]) -> list[time]:
    """
    Removes every slot that exactly matches a booked time, keeping the grid order.
    """
    booked = set(booked_times)
    return [slot for slot in grid if slot not in booked]


def format_slot(slot: time) -> str:
    return slot.strftime("%H:%M:%S")


async def get_available_slots(repository: ReservationRepository, barber_id: str, day: date) -> list[str]:
    """
    Computes the bookable slots of a barber on a day.

    Only pending and confirmed reservations block a slot. An empty list means the day is fully booked.

    Args:
        repository (ReservationRepository): The reservation store.
        barber_id (str): The identifier of the barber.
        day (date): The day to compute availability for.

    Returns:
        list[str]: The free slots as ``HH:MM:SS`` strings, ascending.
    """
    reservations = await repository.find_all(
        status=BLOCKING_STATUSES, appointment_date=day, barber_id=barber_id
    )
    available = filter_available(generate_time_slots(), (r.appointment_time for r in reservations))
    logger.info(f"Barber {barber_id} has {len(available)} free slots on {day.isoformat()}")
    return [format_slot(slot) for slot in available]
