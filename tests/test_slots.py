from datetime import date, time

import pytest

from barbershop.slots import filter_available, format_slot, generate_time_slots, get_available_slots
from conftest import BARBER_ID, OTHER_BARBER_ID, InMemoryRepository, make_reservation

DAY = date(2025, 12, 25)


def test_grid_has_eighteen_half_hour_slots():
    grid = generate_time_slots()

    assert len(grid) == 18
    assert grid[0] == time(9, 0)
    assert grid[-1] == time(17, 30)
    assert time(18, 0) not in grid
    assert grid == sorted(grid)


def test_filter_available_keeps_grid_order():
    grid = generate_time_slots()

    available = filter_available(grid, [time(17, 0), time(9, 30)])

    assert len(available) == 16
    assert available == [slot for slot in grid if slot not in (time(9, 30), time(17, 0))]


def test_filter_available_ignores_off_grid_times():
    grid = generate_time_slots()

    assert filter_available(grid, [time(10, 15), time(19, 0)]) == grid


def test_format_slot_is_zero_padded():
    assert format_slot(time(9, 0)) == "09:00:00"


@pytest.mark.anyio
async def test_empty_day_returns_full_grid():
    slots = await get_available_slots(InMemoryRepository(), BARBER_ID, DAY)

    assert slots == [format_slot(s) for s in generate_time_slots()]


@pytest.mark.anyio
@pytest.mark.parametrize("status", ["pending", "confirmed"])
async def test_blocking_reservation_removes_its_slot(status):
    repository = InMemoryRepository([make_reservation(status=status, appointment_time=time(10, 0))])

    slots = await get_available_slots(repository, BARBER_ID, DAY)

    assert len(slots) == 17
    assert "10:00:00" not in slots


@pytest.mark.anyio
@pytest.mark.parametrize("status", ["cancelled", "completed"])
async def test_finished_reservation_keeps_its_slot(status):
    repository = InMemoryRepository([make_reservation(status=status, appointment_time=time(10, 0))])

    slots = await get_available_slots(repository, BARBER_ID, DAY)

    assert len(slots) == 18
    assert "10:00:00" in slots


@pytest.mark.anyio
async def test_other_barbers_and_days_do_not_block():
    repository = InMemoryRepository([
        make_reservation(barber_id=OTHER_BARBER_ID, appointment_time=time(11, 0)),
        make_reservation(appointment_date=date(2025, 12, 26), appointment_time=time(12, 0)),
    ])

    slots = await get_available_slots(repository, BARBER_ID, DAY)

    assert len(slots) == 18


@pytest.mark.anyio
async def test_fully_booked_day_is_empty():
    repository = InMemoryRepository([make_reservation(appointment_time=slot) for slot in generate_time_slots()])

    assert await get_available_slots(repository, BARBER_ID, DAY) == []


@pytest.mark.anyio
async def test_availability_is_idempotent():
    repository = InMemoryRepository([make_reservation(appointment_time=time(14, 30))])

    first = await get_available_slots(repository, BARBER_ID, DAY)
    second = await get_available_slots(repository, BARBER_ID, DAY)

    assert first == second
