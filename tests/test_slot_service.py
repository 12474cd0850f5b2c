from datetime import time

import pytest

from app.api.schemas.appointment import AppointmentUpdate
from app.core.errors import ValidationError
from app.services import appointment_service, slot_service
from factories import SLOT_DATE, SLOT_TIME, booking


@pytest.mark.parametrize("value", [None, "", "2025-13-01", "10/06/2025", "amanhã"])
def test_parse_date_rejects_missing_or_malformed(value):
    with pytest.raises(ValidationError) as exc:
        slot_service.parse_date(value)
    assert exc.value.errors[0]["field"] == "date"


@pytest.mark.parametrize("value", [None, "", "9h", "25:00", "09:30", "12:00", "09:00:30"])
def test_parse_time_rejects_missing_malformed_or_off_grid(value):
    with pytest.raises(ValidationError) as exc:
        slot_service.parse_time(value)
    assert exc.value.errors[0]["field"] == "time"


def test_parse_time_accepts_seconds_form():
    assert slot_service.parse_time("14:00:00") == time(14, 0)


async def test_free_slot_is_available(session):
    assert await slot_service.check_availability(session, SLOT_DATE, SLOT_TIME) is True


async def test_confirmed_booking_takes_the_slot(session):
    await appointment_service.book(session, booking())
    assert await slot_service.check_availability(session, SLOT_DATE, SLOT_TIME) is False
    # Same day, other time is untouched.
    assert await slot_service.check_availability(session, SLOT_DATE, time(10, 0)) is True


async def test_cancelling_frees_the_slot(session):
    result = await appointment_service.book(session, booking())
    await appointment_service.update(
        session, result.appointment.id, AppointmentUpdate(status="cancelado")
    )
    assert await slot_service.check_availability(session, SLOT_DATE, SLOT_TIME) is True


async def test_day_availability_lists_every_slot(session):
    await appointment_service.book(session, booking(appointmentTime="14:00"))
    slots = await slot_service.get_day_availability(session, SLOT_DATE)
    assert [t.strftime("%H:%M") for t, _ in slots] == [
        "09:00", "10:00", "11:00", "14:00", "15:00", "16:00", "17:00"
    ]
    assert dict(slots)[time(14, 0)] is False
    assert all(avail for t, avail in slots if t != time(14, 0))
