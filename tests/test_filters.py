import pytest

from app.api.schemas.appointment import AppointmentUpdate
from app.core.errors import ValidationError
from app.services import appointment_service
from app.services.filters import AppointmentFilter
from factories import booking


@pytest.fixture
async def seeded(session):
    await appointment_service.book(session, booking(name="Maria Souza", email="ms@example.com"))
    await appointment_service.book(
        session,
        booking(
            name="Carlos Lima",
            email="MARIA.lima@example.com",
            phone="(21) 91111-2222",
            deviceBrand="Apple",
            appointmentTime="10:00",
        ),
    )
    third = await appointment_service.book(
        session,
        booking(
            name="Ana Costa",
            email="ana@example.com",
            phone="(31) 93333-4444",
            appointmentDate="2025-06-11",
        ),
    )
    await appointment_service.update(session, third.appointment.id, AppointmentUpdate(status="cancelado"))
    await session.commit()
    return session


async def _names(session, **filters) -> list[str]:
    appointments = await appointment_service.list_appointments(session, AppointmentFilter(**filters))
    return [a.name for a in appointments]


async def test_no_filters_returns_everything_newest_first(seeded):
    assert await _names(seeded) == ["Ana Costa", "Carlos Lima", "Maria Souza"]


async def test_search_is_case_insensitive_across_name_phone_email(seeded):
    assert await _names(seeded, search="maria") == ["Carlos Lima", "Maria Souza"]
    assert await _names(seeded, search="93333") == ["Ana Costa"]


async def test_search_treats_wildcards_literally(seeded):
    assert await _names(seeded, search="%") == []


async def test_exact_filters_are_anded(seeded):
    assert await _names(seeded, brand="Apple") == ["Carlos Lima"]
    assert await _names(seeded, date="2025-06-11") == ["Ana Costa"]
    assert await _names(seeded, status="cancelado") == ["Ana Costa"]
    assert await _names(seeded, search="maria", brand="Samsung") == ["Maria Souza"]


async def test_blank_filters_are_ignored(seeded):
    assert len(await _names(seeded, search="  ", brand="", status=None)) == 3


def test_malformed_date_filter_is_rejected():
    with pytest.raises(ValidationError):
        AppointmentFilter(date="ontem").statement()


async def test_brand_filter_matches_lowercase_booking(session):
    await appointment_service.book(session, booking(deviceBrand="apple"))
    assert await _names(session, brand="Apple") == ["Maria Silva"]
