from datetime import time

import pytest

from app.api.schemas.appointment import AppointmentUpdate
from app.core.errors import NotFoundError, SlotUnavailableError, ValidationError
from app.repositories import appointment_repository
from app.services import appointment_service, whatsapp_service
from app.services.appointment_service import CSV_HEADER, render_csv
from factories import SLOT_DATE, SLOT_TIME, booking


async def test_book_confirms_and_returns_link(session):
    result = await appointment_service.book(session, booking())
    assert result.appointment.id is not None
    assert result.appointment.status == "confirmado"
    assert result.whatsapp_link.startswith("https://wa.me/5511987654321?text=")


async def test_book_stamps_whatsapp_sent(session, session_maker):
    result = await appointment_service.book(session, booking())
    async with session_maker() as fresh:
        stored = await appointment_repository.get_appointment(fresh, result.appointment.id)
    assert stored.whatsapp_sent is not None


async def test_book_round_trips_fields(session, session_maker):
    data = booking(serviceLocation="domicilio", address="Rua das Flores, 10", serviceType="premium")
    result = await appointment_service.book(session, data)
    async with session_maker() as fresh:
        stored = await appointment_repository.get_appointment(fresh, result.appointment.id)
    for field, value in data.model_dump().items():
        assert getattr(stored, field) == value, field


async def test_second_booking_for_same_slot_conflicts(session):
    await appointment_service.book(session, booking())
    with pytest.raises(SlotUnavailableError):
        await appointment_service.book(session, booking(name="Outra Pessoa", email="outra@example.com"))
    assert len(await appointment_repository.find_confirmed_in_slot(session, SLOT_DATE, SLOT_TIME)) == 1


async def test_unique_index_backstops_the_availability_check(session):
    values = booking().model_dump() | {"status": "confirmado"}
    await appointment_repository.create_appointment(session, values)
    await session.commit()
    # Simulates the losing side of two concurrent bookings that both saw the slot free.
    with pytest.raises(SlotUnavailableError):
        await appointment_repository.create_appointment(session, values)
    await session.rollback()


async def test_cancelled_booking_does_not_block_a_new_one(session):
    first = await appointment_service.book(session, booking())
    await appointment_service.update(session, first.appointment.id, AppointmentUpdate(status="cancelado"))
    await session.commit()
    second = await appointment_service.book(session, booking(name="Nova Cliente"))
    assert second.appointment.status == "confirmado"


async def test_link_failure_keeps_the_booking(session, session_maker, monkeypatch):
    def broken(*args, **kwargs):
        raise ValueError("boom")

    monkeypatch.setattr(whatsapp_service, "build_confirmation_link", broken)
    result = await appointment_service.book(session, booking())
    assert result.whatsapp_link is None
    async with session_maker() as fresh:
        stored = await appointment_repository.get_appointment(fresh, result.appointment.id)
    assert stored is not None
    assert stored.whatsapp_sent is None


async def test_update_applies_partial_fields(session):
    result = await appointment_service.book(session, booking())
    before = result.appointment.updated_at
    updated = await appointment_service.update(
        session, result.appointment.id, AppointmentUpdate(device_model="Galaxy S24", status="concluido")
    )
    assert updated.device_model == "Galaxy S24"
    assert updated.status == "concluido"
    assert updated.name == "Maria Silva"
    assert updated.updated_at >= before


async def test_update_missing_id_is_not_found(session):
    with pytest.raises(NotFoundError):
        await appointment_service.update(session, 999, AppointmentUpdate(status="cancelado"))


async def test_update_to_home_service_needs_address(session):
    result = await appointment_service.book(session, booking())
    with pytest.raises(ValidationError) as exc:
        await appointment_service.update(
            session, result.appointment.id, AppointmentUpdate(service_location="domicilio")
        )
    assert exc.value.errors[0]["field"] == "address"


async def test_update_onto_a_confirmed_slot_conflicts(session):
    await appointment_service.book(session, booking())
    other = await appointment_service.book(session, booking(appointmentTime="10:00", name="Outra"))
    with pytest.raises(SlotUnavailableError):
        await appointment_service.update(
            session, other.appointment.id, AppointmentUpdate(appointment_time=time(9, 0))
        )
    await session.rollback()


async def test_remove_twice_reports_not_found(session):
    result = await appointment_service.book(session, booking())
    assert await appointment_service.remove(session, result.appointment.id) is True
    with pytest.raises(NotFoundError):
        await appointment_service.remove(session, result.appointment.id)


async def test_export_is_newest_first(session):
    await appointment_service.book(session, booking(name="Primeira"))
    await appointment_service.book(session, booking(name="Segunda", appointmentTime="10:00"))
    rows = await appointment_service.export_all(session)
    assert [r[0] for r in rows] == ["Segunda", "Primeira"]
    assert rows[0][3:5] == ["2025-06-10", "10:00"]

    lines = render_csv(rows).splitlines()
    assert lines[0] == ",".join(CSV_HEADER)
    assert len(lines) == 3
