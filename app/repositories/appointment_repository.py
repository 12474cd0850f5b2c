"""Appointment persistence: every read and write against the appointments table goes through here."""

import logging
from datetime import UTC, date, datetime, time
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from app.core.errors import SlotUnavailableError, StorageError
from app.models.appointment import STATUS_CONFIRMED, Appointment

logger = logging.getLogger(__name__)


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


async def _flush(session: AsyncSession, on_conflict: type[Exception] | None = None) -> None:
    try:
        await session.flush()
    except IntegrityError as e:
        if on_conflict:
            raise on_conflict() from e
        logger.exception("Integrity error on appointments: %s", e)
        raise StorageError() from e
    except SQLAlchemyError as e:
        logger.exception("Appointment write failed: %s", e)
        raise StorageError() from e


async def _scalars(session: AsyncSession, statement: Select) -> list[Any]:
    try:
        result = await session.execute(statement)
    except SQLAlchemyError as e:
        logger.exception("Appointment query failed: %s", e)
        raise StorageError() from e
    return list(result.scalars().all())


async def create_appointment(session: AsyncSession, values: dict) -> Appointment:
    """Insert a booking. A confirmed row already holding the slot raises SlotUnavailableError."""
    now = _utc_naive_now()
    appointment = Appointment(**values, created_at=now, updated_at=now)
    session.add(appointment)
    await _flush(session, on_conflict=SlotUnavailableError)
    await session.refresh(appointment)
    return appointment


async def get_appointment(session: AsyncSession, appointment_id: int) -> Appointment | None:
    try:
        return await session.get(Appointment, appointment_id)
    except SQLAlchemyError as e:
        logger.exception("Appointment lookup failed: %s", e)
        raise StorageError() from e


async def get_appointments(session: AsyncSession, statement: Select) -> list[Appointment]:
    """Run a select built by app.services.filters."""
    return await _scalars(session, statement)


async def find_confirmed_in_slot(
    session: AsyncSession, slot_date: date, slot_time: time
) -> list[Appointment]:
    return await _scalars(
        session,
        select(Appointment).where(
            Appointment.appointment_date == slot_date,
            Appointment.appointment_time == slot_time,
            Appointment.status == STATUS_CONFIRMED,
        ),
    )


async def confirmed_times_on(session: AsyncSession, slot_date: date) -> set[time]:
    times = await _scalars(
        session,
        select(Appointment.appointment_time).where(
            Appointment.appointment_date == slot_date,
            Appointment.status == STATUS_CONFIRMED,
        ),
    )
    return set(times)


async def update_appointment(
    session: AsyncSession, appointment_id: int, changes: dict
) -> Appointment | None:
    """Apply a partial update. Returns None when the id does not exist."""
    appointment = await get_appointment(session, appointment_id)
    if not appointment:
        return None
    for key, value in changes.items():
        setattr(appointment, key, value)
    appointment.updated_at = _utc_naive_now()
    session.add(appointment)
    await _flush(session, on_conflict=SlotUnavailableError)
    return appointment


async def delete_appointment(session: AsyncSession, appointment_id: int) -> bool:
    appointment = await get_appointment(session, appointment_id)
    if not appointment:
        return False
    await session.delete(appointment)
    await _flush(session)
    return True


async def mark_notification_sent(session: AsyncSession, appointment_id: int) -> None:
    now = _utc_naive_now()
    try:
        await session.execute(
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .values(whatsapp_sent=now, updated_at=now)
        )
    except SQLAlchemyError as e:
        logger.exception("Could not stamp whatsapp_sent on appointment %s: %s", appointment_id, e)
        raise StorageError() from e
