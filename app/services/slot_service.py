from datetime import date, time

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ValidationError
from app.models.appointment import SLOT_TIMES
from app.repositories import appointment_repository


def parse_date(value: str | None) -> date:
    if not value:
        raise ValidationError.for_field("date", "Data é obrigatória")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError.for_field("date", "Data inválida, use AAAA-MM-DD") from None


def parse_time(value: str | None) -> time:
    """Accepts HH:MM or HH:MM:SS; the result must be one of SLOT_TIMES."""
    if not value:
        raise ValidationError.for_field("time", "Horário é obrigatório")
    try:
        parsed = time.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError.for_field("time", "Horário inválido, use HH:MM") from None
    if parsed.tzinfo is not None or parsed.replace(second=0, microsecond=0) != parsed:
        raise ValidationError.for_field("time", "Horário inválido, use HH:MM")
    if parsed not in SLOT_TIMES:
        raise ValidationError.for_field("time", "Horário fora dos horários de atendimento")
    return parsed


async def check_availability(session: AsyncSession, slot_date: date, slot_time: time) -> bool:
    """A slot is free iff no confirmed appointment holds exactly this (date, time).

    Read-then-decide only; the partial unique index on confirmed slots is what
    stops two concurrent bookings that both saw the slot free.
    """
    taken = await appointment_repository.find_confirmed_in_slot(session, slot_date, slot_time)
    return not taken


async def get_day_availability(session: AsyncSession, d: date) -> list[tuple[time, bool]]:
    """Returns list of (slot_time, available) for every bookable slot of the day."""
    booked = await appointment_repository.confirmed_times_on(session, d)
    return [(t, t not in booked) for t in SLOT_TIMES]
