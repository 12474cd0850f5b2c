from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas.appointment import (
    AppointmentCreate,
    AppointmentPublic,
    AvailabilityResponse,
    BookingResponse,
    DayAvailabilityResponse,
    SlotInfo,
)
from app.core.db import get_session
from app.services import appointment_service, slot_service

router = APIRouter(prefix="/appointments", tags=["appointments"])

BOOKED_MESSAGE = "Agendamento criado com sucesso! Você receberá uma confirmação via WhatsApp em breve."


@router.post("", response_model=BookingResponse)
async def book_appointment(
    body: AppointmentCreate,
    session: AsyncSession = Depends(get_session),
) -> BookingResponse:
    result = await appointment_service.book(session, body)
    return BookingResponse(
        appointment=AppointmentPublic.model_validate(result.appointment),
        whatsapp_link=result.whatsapp_link,
        message=BOOKED_MESSAGE,
    )


@router.get("/check-availability", response_model=AvailabilityResponse)
async def check_availability(
    date_param: str | None = Query(None, alias="date"),
    time_param: str | None = Query(None, alias="time"),
    session: AsyncSession = Depends(get_session),
) -> AvailabilityResponse:
    slot_date = slot_service.parse_date(date_param)
    slot_time = slot_service.parse_time(time_param)
    available = await slot_service.check_availability(session, slot_date, slot_time)
    return AvailabilityResponse(available=available)


@router.get("/availability", response_model=DayAvailabilityResponse)
async def day_availability(
    date_param: str | None = Query(None, alias="date"),
    session: AsyncSession = Depends(get_session),
) -> DayAvailabilityResponse:
    """Every bookable slot of the day with its availability."""
    d = slot_service.parse_date(date_param)
    slots = await slot_service.get_day_availability(session, d)
    return DayAvailabilityResponse(
        date=d.isoformat(),
        slots=[SlotInfo(time=t.strftime("%H:%M"), available=avail) for t, avail in slots],
    )
