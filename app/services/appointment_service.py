import csv
import logging
from dataclasses import dataclass
from io import StringIO

from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas.appointment import AppointmentCreate, AppointmentUpdate
from app.core.errors import NotFoundError, SlotUnavailableError, StorageError, ValidationError
from app.models.appointment import STATUS_CONFIRMED, Appointment
from app.repositories import appointment_repository
from app.services import whatsapp_service
from app.services.filters import AppointmentFilter
from app.services.slot_service import check_availability

logger = logging.getLogger(__name__)

CSV_HEADER = ["Name", "Phone", "Email", "Date", "Time", "Brand", "Model", "Service", "Status", "CreatedAt"]


@dataclass
class BookingResult:
    appointment: Appointment
    # None when the link step failed; the booking itself still stands.
    whatsapp_link: str | None


async def _send_confirmation(session: AsyncSession, appointment: Appointment) -> str | None:
    """Build the customer's confirmation link and stamp whatsapp_sent. Never raises."""
    try:
        link = whatsapp_service.build_confirmation_link(
            appointment.phone,
            whatsapp_service.ConfirmationDetails(
                customer_name=appointment.name,
                service=appointment.service_type,
                date=appointment.appointment_date,
                time=appointment.appointment_time,
                brand=appointment.device_brand,
            ),
        )
    except ValueError as e:
        logger.warning("WhatsApp link not generated for appointment %s: %s", appointment.id, e)
        return None
    try:
        await appointment_repository.mark_notification_sent(session, appointment.id)
        await session.commit()
    except StorageError:
        # Keep the committed booking usable for the response after rolling back the stamp.
        session.expunge(appointment)
        await session.rollback()
        return link
    logger.info("WhatsApp confirmation link generated for appointment %s", appointment.id)
    return link


async def book(session: AsyncSession, data: AppointmentCreate) -> BookingResult:
    """Public booking. The slot must be free; status is always 'confirmado'."""
    if not await check_availability(session, data.appointment_date, data.appointment_time):
        raise SlotUnavailableError()
    values = data.model_dump()
    values["status"] = STATUS_CONFIRMED
    appointment = await appointment_repository.create_appointment(session, values)
    # Commit before the notification step so a failure there cannot undo the booking.
    await session.commit()
    logger.info(
        "Appointment %s booked for %s %s",
        appointment.id,
        appointment.appointment_date,
        appointment.appointment_time.strftime("%H:%M"),
    )
    link = await _send_confirmation(session, appointment)
    return BookingResult(appointment=appointment, whatsapp_link=link)


async def list_appointments(session: AsyncSession, filters: AppointmentFilter) -> list[Appointment]:
    return await appointment_repository.get_appointments(session, filters.statement())


async def get(session: AsyncSession, appointment_id: int) -> Appointment:
    appointment = await appointment_repository.get_appointment(session, appointment_id)
    if not appointment:
        raise NotFoundError()
    return appointment


async def update(session: AsyncSession, appointment_id: int, data: AppointmentUpdate) -> Appointment:
    """Partial admin edit. Availability is not re-checked here; the confirmed-slot
    index still rejects an edit that would put two confirmed bookings in one slot."""
    changes = data.changes()
    current = await get(session, appointment_id)

    location = changes.get("service_location", current.service_location)
    if location == "domicilio":
        address = changes.get("address", current.address)
        if not address:
            raise ValidationError.for_field(
                "address", "Endereço é obrigatório para atendimento a domicílio"
            )
    elif "service_location" in changes or "address" in changes:
        changes["address"] = None

    appointment = await appointment_repository.update_appointment(session, appointment_id, changes)
    if not appointment:
        raise NotFoundError()
    logger.info("Appointment %s updated: %s", appointment_id, sorted(changes))
    return appointment


async def remove(session: AsyncSession, appointment_id: int) -> bool:
    deleted = await appointment_repository.delete_appointment(session, appointment_id)
    if not deleted:
        raise NotFoundError()
    logger.info("Appointment %s deleted", appointment_id)
    return True


async def export_all(session: AsyncSession) -> list[list[str]]:
    """Every appointment, newest first, one flat row per appointment (CSV_HEADER order)."""
    appointments = await list_appointments(session, AppointmentFilter())
    return [
        [
            a.name,
            a.phone,
            a.email,
            a.appointment_date.isoformat(),
            a.appointment_time.strftime("%H:%M"),
            a.device_brand,
            a.device_model,
            a.service_type,
            a.status,
            a.created_at.strftime("%Y-%m-%d %H:%M:%S") if a.created_at else "",
        ]
        for a in appointments
    ]


def render_csv(rows: list[list[str]]) -> str:
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)
    writer.writerows(rows)
    return output.getvalue()
