import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.api.schemas.appointment import (
    AppointmentAdminRow,
    AppointmentPublic,
    AppointmentUpdate,
    DeleteResponse,
)
from app.core.db import get_session
from app.models.admin_user import AdminUser
from app.models.appointment import Appointment
from app.services import appointment_service
from app.services.filters import AppointmentFilter
from app.services.whatsapp_service import build_admin_contact_link

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/appointments", tags=["admin appointments"])

EXPORT_FILENAME = "agendamentos.csv"


def _to_admin_row(a: Appointment) -> AppointmentAdminRow:
    public = AppointmentPublic.model_validate(a)
    return AppointmentAdminRow(**public.model_dump(), whatsapp_link=build_admin_contact_link(a))


@router.get("", response_model=list[AppointmentAdminRow])
async def list_appointments(
    search: str | None = Query(None),
    brand: str | None = Query(None),
    date: str | None = Query(None),
    status: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
    admin: AdminUser = Depends(require_admin),
) -> list[AppointmentAdminRow]:
    filters = AppointmentFilter(search=search, brand=brand, date=date, status=status)
    appointments = await appointment_service.list_appointments(session, filters)
    return [_to_admin_row(a) for a in appointments]


@router.get("/export")
async def export_appointments(
    session: AsyncSession = Depends(get_session),
    admin: AdminUser = Depends(require_admin),
) -> StreamingResponse:
    rows = await appointment_service.export_all(session)
    logger.info("CSV export by admin %s: %d appointment(s)", admin.username, len(rows))
    return StreamingResponse(
        iter([appointment_service.render_csv(rows)]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"',
            "Cache-Control": "no-cache",
        },
    )


@router.put("/{appointment_id}", response_model=AppointmentPublic)
async def update_appointment(
    appointment_id: int,
    body: AppointmentUpdate,
    session: AsyncSession = Depends(get_session),
    admin: AdminUser = Depends(require_admin),
) -> AppointmentPublic:
    appointment = await appointment_service.update(session, appointment_id, body)
    return AppointmentPublic.model_validate(appointment)


@router.delete("/{appointment_id}", response_model=DeleteResponse)
async def delete_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    admin: AdminUser = Depends(require_admin),
) -> DeleteResponse:
    await appointment_service.remove(session, appointment_id)
    logger.info("Appointment %s deleted by admin %s", appointment_id, admin.username)
    return DeleteResponse(message="Agendamento excluído com sucesso")
