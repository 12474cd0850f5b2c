import datetime as dt

from pydantic import BaseModel
from sqlalchemy import or_, select
from sqlalchemy.sql import Select

from app.core.errors import ValidationError
from app.models.appointment import Appointment


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class AppointmentFilter(BaseModel):
    """Admin listing filters. Blank fields do not filter; the rest are ANDed."""

    search: str | None = None
    brand: str | None = None
    date: str | None = None
    status: str | None = None

    def _clean(self, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def parsed_date(self) -> dt.date | None:
        raw = self._clean(self.date)
        if raw is None:
            return None
        try:
            return dt.date.fromisoformat(raw)
        except ValueError:
            raise ValidationError.for_field("date", "Data inválida, use AAAA-MM-DD") from None

    def statement(self) -> Select:
        q = select(Appointment)
        search = self._clean(self.search)
        if search:
            pattern = _like_pattern(search)
            q = q.where(
                or_(
                    Appointment.name.ilike(pattern, escape="\\"),
                    Appointment.phone.ilike(pattern, escape="\\"),
                    Appointment.email.ilike(pattern, escape="\\"),
                )
            )
        brand = self._clean(self.brand)
        if brand:
            q = q.where(Appointment.device_brand == brand)
        day = self.parsed_date()
        if day:
            q = q.where(Appointment.appointment_date == day)
        status = self._clean(self.status)
        if status:
            q = q.where(Appointment.status == status)
        return q.order_by(Appointment.created_at.desc(), Appointment.id.desc())
