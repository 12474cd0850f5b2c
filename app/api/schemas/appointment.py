from datetime import date, datetime, time
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

from app.core.naming import api_alias
from app.models.appointment import DEVICE_BRANDS, SLOT_TIMES

ServiceType = Literal["basica", "premium"]
ServiceLocation = Literal["loja", "domicilio"]
Status = Literal["confirmado", "cancelado", "concluido"]

MIN_PHONE_DIGITS = 10


class CamelModel(BaseModel):
    """Accepts and emits the camelCase names from app.core.naming; snake_case also accepted."""

    model_config = ConfigDict(
        alias_generator=api_alias,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


def _check_phone(value: str) -> str:
    digits = "".join(ch for ch in value if ch.isdigit())
    if len(digits) < MIN_PHONE_DIGITS:
        raise ValueError(f"Telefone deve ter pelo menos {MIN_PHONE_DIGITS} dígitos")
    return value


_BRANDS_BY_KEY = {b.casefold(): b for b in DEVICE_BRANDS}


def _canonical_brand(value: str) -> str:
    """Known brands take their listed spelling so exact brand filters match; others pass through."""
    return _BRANDS_BY_KEY.get(value.casefold(), value)


def _check_slot(value: time) -> time:
    if value.tzinfo is not None or value not in SLOT_TIMES:
        allowed = ", ".join(t.strftime("%H:%M") for t in SLOT_TIMES)
        raise ValueError(f"Horário inválido. Horários disponíveis: {allowed}")
    return value


class AppointmentCreate(CamelModel):
    """Public booking form. Any status sent by the client is ignored."""

    name: str
    phone: str
    email: EmailStr
    appointment_date: date
    appointment_time: time
    device_brand: str
    device_model: str
    service_type: ServiceType
    service_location: ServiceLocation = "loja"
    address: str | None = Field(default=None, validate_default=True)

    @field_validator("name", "device_brand", "device_model")
    @classmethod
    def _required_text(cls, v: str) -> str:
        if not v:
            raise ValueError("Campo obrigatório")
        return v

    @field_validator("device_brand")
    @classmethod
    def _brand(cls, v: str) -> str:
        return _canonical_brand(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return _check_phone(v)

    @field_validator("appointment_time")
    @classmethod
    def _slot(cls, v: time) -> time:
        return _check_slot(v)

    @field_validator("address")
    @classmethod
    def _address_for_home_service(cls, v: str | None, info: ValidationInfo) -> str | None:
        # Required for home visits; dropped for in-store service.
        if info.data.get("service_location") != "domicilio":
            return None
        if not v:
            raise ValueError("Endereço é obrigatório para atendimento a domicílio")
        return v


# Columns that are NOT NULL in storage; an update may omit them but not null them.
_REQUIRED_ON_UPDATE = (
    "name",
    "phone",
    "email",
    "appointment_date",
    "appointment_time",
    "device_brand",
    "device_model",
    "service_type",
    "service_location",
    "status",
)


class AppointmentUpdate(CamelModel):
    """Partial admin edit. Only fields present in the request body are applied."""

    name: str | None = None
    phone: str | None = None
    email: EmailStr | None = None
    appointment_date: date | None = None
    appointment_time: time | None = None
    device_brand: str | None = None
    device_model: str | None = None
    service_type: ServiceType | None = None
    service_location: ServiceLocation | None = None
    address: str | None = None
    status: Status | None = None

    @field_validator("name", "device_brand", "device_model")
    @classmethod
    def _required_text(cls, v: str | None) -> str | None:
        if v is not None and not v:
            raise ValueError("Campo obrigatório")
        return v

    @field_validator("device_brand")
    @classmethod
    def _brand(cls, v: str | None) -> str | None:
        return _canonical_brand(v) if v else v

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        return _check_phone(v) if v is not None else v

    @field_validator("appointment_time")
    @classmethod
    def _slot(cls, v: time | None) -> time | None:
        return _check_slot(v) if v is not None else v

    @model_validator(mode="after")
    def _no_nulls(self) -> "AppointmentUpdate":
        for field in _REQUIRED_ON_UPDATE:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{api_alias(field)} não pode ser nulo")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class AppointmentPublic(CamelModel):
    id: int
    name: str
    phone: str
    email: str
    appointment_date: date
    appointment_time: time
    device_brand: str
    device_model: str
    service_type: str
    service_location: str
    address: str | None = None
    status: str
    whatsapp_sent: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("appointment_time")
    def _hh_mm(self, v: time) -> str:
        return v.strftime("%H:%M")


class AppointmentAdminRow(AppointmentPublic):
    """Admin listing row: the record plus a ready-made link to message the customer."""

    whatsapp_link: str


class BookingResponse(CamelModel):
    success: bool = True
    appointment: AppointmentPublic
    whatsapp_link: str | None = None
    message: str


class AvailabilityResponse(BaseModel):
    available: bool


class SlotInfo(BaseModel):
    time: str  # HH:MM
    available: bool


class DayAvailabilityResponse(BaseModel):
    date: str  # YYYY-MM-DD
    slots: list[SlotInfo]


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
