from datetime import UTC, date, datetime, time

from sqlalchemy import Column, DateTime, Index, String, Time, text
from sqlmodel import Field, SQLModel

SLOT_TIMES: tuple[time, ...] = (
    time(9, 0),
    time(10, 0),
    time(11, 0),
    time(14, 0),
    time(15, 0),
    time(16, 0),
    time(17, 0),
)

SERVICE_TYPES = ("basica", "premium")
SERVICE_LOCATIONS = ("loja", "domicilio")
STATUSES = ("confirmado", "cancelado", "concluido")
STATUS_CONFIRMED = "confirmado"

# Open list: any non-empty brand is accepted; these are stored with this exact spelling.
DEVICE_BRANDS = ("Apple", "Samsung", "Motorola", "Xiaomi", "LG", "Huawei", "Outro")

SERVICE_LABELS = {
    "basica": "Blindagem Básica",
    "premium": "Blindagem Premium",
}


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    # At most one confirmed booking per slot; cancelled/completed rows do not occupy it.
    __table_args__ = (
        Index(
            "uq_appointments_confirmed_slot",
            "appointment_date",
            "appointment_time",
            unique=True,
            postgresql_where=text("status = 'confirmado'"),
            sqlite_where=text("status = 'confirmado'"),
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    phone: str = Field(max_length=20)
    email: str = Field(max_length=255)
    appointment_date: date = Field(index=True)
    appointment_time: time = Field(sa_column=Column(Time(), nullable=False))
    device_brand: str = Field(max_length=100)
    device_model: str = Field(max_length=100)
    service_type: str = Field(max_length=50)
    service_location: str = Field(default="loja", max_length=20)
    address: str | None = Field(default=None, max_length=500)
    status: str = Field(
        default=STATUS_CONFIRMED,
        sa_column=Column(String(50), nullable=False, server_default=STATUS_CONFIRMED, index=True),
    )
    whatsapp_sent: datetime | None = Field(default=None, sa_column=Column(DateTime(), nullable=True))
    created_at: datetime = Field(
        default_factory=_utc_naive_now, sa_column=Column(DateTime(), nullable=False, index=True)
    )
    updated_at: datetime = Field(default_factory=_utc_naive_now, sa_column=Column(DateTime(), nullable=False))
