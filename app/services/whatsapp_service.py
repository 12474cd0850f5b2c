"""WhatsApp deep links (wa.me) with a pre-filled message.

Nothing here talks to WhatsApp: the link is handed to the customer or the
admin, who opens it in their own app.
"""

import re
from dataclasses import dataclass
from datetime import date, time
from urllib.parse import quote

from app.core.config import settings
from app.models.appointment import SERVICE_LABELS, Appointment

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class ConfirmationDetails:
    customer_name: str
    service: str
    date: date
    time: time
    brand: str | None = None


def normalize_phone(phone: str, country_code: str | None = None) -> str:
    """Digits only, with the country calling code prefixed when missing."""
    country_code = country_code or settings.whatsapp_country_code
    digits = _NON_DIGITS.sub("", phone or "")
    if not digits:
        raise ValueError("Telefone sem dígitos")
    if digits.startswith(country_code):
        return digits
    return f"{country_code}{digits}"


def build_link(phone: str, message: str) -> str:
    base = settings.whatsapp_base_url.rstrip("/")
    return f"{base}/{normalize_phone(phone)}?text={quote(message, safe='')}"


def format_confirmation_message(details: ConfirmationDetails) -> str:
    service = SERVICE_LABELS.get(details.service, details.service)
    brand_text = f" para {details.brand}" if details.brand else ""
    return (
        "🔧 *CONFIRMAÇÃO DE AGENDAMENTO* 🔧\n\n"
        f"Olá {details.customer_name}!\n\n"
        "Seu agendamento foi confirmado com sucesso:\n\n"
        f"📅 *Data:* {details.date.strftime('%d/%m/%Y')}\n"
        f"⏰ *Horário:* {details.time.strftime('%H:%M')}\n"
        f"🛠️ *Serviço:* {service}{brand_text}\n\n"
        "Em caso de dúvidas ou necessidade de reagendamento, entre em contato conosco.\n\n"
        f"Obrigado pela preferência! {settings.business_name} 💙"
    )


def build_confirmation_link(phone: str, details: ConfirmationDetails) -> str:
    return build_link(phone, format_confirmation_message(details))


def build_admin_contact_link(appointment: Appointment) -> str:
    """Short message the admin sends from the dashboard to reach a customer."""
    message = (
        f"Olá {appointment.name}, confirmo seu agendamento para "
        f"{appointment.appointment_date.strftime('%d/%m/%Y')} às "
        f"{appointment.appointment_time.strftime('%H:%M')}. {settings.business_name}."
    )
    return build_link(appointment.phone, message)
