from datetime import date, time
from urllib.parse import parse_qs, urlparse

import pytest

from app.models.appointment import Appointment
from app.services.whatsapp_service import (
    ConfirmationDetails,
    build_admin_contact_link,
    build_confirmation_link,
    format_confirmation_message,
    normalize_phone,
)

DETAILS = ConfirmationDetails(
    customer_name="Maria",
    service="premium",
    date=date(2025, 6, 10),
    time=time(9, 0),
    brand="Apple",
)


def test_normalize_phone_strips_formatting_and_adds_country_code():
    assert normalize_phone("(11) 98765-4321") == "5511987654321"


def test_normalize_phone_keeps_existing_country_code():
    assert normalize_phone("+55 11 98765-4321") == "5511987654321"


def test_normalize_phone_rejects_no_digits():
    with pytest.raises(ValueError):
        normalize_phone("sem telefone")


def test_confirmation_message_content():
    message = format_confirmation_message(DETAILS)
    assert "Olá Maria!" in message
    assert "10/06/2025" in message
    assert "09:00" in message
    assert "Blindagem Premium para Apple" in message


def test_confirmation_message_without_brand():
    message = format_confirmation_message(
        ConfirmationDetails(customer_name="Ana", service="basica", date=date(2025, 6, 10), time=time(14, 0))
    )
    assert "Blindagem Básica\n" in message
    assert " para " not in message


def test_confirmation_link_shape():
    link = build_confirmation_link("11 98765-4321", DETAILS)
    parsed = urlparse(link)
    assert parsed.scheme == "https"
    assert parsed.netloc == "wa.me"
    assert parsed.path == "/5511987654321"
    # The encoded text decodes back to the exact message.
    assert parse_qs(parsed.query)["text"] == [format_confirmation_message(DETAILS)]
    assert " " not in link and "\n" not in link


def test_admin_contact_link():
    appointment = Appointment(
        id=1,
        name="João",
        phone="11987654321",
        email="joao@example.com",
        appointment_date=date(2025, 6, 10),
        appointment_time=time(15, 0),
        device_brand="Xiaomi",
        device_model="Redmi Note 12",
        service_type="basica",
    )
    link = build_admin_contact_link(appointment)
    text = parse_qs(urlparse(link).query)["text"][0]
    assert link.startswith("https://wa.me/5511987654321?text=")
    assert text == "Olá João, confirmo seu agendamento para 10/06/2025 às 15:00. Global Tech."
