from datetime import date

import pytest
from fastapi.testclient import TestClient

import settings
from booking_schemas import ConfirmationPayload
from notifications.rendering import (
    format_date, format_price, render_email_html, render_receipt, render_receipt_pdf,
)
from notifications.service import app

PAYLOAD = {
    "bookingReference": "BK-ABCD1234",
    "customerEmail": "amina@example.com",
    "customerName": "Amina Benali",
    "tripName": "Omra Ramadan 15 jours",
    "departureDate": "2026-03-01",
    "returnDate": "2026-03-15",
    "totalPrice": 3150,
    "travelInsurance": True,
    "mealPreference": "halal",
}


@pytest.fixture
def client():
    return TestClient(app)


def test_accepts_booking_payload(client):
    resp = client.post("/send-booking-confirmation", json=PAYLOAD)
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "Confirmation email sent successfully",
        "bookingReference": "BK-ABCD1234",
    }


def test_malformed_payload_reports_error(client):
    resp = client.post("/send-booking-confirmation", json={"bookingReference": "BK-ABCD1234"})
    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert body["error"]


def test_bearer_key_enforced_when_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "NOTIFICATION_API_KEY", "secret")
    assert client.post("/send-booking-confirmation", json=PAYLOAD).status_code == 401
    resp = client.post("/send-booking-confirmation", json=PAYLOAD, headers={"Authorization": "Bearer secret"})
    assert resp.status_code == 200


def test_cors_preflight(client):
    resp = client.options(
        "/send-booking-confirmation",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


def test_formatting():
    assert format_price(3150) == "3 150,00 EUR"
    assert format_date(date(2026, 3, 1)) == "1 mars 2026"


def test_receipt_contents():
    data = ConfirmationPayload.model_validate(PAYLOAD)
    receipt = render_receipt(data, issued=date(2026, 1, 10))
    assert "RÉFÉRENCE DE RÉSERVATION: BK-ABCD1234" in receipt
    assert "Date d'émission: 10/01/2026" in receipt
    assert "Date de départ: 1 mars 2026" in receipt
    assert "Assurance voyage: Oui" in receipt
    assert "PRIX TOTAL: 3 150,00 EUR" in receipt


def test_email_escapes_customer_input():
    data = ConfirmationPayload.model_validate({**PAYLOAD, "customerName": "<script>x</script>"})
    body = render_email_html(data)
    assert "<script>" not in body
    assert "BK-ABCD1234" in body


def test_receipt_pdf():
    pdf = render_receipt_pdf(ConfirmationPayload.model_validate(PAYLOAD))
    assert pdf.startswith(b"%PDF")
