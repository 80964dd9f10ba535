import html
from datetime import date

from fpdf import FPDF

import settings
from booking_schemas import ConfirmationPayload

FRENCH_MONTHS = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]

RULE = "=" * 59
THIN_RULE = "-" * 59


def format_price(value: float) -> str:
    # fr-FR style: 3 150,00 EUR
    return f"{value:,.2f}".replace(",", " ").replace(".", ",") + " EUR"


def format_date(value: date) -> str:
    return f"{value.day} {FRENCH_MONTHS[value.month - 1]} {value.year}"


def render_receipt(data: ConfirmationPayload, issued: date = None) -> str:
    """Plain-text receipt, also used as the body of the PDF attachment."""
    issued = issued or date.today()
    return "\n".join([
        RULE,
        settings.AGENCY_NAME.upper().center(59),
        "Confirmation de Réservation".center(59),
        RULE,
        "",
        f"RÉFÉRENCE DE RÉSERVATION: {data.booking_reference}",
        f"Date d'émission: {issued.strftime('%d/%m/%Y')}",
        "",
        THIN_RULE,
        "INFORMATIONS CLIENT",
        THIN_RULE,
        f"Nom: {data.customer_name}",
        f"Email: {data.customer_email}",
        "",
        THIN_RULE,
        "DÉTAILS DU VOYAGE",
        THIN_RULE,
        f"Voyage: {data.trip_name}",
        f"Date de départ: {format_date(data.departure_date)}",
        f"Date de retour: {format_date(data.return_date)}",
        "",
        THIN_RULE,
        "OPTIONS",
        THIN_RULE,
        f"Préférence de repas: {data.meal_preference}",
        f"Assurance voyage: {'Oui' if data.travel_insurance else 'Non'}",
        "",
        THIN_RULE,
        f"PRIX TOTAL: {format_price(data.total_price)}",
        THIN_RULE,
        "",
        "CONDITIONS:",
        "- Veuillez conserver cette confirmation",
        "- Présentez-vous à l'aéroport 3h avant le départ",
        "- Votre passeport doit être valide au moins 6 mois",
        "",
        "CONTACT:",
        f"Tél: {settings.AGENCY_PHONE}",
        f"Email: {settings.AGENCY_EMAIL}",
        f"Adresse: {settings.AGENCY_ADDRESS}",
        "",
        RULE,
        f"Merci d'avoir choisi {settings.AGENCY_NAME}".center(59),
        RULE,
    ])


def render_email_html(data: ConfirmationPayload) -> str:
    insurance = "Oui" if data.travel_insurance else "Non"
    name = html.escape(data.customer_name)
    trip_name = html.escape(data.trip_name)
    meal = html.escape(data.meal_preference)
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #059669;">{settings.AGENCY_NAME}</h1>
    <p>Bonjour {name},</p>
    <p>Votre réservation est confirmée.</p>
    <div style="border: 2px solid #059669; padding: 15px; text-align: center;">
      Référence: <strong>{data.booking_reference}</strong>
    </div>
    <h3>Détails du voyage</h3>
    <p>
      Voyage: {trip_name}<br>
      Départ: {format_date(data.departure_date)}<br>
      Retour: {format_date(data.return_date)}
    </p>
    <h3>Options</h3>
    <p>
      Préférence de repas: {meal}<br>
      Assurance voyage: {insurance}
    </p>
    <p style="font-size: 24px; font-weight: bold; color: #059669;">Prix Total: {format_price(data.total_price)}</p>
    <p style="color: #9ca3af;">
      {settings.AGENCY_PHONE}<br>
      {settings.AGENCY_EMAIL}<br>
      {settings.AGENCY_ADDRESS}
    </p>
  </div>
</body>
</html>
"""


def render_receipt_pdf(data: ConfirmationPayload) -> bytes:
    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", size=10)
    # core fonts are latin-1 only
    text = render_receipt(data).encode("latin-1", "replace").decode("latin-1")
    pdf.multi_cell(0, 5, text)
    return bytes(pdf.output())
