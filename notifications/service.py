import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

import settings
from booking_schemas import ConfirmationPayload
from notifications.rendering import render_email_html, render_receipt, render_receipt_pdf

logger = logging.getLogger(__name__)

app = FastAPI(title="Booking confirmation service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Client-Info", "Apikey"],
)


def _authorized(request: Request) -> bool:
    # no key configured: accept everything (local dev)
    if not settings.NOTIFICATION_API_KEY:
        return True
    return request.headers.get("authorization") == f"Bearer {settings.NOTIFICATION_API_KEY}"


@app.post("/send-booking-confirmation")
async def send_booking_confirmation(request: Request):
    """
    Accepts the booking payload, renders the email body and the receipt,
    and hands them to delivery. Replies {success, message, bookingReference}
    or {success: false, error}.
    """
    if not _authorized(request):
        return JSONResponse(status_code=401, content={"success": False, "error": "Unauthorized"})

    try:
        data = ConfirmationPayload.model_validate(await request.json())
        receipt = render_receipt(data)
        html_body = render_email_html(data)
        pdf = render_receipt_pdf(data)
    except (ValueError, ValidationError) as exc:
        logger.error("Error processing booking confirmation: %s", exc)
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})

    logger.info("Booking confirmation email generated for: %s", data.customer_email)
    logger.info("Booking reference: %s", data.booking_reference)
    logger.debug("Receipt (%d chars), email (%d chars), pdf (%d bytes) generated",
                 len(receipt), len(html_body), len(pdf))

    return JSONResponse(content={
        "success": True,
        "message": "Confirmation email sent successfully",
        "bookingReference": data.booking_reference,
    })
