import logging
import os

from dotenv import load_dotenv

# Values come from the process environment, optionally seeded by a local .env file
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./booking.db")

# Confirmation collaborator (HTTP endpoint that renders and sends the email)
NOTIFICATION_URL = os.getenv("NOTIFICATION_URL", "http://localhost:8000/send-booking-confirmation")
NOTIFICATION_API_KEY = os.getenv("NOTIFICATION_API_KEY", "")
NOTIFICATION_TIMEOUT = float(os.getenv("NOTIFICATION_TIMEOUT", "10"))
NOTIFICATION_MAX_ATTEMPTS = int(os.getenv("NOTIFICATION_MAX_ATTEMPTS", "5"))

AGENCY_NAME = os.getenv("AGENCY_NAME", "Al-Barakah Voyages")
AGENCY_PHONE = os.getenv("AGENCY_PHONE", "+33 1 23 45 67 89")
AGENCY_EMAIL = os.getenv("AGENCY_EMAIL", "contact@albarakah-voyages.fr")
AGENCY_ADDRESS = os.getenv("AGENCY_ADDRESS", "123 Avenue de la République, 75011 Paris")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level: str = None):
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
