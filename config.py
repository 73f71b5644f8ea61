import os

from dotenv import load_dotenv

# Reads .env from the working directory; real environment variables win.
load_dotenv()

APP_ENV = os.getenv("APP_ENV", "development")
APP_URL = os.getenv("APP_URL", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./booking.db")

STRIPE_API_KEY = os.getenv("STRIPE_API_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
# Checkout sessions expire after 30 minutes unless overridden (seconds)
CHECKOUT_EXPIRES_AFTER = int(os.getenv("CHECKOUT_EXPIRES_AFTER", "1800"))

GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY")
DISTANCE_MATRIX_URL = os.getenv(
    "DISTANCE_MATRIX_URL", "https://maps.googleapis.com/maps/api/distancematrix/json"
)
DISTANCE_TIMEOUT_SECONDS = float(os.getenv("DISTANCE_TIMEOUT_SECONDS", "10"))

SUPPORTED_LOCALES = ("en", "es", "de", "it", "fr", "pt", "nl")
DEFAULT_LOCALE = "en"
