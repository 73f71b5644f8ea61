import logging
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import urlparse

import stripe
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import config
from booking_errors import BookingNotFoundError, BookingValidationError, InvalidPricingError
from booking_schemas import BookingDraft, CamelModel
from logging_setup import configure_logging
from payments import checkout
from persistence import crud
from persistence.db import get_db, init_db
from pricing import calculate_price
from webhooks.webhooks import router as webhook_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    yield


app = FastAPI(title="Royal Transfers booking API", lifespan=lifespan)
app.include_router(webhook_router)


class SubmitBookingRequest(CamelModel):
    booking_data: BookingDraft
    locale: str = config.DEFAULT_LOCALE


class QuoteRequest(CamelModel):
    booking_data: BookingDraft
    distance_km: Optional[float] = None


# ---- error mapping ----

@app.exception_handler(BookingValidationError)
async def _validation_error(request: Request, exc: BookingValidationError):
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc), "errors": exc.to_dict()})


@app.exception_handler(InvalidPricingError)
async def _pricing_error(request: Request, exc: InvalidPricingError):
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


@app.exception_handler(BookingNotFoundError)
async def _not_found(request: Request, exc: BookingNotFoundError):
    return JSONResponse(status_code=404, content={"success": False, "error": "Booking not found"})


@app.exception_handler(stripe.StripeError)
async def _stripe_error(request: Request, exc: stripe.StripeError):
    logger.error("stripe error on %s: %s", request.url.path, exc)
    if isinstance(exc, stripe.InvalidRequestError) and "No such checkout.session" in str(exc):
        return JSONResponse(status_code=404, content={"success": False, "error": "Session not found or expired"})
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Payment provider unavailable. Please try again."},
    )


# ---- helpers ----

def safe_base_url(request: Request) -> str:
    """Configured APP_URL first, then a trustworthy Origin header, then the Host header."""
    if config.APP_URL:
        parsed = urlparse(config.APP_URL)
        if parsed.scheme and parsed.netloc:
            return f"{parsed.scheme}://{parsed.netloc}"

    origin = request.headers.get("origin")
    if origin:
        parsed = urlparse(origin)
        if parsed.scheme == "https" or parsed.hostname in ("localhost", "127.0.0.1"):
            return f"{parsed.scheme}://{parsed.netloc}"

    host = request.headers.get("host")
    if host:
        scheme = "http" if config.APP_ENV == "development" else "https"
        return f"{scheme}://{host}"
    return "http://localhost:3000"


# ---- routes ----

@app.post("/api/booking/quote")
async def quote(body: QuoteRequest):
    draft = body.booking_data
    distance = body.distance_km if body.distance_km is not None else draft.distance
    pricing = calculate_price(draft, distance)
    return {"success": True, "pricing": pricing.model_dump(by_alias=True)}


@app.post("/api/stripe/create-checkout-session")
async def create_checkout_session(body: SubmitBookingRequest, request: Request, db: Session = Depends(get_db)):
    result = checkout.create_checkout_session(db, body.booking_data, body.locale, safe_base_url(request))
    return {
        "success": True,
        "sessionId": result["session_id"],
        "url": result["url"],
        "bookingId": result["booking_id"],
    }


@app.post("/api/booking/create-cash-booking")
async def create_cash_booking(body: SubmitBookingRequest, request: Request, db: Session = Depends(get_db)):
    result = checkout.create_cash_booking(db, body.booking_data, body.locale, safe_base_url(request))
    return {"success": True, "bookingId": result["booking_id"], "redirectUrl": result["redirect_url"]}


@app.get("/api/booking/get-booking")
async def get_booking(booking_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    if not booking_id:
        return JSONResponse(status_code=400, content={"success": False, "error": "No booking_id provided"})
    record = crud.get_booking_by_id(db, booking_id)
    if record is None:
        raise BookingNotFoundError(booking_id)
    return {"success": True, "bookingDetails": checkout.booking_details(record)}


@app.get("/api/stripe/verify-session")
async def verify_session(session_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    if not session_id:
        return JSONResponse(status_code=400, content={"success": False, "error": "No session_id provided"})
    result = checkout.verify_checkout_session(db, session_id)
    return {"success": True, "paymentStatus": result["payment_status"], "bookingDetails": result["booking"]}
