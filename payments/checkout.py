import logging
import time

import stripe
from sqlalchemy.exc import SQLAlchemyError

import config
from booking_errors import BookingNotFoundError, BookingValidationError, FieldError, InvalidPricingError
from booking_schemas import BookingDraft
from booking_tools import generate_booking_id
from fleet import get_vehicle
from persistence import crud
from pricing import calculate_price, euros_to_cents, is_priceable
from validation import validate_booking

logger = logging.getLogger(__name__)

stripe.api_key = config.STRIPE_API_KEY

CURRENCY = "eur"

# Stripe Checkout UI locales we pass through; anything else -> "auto"
STRIPE_LOCALES = {"en", "es", "de", "it", "fr", "pt", "nl"}

CHECKOUT_COMPLETED = "checkout.session.completed"
CHECKOUT_EXPIRED = "checkout.session.expired"
PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"


def map_locale_to_stripe(locale: str) -> str:
    return locale if locale in STRIPE_LOCALES else "auto"


def safe_locale(locale: str) -> str:
    return locale if locale in config.SUPPORTED_LOCALES else config.DEFAULT_LOCALE


def catalog_vehicle(draft: BookingDraft):
    """The fleet entry for the submitted vehicle id; submitted rates are ignored."""
    submitted = draft.selected_vehicle
    vehicle = get_vehicle(submitted.id) if submitted else None
    if vehicle is None:
        raise BookingValidationError([FieldError("selectedVehicle", "Unknown vehicle")])
    return vehicle


def reprice_booking(draft: BookingDraft) -> BookingDraft:
    """
    Validate a submitted draft and replace its vehicle and pricing with the
    catalog entry and a server-side recomputation. Client-submitted figures
    are discarded.
    Raises BookingValidationError or InvalidPricingError.
    """
    validate_booking(draft)
    draft = draft.model_copy(update={"selected_vehicle": catalog_vehicle(draft)})
    pricing = calculate_price(draft, draft.distance)
    if not is_priceable(pricing):
        raise InvalidPricingError("Invalid pricing calculation")
    if draft.pricing is not None and abs(draft.pricing.total - pricing.total) > 0.01:
        logger.warning(
            "client total %.2f differs from server total %.2f, using server price",
            draft.pricing.total, pricing.total,
        )
    return draft.model_copy(update={"pricing": pricing})


def build_product_name(draft: BookingDraft) -> str:
    pickup = draft.pickup.address or "Pickup"
    if draft.service_type == "distance":
        dropoff = (draft.dropoff.address if draft.dropoff else "") or "Dropoff"
        return f"Transfer Service: {pickup} → {dropoff}"
    return f"Hourly Service: {pickup}"


def build_service_description(draft: BookingDraft) -> str:
    parts = []
    if draft.selected_vehicle:
        parts.append(f"Vehicle: {draft.selected_vehicle.name}")
    parts.append(f"Date: {draft.date_time.date} at {draft.date_time.time}")
    parts.append(f"Passengers: {draft.passengers.count}")
    if draft.passengers.luggage > 0:
        parts.append(f"Luggage: {draft.passengers.luggage}")
    if draft.service_type == "hourly" and draft.hourly_duration:
        parts.append(f"Duration: {draft.hourly_duration:g} h")
    if draft.distance is not None:
        parts.append(f"Distance: {draft.distance:.1f} km")
    if draft.passenger_details.flight_number:
        parts.append(f"Flight: {draft.passenger_details.flight_number}")
    return " | ".join(parts)


def build_metadata(draft: BookingDraft, booking_id: str) -> dict:
    """Flat string map attached to the Stripe session (Stripe metadata values are strings)."""
    details = draft.passenger_details
    return {
        "bookingId": booking_id,
        "customerName": f"{details.first_name} {details.last_name}",
        "customerEmail": details.email,
        "customerPhone": f"{details.country_code}{details.phone}",
        "serviceType": draft.service_type or "",
        "pickupAddress": draft.pickup.address,
        "dropoffAddress": draft.dropoff.address if draft.dropoff else "",
        "pickupDate": draft.date_time.date,
        "pickupTime": draft.date_time.time,
        "vehicleName": draft.selected_vehicle.name if draft.selected_vehicle else "Unknown",
        "passengers": str(draft.passengers.count),
        "luggage": str(draft.passengers.luggage),
        "flightNumber": details.flight_number or "",
        "totalPrice": f"{draft.pricing.total:.2f}" if draft.pricing else "0",
        "currency": draft.pricing.currency if draft.pricing else "EUR",
        "environment": config.APP_ENV,
    }


def create_checkout_session(db, draft: BookingDraft, locale: str, base_url: str) -> dict:
    """
    Re-price the booking, create a Stripe Checkout Session for it and store the
    booking as card/pending. Returns {session_id, url, booking_id}.
    """
    priced = reprice_booking(draft)
    booking_id = generate_booking_id()
    url_locale = safe_locale(locale)

    session = stripe.checkout.Session.create(
        payment_method_types=["card"],
        mode="payment",
        line_items=[{
            "price_data": {
                "currency": CURRENCY,
                "product_data": {
                    "name": build_product_name(priced),
                    "description": build_service_description(priced),
                },
                # Stripe expects unit_amount in cents
                "unit_amount": euros_to_cents(priced.pricing.total),
            },
            "quantity": 1,
        }],
        success_url=f"{base_url}/{url_locale}/book/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{base_url}/{url_locale}/book?step=3&cancelled=true",
        customer_email=priced.passenger_details.email,
        billing_address_collection="auto",
        customer_creation="if_required",
        locale=map_locale_to_stripe(locale),
        expires_at=int(time.time()) + config.CHECKOUT_EXPIRES_AFTER,
        metadata=build_metadata(priced, booking_id),
        phone_number_collection={"enabled": True},
    )
    logger.info("stripe session %s created for booking %s", session["id"], booking_id)

    try:
        crud.save_booking(
            db, booking_id, priced.model_copy(update={"payment_method": "card"}),
            payment_method="card", payment_status="pending", stripe_session_id=session["id"],
        )
    except SQLAlchemyError:
        # the customer can still pay; the webhook will find nothing to mark paid
        db.rollback()
        logger.exception("failed to save booking %s for session %s", booking_id, session["id"])

    return {"session_id": session["id"], "url": session["url"], "booking_id": booking_id}


def create_cash_booking(db, draft: BookingDraft, locale: str, base_url: str) -> dict:
    """
    Re-price and store a pay-the-driver booking. Returns {booking_id, redirect_url}.
    """
    priced = reprice_booking(draft)
    booking_id = generate_booking_id()
    crud.save_booking(
        db, booking_id, priced.model_copy(update={"payment_method": "cash"}),
        payment_method="cash", payment_status="pending",
    )
    redirect_url = f"{base_url}/{safe_locale(locale)}/book/success?payment=cash&booking_id={booking_id}"
    return {"booking_id": booking_id, "redirect_url": redirect_url}


def booking_details(record) -> dict:
    """Success-page projection of a stored booking."""
    return {
        "bookingId": record.booking_id,
        "customerName": f"{record.customer_first_name} {record.customer_last_name}",
        "customerEmail": record.customer_email,
        "customerPhone": f"{record.customer_country_code} {record.customer_phone}",
        "serviceType": record.service_type,
        "pickupAddress": record.pickup_address,
        "dropoffAddress": record.dropoff_address,
        "pickupDate": record.pickup_date,
        "pickupTime": record.pickup_time,
        "vehicleName": record.vehicle_name,
        "passengers": record.passengers_count,
        "luggage": record.luggage_count,
        "flightNumber": record.flight_number or None,
        "totalPrice": float(record.total_price or 0),
        "currency": record.currency,
    }


def verify_checkout_session(db, session_id: str) -> dict:
    """
    Look up a Checkout Session after the Stripe redirect.
    Returns {payment_status: paid|unpaid|processing, booking: <details>}.
    """
    if not session_id or not session_id.startswith("cs_"):
        raise BookingValidationError([FieldError("session_id", "Invalid session_id format")])

    session = stripe.checkout.Session.retrieve(session_id, expand=["payment_intent"])
    record = crud.get_booking_by_stripe_session_id(db, session_id)
    if record is None:
        raise BookingNotFoundError(session_id)

    status = session.get("payment_status")
    if status in ("paid", "no_payment_required"):
        payment_status = "paid"
    elif status == "unpaid":
        payment_status = "unpaid"
    else:
        payment_status = "processing"
    return {"payment_status": payment_status, "booking": booking_details(record)}


def handle_checkout_completed(db, session: dict) -> dict:
    record = crud.get_booking_by_stripe_session_id(db, session.get("id"))
    if record is None:
        logger.error("no booking for completed session %s", session.get("id"))
        return {"error": "booking not found"}

    if session.get("payment_status") != "paid":
        logger.warning("session %s completed but payment status is %s",
                       session.get("id"), session.get("payment_status"))
        return {"status": record.payment_status}

    payment_intent = session.get("payment_intent")
    if isinstance(payment_intent, dict):
        payment_intent = payment_intent.get("id")
    crud.update_booking_payment_status(db, record.booking_id, "paid", payment_intent)
    return {"status": "paid", "booking_id": record.booking_id}


def handle_checkout_expired(db, session: dict) -> dict:
    record = crud.get_booking_by_stripe_session_id(db, session.get("id"))
    if record is not None and record.payment_status == "pending":
        logger.warning("booking %s still pending for expired session %s", record.booking_id, session.get("id"))
        return {"status": "pending", "booking_id": record.booking_id}
    return {}


def handle_stripe_event(db, event) -> dict:
    """Dispatch a verified Stripe event. Unknown event types are acknowledged and ignored."""
    event_type = event["type"]
    obj = event["data"]["object"]

    if event_type == CHECKOUT_COMPLETED:
        return handle_checkout_completed(db, obj)
    if event_type == CHECKOUT_EXPIRED:
        return handle_checkout_expired(db, obj)
    if event_type == PAYMENT_SUCCEEDED:
        logger.info("payment intent %s succeeded", obj.get("id"))
        return {}
    if event_type == PAYMENT_FAILED:
        error = obj.get("last_payment_error") or {}
        logger.warning("payment intent %s failed: %s", obj.get("id"), error.get("message"))
        return {}

    logger.info("unhandled stripe event type %s", event_type)
    return {}
