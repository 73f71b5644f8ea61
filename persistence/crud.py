import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from booking_errors import BookingNotFoundError
from booking_schemas import BookingDraft, PaymentMethod, PaymentStatus, BookingStatus
from .models import BookingModel

logger = logging.getLogger(__name__)


def save_booking(
    db: Session,
    booking_id: str,
    draft: BookingDraft,
    payment_method: PaymentMethod,
    payment_status: PaymentStatus = "pending",
    stripe_session_id: Optional[str] = None,
) -> BookingModel:
    """
    Persist a finalized booking. ``draft.pricing`` must already hold the
    server-computed breakdown.
    """
    pricing = draft.pricing
    vehicle = draft.selected_vehicle
    details = draft.passenger_details
    dropoff = draft.dropoff

    record = BookingModel(
        booking_id=booking_id,
        payment_method=payment_method,
        payment_status=payment_status,
        stripe_session_id=stripe_session_id,
        customer_first_name=details.first_name,
        customer_last_name=details.last_name,
        customer_email=details.email,
        customer_phone=details.phone,
        customer_country_code=details.country_code,
        service_type=draft.service_type,
        transfer_type=draft.transfer_type,
        pickup_address=draft.pickup.address,
        dropoff_address=dropoff.address if dropoff else "",
        pickup_date=draft.date_time.date,
        pickup_time=draft.date_time.time,
        return_date=draft.date_time.return_date,
        return_time=draft.date_time.return_time,
        pickup_lat=draft.pickup.lat,
        pickup_lng=draft.pickup.lng,
        dropoff_lat=dropoff.lat if dropoff else None,
        dropoff_lng=dropoff.lng if dropoff else None,
        distance_km=draft.distance,
        duration_minutes=round(draft.duration) if draft.duration else None,
        hourly_duration=draft.hourly_duration,
        vehicle_name=vehicle.name if vehicle and vehicle.name else "Unknown",
        vehicle_category=vehicle.category if vehicle else "standard",
        passengers_count=draft.passengers.count,
        luggage_count=draft.passengers.luggage,
        child_seats_count=draft.passengers.child_seats,
        base_price=pricing.base_price if pricing else 0.0,
        distance_charge=pricing.distance_charge if pricing else 0.0,
        time_charge=pricing.time_charge if pricing else 0.0,
        airport_fee=pricing.airport_fee if pricing else 0.0,
        child_seats_charge=pricing.child_seats_charge if pricing else 0.0,
        extras_charge=(pricing.extra_stops_charge + pricing.meet_and_greet_charge) if pricing else 0.0,
        tax=pricing.tax if pricing else 0.0,
        total_price=pricing.total if pricing else 0.0,
        currency=pricing.currency if pricing else "EUR",
        flight_number=details.flight_number,
        special_requests=details.special_requests or draft.extras.special_requests,
        booking_status="confirmed",
        booking_data=draft.model_dump(mode="json", by_alias=True),
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("booking %s saved (%s/%s)", booking_id, payment_method, payment_status)
    return record


def get_booking_by_id(db: Session, booking_id: str) -> Optional[BookingModel]:
    return db.query(BookingModel).filter(BookingModel.booking_id == booking_id).first()


def get_booking_by_stripe_session_id(db: Session, session_id: str) -> Optional[BookingModel]:
    return db.query(BookingModel).filter(BookingModel.stripe_session_id == session_id).first()


def update_booking_payment_status(
    db: Session,
    booking_id: str,
    payment_status: PaymentStatus,
    stripe_payment_intent_id: Optional[str] = None,
) -> BookingModel:
    record = get_booking_by_id(db, booking_id)
    if record is None:
        raise BookingNotFoundError(booking_id)
    record.payment_status = payment_status
    if stripe_payment_intent_id:
        record.stripe_payment_intent_id = stripe_payment_intent_id
    db.commit()
    db.refresh(record)
    logger.info("booking %s payment status -> %s", booking_id, payment_status)
    return record


def update_booking_status(db: Session, booking_id: str, booking_status: BookingStatus) -> BookingModel:
    record = get_booking_by_id(db, booking_id)
    if record is None:
        raise BookingNotFoundError(booking_id)
    record.booking_status = booking_status
    db.commit()
    db.refresh(record)
    logger.info("booking %s status -> %s", booking_id, booking_status)
    return record


def get_bookings_by_email(db: Session, email: str) -> List[BookingModel]:
    return (
        db.query(BookingModel)
        .filter(BookingModel.customer_email == email)
        .order_by(BookingModel.pickup_date.desc(), BookingModel.pickup_time.desc())
        .all()
    )


def list_bookings(db: Session) -> List[BookingModel]:
    return (
        db.query(BookingModel)
        .order_by(BookingModel.pickup_date.desc(), BookingModel.pickup_time.desc())
        .all()
    )


def record_to_draft(record: BookingModel) -> BookingDraft:
    """Rebuild the submitted draft (with its server pricing) from the JSON snapshot."""
    return BookingDraft.model_validate(record.booking_data or {})
