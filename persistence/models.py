from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, JSON, String, Text

from .db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class BookingModel(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(String(64), unique=True, index=True, nullable=False)
    payment_method = Column(String(8), nullable=False)            # card | cash
    payment_status = Column(String(16), default="pending")        # paid | pending | cancelled | refunded
    stripe_session_id = Column(String, unique=True, index=True, nullable=True)
    stripe_payment_intent_id = Column(String, nullable=True)

    customer_first_name = Column(String(128))
    customer_last_name = Column(String(128))
    customer_email = Column(String(256), index=True)
    customer_phone = Column(String(32))
    customer_country_code = Column(String(8))

    service_type = Column(String(16))
    transfer_type = Column(String(16))
    pickup_address = Column(Text)
    dropoff_address = Column(Text, default="")
    pickup_date = Column(String(10))                             # YYYY-MM-DD
    pickup_time = Column(String(8))                              # HH:MM
    return_date = Column(String(10), nullable=True)
    return_time = Column(String(8), nullable=True)
    pickup_lat = Column(Float, nullable=True)
    pickup_lng = Column(Float, nullable=True)
    dropoff_lat = Column(Float, nullable=True)
    dropoff_lng = Column(Float, nullable=True)
    distance_km = Column(Float, nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    hourly_duration = Column(Float, nullable=True)

    vehicle_name = Column(String(128))
    vehicle_category = Column(String(32))
    passengers_count = Column(Integer)
    luggage_count = Column(Integer)
    child_seats_count = Column(Integer)

    base_price = Column(Float, default=0.0)
    distance_charge = Column(Float, default=0.0)
    time_charge = Column(Float, default=0.0)
    airport_fee = Column(Float, default=0.0)
    child_seats_charge = Column(Float, default=0.0)
    extras_charge = Column(Float, default=0.0)
    tax = Column(Float, default=0.0)
    total_price = Column(Float)
    currency = Column(String(8), default="EUR")

    flight_number = Column(String(16), nullable=True)
    special_requests = Column(Text, nullable=True)
    booking_status = Column(String(16), default="confirmed")     # confirmed | in_progress | completed | cancelled

    # full draft + server-computed pricing, as submitted
    booking_data = Column(JSON, default={})

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
