"""
Pricing engine.

calculate_price() is the single rule implementation used for the on-screen
estimate and for the authoritative server-side re-pricing before payment.
A breakdown with total == 0 means "not priceable yet" (no vehicle selected),
never a free ride.
"""

import logging
from typing import Optional

from booking_schemas import BookingDraft, Location, PriceBreakdown
from fleet import PRICING_RULES, PricingRules

logger = logging.getLogger(__name__)

# Free-text hints for Barcelona-El Prat. Locale specific and heuristic.
AIRPORT_HINTS = ("airport", "bcn", "el prat")


def is_airport_location(location: Optional[Location]) -> bool:
    if location is None or not location.address:
        return False
    if location.type == "airport":
        return True
    addr = location.address.lower()
    return any(hint in addr for hint in AIRPORT_HINTS)


def empty_price_breakdown(rules: PricingRules = PRICING_RULES) -> PriceBreakdown:
    return PriceBreakdown(currency=rules.currency)


def is_priceable(breakdown: Optional[PriceBreakdown]) -> bool:
    return breakdown is not None and breakdown.total > 0


def euros_to_cents(amount: float) -> int:
    """Stripe amounts are integer cents."""
    return int(round(amount * 100))


def calculate_price(
    draft: BookingDraft,
    distance_km: Optional[float] = None,
    rules: PricingRules = PRICING_RULES,
) -> PriceBreakdown:
    vehicle = draft.selected_vehicle
    if vehicle is None:
        return empty_price_breakdown(rules)

    base_price = vehicle.base_price
    distance_charge = 0.0
    time_charge = 0.0

    if draft.service_type == "hourly":
        hours = draft.hourly_duration
        if hours is None:
            hours = rules.default_hourly_duration
            logger.warning("hourly booking priced without hourly_duration, assuming %s hours", hours)
        if vehicle.price_per_hour:
            time_charge = vehicle.price_per_hour * hours
    elif distance_km and vehicle.price_per_km:
        distance_charge = distance_km * vehicle.price_per_km

    airport_fee = 0.0
    if is_airport_location(draft.pickup) or is_airport_location(draft.dropoff):
        airport_fee = rules.airport_fee

    meet_and_greet_charge = rules.meet_and_greet_fee if draft.extras.meet_and_greet else 0.0
    child_seats_charge = draft.passengers.child_seats * rules.child_seat_fee
    extra_stops_charge = len(draft.extras.additional_stops) * rules.additional_stop_fee

    subtotal = (
        base_price
        + distance_charge
        + time_charge
        + extra_stops_charge
        + meet_and_greet_charge
        + child_seats_charge
        + airport_fee
    )
    tax = subtotal * rules.tax_rate / 100
    total = subtotal + tax

    return PriceBreakdown(
        base_price=base_price,
        distance_charge=distance_charge,
        time_charge=time_charge,
        extra_stops_charge=extra_stops_charge,
        meet_and_greet_charge=meet_and_greet_charge,
        child_seats_charge=child_seats_charge,
        airport_fee=airport_fee,
        subtotal=subtotal,
        tax=tax,
        total=total,
        currency=rules.currency,
    )
