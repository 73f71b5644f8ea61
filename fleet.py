"""
Read-only reference data: the vehicle fleet, the pricing rule table and
booking limits. Shared verbatim by client-side estimates and server-side
re-pricing, so none of it is environment-configurable.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from booking_schemas import Vehicle, VehicleCapacity


class PricingRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    airport_fee: float = 5.0
    meet_and_greet_fee: float = 15.0
    child_seat_fee: float = 5.0          # per seat
    additional_stop_fee: float = 10.0    # per stop
    tax_rate: float = 21.0               # percent, Spanish VAT
    currency: str = "EUR"
    default_hourly_duration: float = 4.0  # used when an hourly draft has no duration


PRICING_RULES = PricingRules()

BOOKING_CONFIG = {
    "min_advance_booking_hours": 2,
    "max_advance_booking_days": 365,
    "free_airport_waiting_time": 60,     # minutes
    "free_standard_waiting_time": 15,
    "airport_code": "BCN",
    "currency": "EUR",
    "hourly_service_options": [3, 4, 6, 8],
    "min_hourly_duration": 2,
    "max_hourly_duration": 24,
    "free_cancellation_hours": 24,
}


def _vehicle(id, category, name, description, passengers, luggage, features, base, per_km, per_hour):
    return Vehicle(
        id=id,
        category=category,
        name=name,
        description=description,
        capacity=VehicleCapacity(passengers=passengers, luggage=luggage),
        features=features,
        base_price=base,
        price_per_km=per_km,
        price_per_hour=per_hour,
    )


VEHICLES: List[Vehicle] = [
    _vehicle("tesla-model-3", "standard", "Tesla Model 3",
             "Eco-luxury sedan for comfortable city transfers", 3, 2,
             ["100% Electric", "Premium leather seats", "Climate control", "On-board navigation"],
             35, 1.2, 45),
    _vehicle("toyota-prius", "standard", "Toyota Prius+",
             "Efficient hybrid sedan for reliable transfers", 4, 3,
             ["Hybrid engine", "Fuel-efficient", "Air-conditioned", "Charging ports"],
             33, 1.0, 40),
    _vehicle("mercedes-e-class", "luxury-sedan", "Mercedes E-Class",
             "Business-class sedan for executive travel", 3, 2,
             ["Executive seating", "Climate control", "Quiet cabin", "Ambient lighting"],
             55, 1.8, 70),
    _vehicle("bmw-5-series", "luxury-sedan", "BMW 5 Series",
             "Dynamic elegance for premium transfers", 3, 2,
             ["Luxury seating", "Premium sound", "Smooth ride", "Advanced comfort"],
             55, 1.8, 70),
    _vehicle("mercedes-s-class", "luxury-sedan", "Mercedes S-Class",
             "Flagship luxury for VIP transfers", 3, 2,
             ["First-class seating", "Ultra-quiet cabin", "Massage seats", "Burmester sound"],
             103, 2.5, 120),
    _vehicle("mercedes-vito", "8-seater-van", "Mercedes Vito",
             "Spacious van for group travel", 8, 8,
             ["8 passenger seats", "Large luggage space", "Dual-zone AC", "Comfortable ride"],
             75, 1.5, 85),
    _vehicle("ford-tourneo", "8-seater-van", "Ford Tourneo Custom",
             "Modern 8-seater for families and groups", 8, 7,
             ["8 full-size seats", "Apple CarPlay", "Rear climate control", "Ambient lighting"],
             73, 1.4, 82),
    _vehicle("mercedes-v-class", "luxury-van", "Mercedes V-Class",
             "Luxury chauffeur van for VIP groups", 7, 7,
             ["Premium interiors", "Privacy glass", "Wi-Fi on board", "Leather seats"],
             95, 2.0, 110),
]


def get_vehicle(vehicle_id: str) -> Optional[Vehicle]:
    for vehicle in VEHICLES:
        if vehicle.id == vehicle_id:
            return vehicle
    return None


def filter_available_vehicles(vehicles: List[Vehicle], passengers: int, luggage: int) -> List[Vehicle]:
    """Vehicles whose capacity covers the requested passengers and luggage."""
    return [
        v for v in vehicles
        if v.capacity.passengers >= passengers and v.capacity.luggage >= luggage
    ]


def get_recommended_vehicle(vehicles: List[Vehicle], passengers: int, luggage: int) -> Optional[Vehicle]:
    """Cheapest (by base price) vehicle that fits, or None."""
    available = filter_available_vehicles(vehicles, passengers, luggage)
    if not available:
        return None
    return min(available, key=lambda v: v.base_price)
