from typing import Any, Dict, List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ServiceType = Literal["distance", "hourly"]
TransferType = Literal["oneWay", "return"]
LocationKind = Literal["airport", "hotel", "cruise", "address", "poi"]
LOCATION_KINDS = get_args(LocationKind)
PaymentMethod = Literal["cash", "card"]
PaymentStatus = Literal["paid", "pending", "cancelled", "refunded"]
BookingStatus = Literal["confirmed", "in_progress", "completed", "cancelled"]

# Partial update keyed by snake_case field names. None clears, a missing key leaves untouched.
BookingPatch = Dict[str, Any]


class CamelModel(BaseModel):
    """
    Base for every wire model: camelCase on the wire (browser, URL and
    session-storage drafts), snake_case in Python.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Location(CamelModel):
    address: str = ""
    place_id: Optional[str] = None     # geocoded id, preferred identity
    lat: Optional[float] = None
    lng: Optional[float] = None
    type: Optional[LocationKind] = None
    city: Optional[str] = None
    country: Optional[str] = None

    @property
    def identity(self) -> str:
        return self.place_id or self.address


class DateTimeInfo(CamelModel):
    date: str = ""                     # YYYY-MM-DD
    time: str = ""                     # HH:MM, 24h
    return_date: Optional[str] = None  # only for return transfers
    return_time: Optional[str] = None
    timezone: Optional[str] = None


class PassengerInfo(CamelModel):
    count: int = 1
    luggage: int = Field(default=1, ge=0)
    child_seats: int = Field(default=0, ge=0)


class VehicleCapacity(CamelModel):
    passengers: int = 0
    luggage: int = 0


class Vehicle(CamelModel):
    id: str = ""
    category: str = "standard"
    name: str = ""
    description: str = ""
    capacity: VehicleCapacity = Field(default_factory=VehicleCapacity)
    features: List[str] = Field(default_factory=list)
    base_price: float = 0.0
    price_per_km: Optional[float] = None
    price_per_hour: Optional[float] = None


class AdditionalStop(CamelModel):
    address: str
    place_id: Optional[str] = None
    duration: int = 0                  # minutes spent at the stop


class Extras(CamelModel):
    meet_and_greet: bool = False
    waiting_time: int = 60             # minutes
    additional_stops: List[AdditionalStop] = Field(default_factory=list)
    special_requests: Optional[str] = None


class PassengerDetails(CamelModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    country_code: str = "+34"
    flight_number: Optional[str] = None
    airline: Optional[str] = None
    special_requests: Optional[str] = None


class PriceBreakdown(CamelModel):
    base_price: float = 0.0
    distance_charge: float = 0.0
    time_charge: float = 0.0
    extra_stops_charge: float = 0.0
    meet_and_greet_charge: float = 0.0
    child_seats_charge: float = 0.0
    airport_fee: float = 0.0
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    currency: str = "EUR"


class BookingDraft(CamelModel):
    """
    Canonical booking state owned by the wizard.
    BookingDraft() is the empty state a wizard session starts from.
    """

    service_type: Optional[ServiceType] = None
    transfer_type: TransferType = "oneWay"
    pickup: Location = Field(default_factory=Location)
    dropoff: Optional[Location] = Field(default_factory=Location)
    distance: Optional[float] = None        # km, distance service only
    duration: Optional[float] = None        # minutes, distance service only
    date_time: DateTimeInfo = Field(default_factory=DateTimeInfo)
    passengers: PassengerInfo = Field(default_factory=PassengerInfo)
    selected_vehicle: Optional[Vehicle] = None
    passenger_details: PassengerDetails = Field(default_factory=PassengerDetails)
    payment_method: Optional[PaymentMethod] = None
    extras: Extras = Field(default_factory=Extras)
    pricing: Optional[PriceBreakdown] = None
    hourly_duration: Optional[float] = None  # hours, hourly service only


# ---- external draft payloads (session storage / homepage form) ----

class DraftLocation(CamelModel):
    address: Optional[str] = None
    place_id: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    type: Optional[str] = None          # unknown kinds are dropped on normalize
    city: Optional[str] = None
    country: Optional[str] = None


class DraftDateTime(CamelModel):
    date: Optional[str] = None
    time: Optional[str] = None


class LegacyDateTime(DraftDateTime):
    return_date: Optional[str] = None
    return_time: Optional[str] = None


class DraftPassengers(CamelModel):
    count: Optional[int] = None
    luggage: Optional[int] = Field(default=None, ge=0)
    child_seats: Optional[int] = Field(default=None, ge=0)


class HeroDraft(CamelModel):
    """Versioned draft written by the homepage booking form (version 2.0)."""

    version: Literal["2.0"]
    timestamp: Optional[int] = None
    from_homepage: Optional[bool] = None
    service_type: Optional[str] = None
    transfer_type: Optional[str] = None
    pickup: Optional[DraftLocation] = None
    dropoff: Optional[DraftLocation] = None
    pickup_date_time: Optional[DraftDateTime] = None
    return_date_time: Optional[DraftDateTime] = None
    passengers: Optional[DraftPassengers] = None
    hourly_duration: Optional[Any] = None


class LegacyDraft(CamelModel):
    """Older drafts: a loose partial BookingDraft plus a few hint fields."""

    version: Optional[Any] = None
    timestamp: Optional[int] = None
    from_homepage: Optional[bool] = None
    service_type: Optional[str] = None
    service_category: Optional[str] = None
    transfer_type: Optional[str] = None
    pickup: Optional[DraftLocation] = None
    dropoff: Optional[DraftLocation] = None
    date_time: Optional[LegacyDateTime] = None
    passengers: Optional[DraftPassengers] = None
    hourly_duration: Optional[Any] = None
