import logging
import math
import secrets
import string
import time

import requests

import config
from booking_schemas import BookingDraft, BookingPatch, Location

logger = logging.getLogger(__name__)


class DistanceLookupError(RuntimeError):
    pass


class DistanceResult:
    def __init__(self, distance_meters: float, duration_seconds: float, raw: dict = None):
        self.distance_meters = distance_meters
        self.duration_seconds = duration_seconds
        self.raw = raw or {}

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000

    @property
    def duration_minutes(self) -> float:
        return self.duration_seconds / 60


class GoogleDistanceMatrixClient:
    """
    Driving distance between two Google place ids via the Distance Matrix web service.
    """

    def __init__(self, api_key: str = None, url: str = None, timeout: float = None, session=None):
        self.api_key = api_key or config.GOOGLE_MAPS_API_KEY
        self.url = url or config.DISTANCE_MATRIX_URL
        self.timeout = timeout or config.DISTANCE_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def distance(self, origin_place_id: str, destination_place_id: str) -> DistanceResult:
        if not self.api_key:
            raise DistanceLookupError("GOOGLE_MAPS_API_KEY is not configured")

        params = {
            "origins": f"place_id:{origin_place_id}",
            "destinations": f"place_id:{destination_place_id}",
            "mode": "driving",
            "units": "metric",
            "key": self.api_key,
        }
        try:
            r = self.session.get(self.url, params=params, timeout=self.timeout)
            r.raise_for_status()
            body = r.json()
        except (requests.RequestException, ValueError) as exc:
            raise DistanceLookupError(f"Distance Matrix request failed: {exc}") from exc

        status = body.get("status")
        if status != "OK":
            raise DistanceLookupError(f"Distance Matrix API returned status: {status}")

        try:
            element = body["rows"][0]["elements"][0]
        except (KeyError, IndexError):
            element = {}
        if element.get("status") != "OK":
            raise DistanceLookupError(
                "No driving route found between the selected locations "
                f"(element status: {element.get('status', 'UNKNOWN')})"
            )

        try:
            meters = element["distance"]["value"]
            seconds = element["duration"]["value"]
        except (KeyError, TypeError) as exc:
            raise DistanceLookupError(f"Distance Matrix element is missing {exc}") from exc
        return DistanceResult(distance_meters=meters, duration_seconds=seconds, raw=element)


class MockDistanceProvider:
    """
    Deterministic provider for demos and tests: fixed routes keyed by place-id pair.
    """

    def __init__(self, routes: dict = None, default: tuple = None):
        self.routes = routes or {}
        self.default = default

    def distance(self, origin_place_id: str, destination_place_id: str) -> DistanceResult:
        route = self.routes.get((origin_place_id, destination_place_id), self.default)
        if route is None:
            raise DistanceLookupError(f"no route {origin_place_id} -> {destination_place_id}")
        meters, seconds = route
        return DistanceResult(distance_meters=meters, duration_seconds=seconds, raw={"provider": "mock"})


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Straight-line distance in km, one decimal. Not a driving distance."""
    r = 6371
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(r * c, 1)


def distance_patch(result: DistanceResult) -> BookingPatch:
    return {"distance": result.distance_km, "duration": result.duration_minutes}


def straight_line_patch(origin: Location, destination: Location) -> BookingPatch:
    if None in (origin.lat, origin.lng, destination.lat, destination.lng):
        return {}
    km = haversine_km(origin.lat, origin.lng, destination.lat, destination.lng)
    return {"distance": km, "duration": None}


def lookup_distance_patch(provider, draft: BookingDraft) -> BookingPatch:
    """
    Resolve the route of a distance booking into a {distance, duration} patch.
    When the lookup fails, a straight-line distance is used if both ends have
    coordinates (duration unknown); otherwise the patch is empty and the wizard
    carries on with the price left unset.
    """
    if draft.service_type != "distance":
        return {}
    origin = draft.pickup.place_id
    destination = draft.dropoff.place_id if draft.dropoff else None
    if not origin or not destination:
        return {}
    try:
        result = provider.distance(origin, destination)
    except DistanceLookupError:
        logger.warning("distance lookup failed for %s -> %s", origin, destination, exc_info=True)
        return straight_line_patch(draft.pickup, draft.dropoff)
    return distance_patch(result)


_BASE36 = string.digits + string.ascii_uppercase


def _base36(n: int) -> str:
    out = ""
    while True:
        n, rem = divmod(n, 36)
        out = _BASE36[rem] + out
        if n == 0:
            return out


def generate_booking_id() -> str:
    """RT-<base36 ms timestamp>-<7 random base36 chars>, upper case."""
    timestamp = _base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"RT-{timestamp}-{suffix}"
