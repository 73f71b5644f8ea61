import json

import pytest

from booking_errors import DraftParseError
from booking_merge import merge_booking
from booking_schemas import BookingDraft, HeroDraft, LegacyDraft, Location
from draft_normalizer import normalize_draft, parse_draft

PATCH_KEYS = {"service_type", "transfer_type", "pickup", "dropoff", "date_time", "passengers", "hourly_duration"}


def _hero(**fields):
    payload = {"version": "2.0", "serviceType": "distance", "transferType": "oneWay"}
    payload.update(fields)
    return payload


def _hydrate(raw, previous=None):
    previous = previous or BookingDraft()
    return merge_booking(previous, normalize_draft(parse_draft(raw), previous))


def test_return_trip_from_homepage_draft():
    raw = json.dumps(_hero(
        transferType="return",
        pickup={"address": "BCN Airport", "placeId": "p1"},
        dropoff={"address": "Hotel X", "placeId": "p2"},
        pickupDateTime={"date": "2025-07-01", "time": "09:00"},
        returnDateTime={"date": "2025-07-03", "time": "18:00"},
    ))
    draft = _hydrate(raw)

    assert draft.transfer_type == "return"
    assert draft.date_time.date == "2025-07-01"
    assert draft.date_time.time == "09:00"
    assert draft.date_time.return_date == "2025-07-03"
    assert draft.date_time.return_time == "18:00"
    assert draft.pickup.place_id == "p1"
    assert draft.dropoff.place_id == "p2"


@pytest.mark.parametrize("raw", ["{not json", "", "[1, 2]", "42", b"\xff"])
def test_malformed_payload_raises(raw):
    with pytest.raises(DraftParseError):
        parse_draft(raw)


def test_structurally_invalid_payload_raises():
    with pytest.raises(DraftParseError):
        parse_draft({"version": "2.0", "passengers": {"luggage": -1}})
    with pytest.raises(DraftParseError):
        parse_draft({"pickup": "Plaça Catalunya"})


def test_version_selects_shape():
    assert isinstance(parse_draft(_hero()), HeroDraft)
    assert isinstance(parse_draft({"serviceCategory": "hourly"}), LegacyDraft)
    assert isinstance(parse_draft({"version": 1}), LegacyDraft)


def test_patch_carries_only_normalized_fields():
    previous = BookingDraft(distance=12.5, payment_method="card")
    patch = normalize_draft(parse_draft(_hero()), previous)

    assert set(patch) == PATCH_KEYS
    assert "distance" not in patch
    assert "payment_method" not in patch


def test_normalization_is_idempotent():
    draft = parse_draft(_hero(
        pickup={"address": "Sants", "placeId": "s"},
        dropoff={"address": "Port", "placeId": "p", "type": "cruise"},
        pickupDateTime={"date": "2025-08-01", "time": "07:15"},
        passengers={"count": 3},
    ))
    first = merge_booking(BookingDraft(), normalize_draft(draft, BookingDraft()))
    second = merge_booking(first, normalize_draft(draft, first))
    assert first == second


def test_hourly_draft_blanks_distance_fields():
    previous = BookingDraft(
        service_type="distance",
        transfer_type="return",
        dropoff=Location(address="Hotel X", place_id="p2", lat=41.3),
        distance=20,
        duration=25,
    )
    draft = _hydrate(_hero(serviceType="hourly", hourlyDuration=6, transferType="return"), previous)

    assert draft.service_type == "hourly"
    assert draft.transfer_type == "oneWay"
    assert draft.dropoff == Location()
    assert draft.distance is None
    assert draft.duration is None
    assert draft.hourly_duration == 6


def test_distance_draft_clears_hourly_duration():
    previous = BookingDraft(service_type="hourly", hourly_duration=5)
    draft = _hydrate(_hero(serviceType="distance"), previous)
    assert draft.hourly_duration is None


def test_one_way_clears_stale_return_leg():
    previous = _hydrate(_hero(
        transferType="return",
        pickupDateTime={"date": "2025-07-01", "time": "09:00"},
        returnDateTime={"date": "2025-07-03", "time": "18:00"},
    ))
    draft = _hydrate(_hero(transferType="oneWay"), previous)

    assert draft.transfer_type == "oneWay"
    assert draft.date_time.return_date is None
    assert draft.date_time.return_time is None
    assert draft.date_time.date == "2025-07-01"


def test_unknown_service_type_on_hero_draft_means_distance():
    draft = _hydrate(_hero(serviceType="limo"))
    assert draft.service_type == "distance"


def test_legacy_service_category_hint():
    draft = _hydrate({"serviceCategory": "hourly", "hourlyDuration": 3})
    assert draft.service_type == "hourly"
    assert draft.hourly_duration == 3


def test_legacy_falls_back_to_previous_state():
    previous = BookingDraft(
        service_type="distance",
        transfer_type="return",
        date_time={"date": "2025-09-09", "time": "10:00", "return_date": "2025-09-10", "return_time": "12:00"},
        passengers={"count": 4, "luggage": 2},
    )
    draft = _hydrate({"pickup": {"address": "Sitges"}}, previous)

    assert draft.service_type == "distance"
    assert draft.transfer_type == "return"
    assert draft.date_time.date == "2025-09-09"
    assert draft.date_time.return_date == "2025-09-10"
    assert draft.passengers.count == 4
    assert draft.pickup.address == "Sitges"


def test_legacy_return_fields_live_in_date_time():
    draft = _hydrate({
        "serviceType": "distance",
        "transferType": "return",
        "dateTime": {"date": "2025-07-01", "time": "09:00", "returnDate": "2025-07-02", "returnTime": "10:00"},
    })
    assert draft.date_time.return_date == "2025-07-02"
    assert draft.date_time.return_time == "10:00"


def test_empty_legacy_draft_uses_defaults():
    draft = _hydrate({})
    assert draft.service_type == "distance"
    assert draft.transfer_type == "oneWay"
    assert draft.date_time.date == ""
    assert draft.passengers.count == 1


@pytest.mark.parametrize("value", [0, -2, True, "4", None, [4]])
def test_invalid_hourly_duration_keeps_previous(value):
    previous = BookingDraft(service_type="hourly", hourly_duration=3)
    draft = _hydrate(_hero(serviceType="hourly", hourlyDuration=value), previous)
    assert draft.hourly_duration == 3


def test_location_fields_merge_with_previous():
    previous = BookingDraft(pickup=Location(address="Old", place_id="old", lat=1.0, lng=2.0))
    draft = _hydrate(_hero(pickup={"address": "New"}), previous)

    assert draft.pickup.address == "New"
    assert draft.pickup.place_id == "old"
    assert draft.pickup.lat == 1.0


def test_unknown_fields_are_ignored():
    draft = _hydrate(_hero(promoCode="SUMMER", pickup={"address": "A", "floor": 3}))
    assert draft.pickup.address == "A"


def test_unsupported_draft_type():
    with pytest.raises(TypeError):
        normalize_draft(BookingDraft(), BookingDraft())


def test_unknown_location_type_is_dropped():
    previous = BookingDraft(pickup=Location(address="BCN Airport", place_id="p0", type="airport"))
    draft = _hydrate(_hero(
        pickup={"address": "Sants Station", "placeId": "p1", "type": "station"},
        dropoff={"address": "Port Vell", "placeId": "p2", "type": "cruise"},
    ), previous)

    assert draft.pickup.address == "Sants Station"
    assert draft.pickup.type is None
    assert draft.dropoff.type == "cruise"
