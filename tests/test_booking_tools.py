import logging
import re

import pytest
import requests

from booking_schemas import BookingDraft
from booking_tools import (
    DistanceLookupError,
    GoogleDistanceMatrixClient,
    MockDistanceProvider,
    generate_booking_id,
    haversine_km,
    lookup_distance_patch,
)


class FakeResponse:
    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.body


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.exc:
            raise self.exc
        return self.response


def _matrix(element, status="OK"):
    return {"status": status, "rows": [{"elements": [element]}]}


def _client(session):
    return GoogleDistanceMatrixClient(api_key="k", url="https://maps.test/matrix", timeout=3, session=session)


def test_google_client_reads_first_element():
    session = FakeSession(FakeResponse(_matrix({
        "status": "OK",
        "distance": {"value": 15800, "text": "15.8 km"},
        "duration": {"value": 1320, "text": "22 mins"},
    })))
    result = _client(session).distance("p1", "p2")

    assert result.distance_km == pytest.approx(15.8)
    assert result.duration_minutes == pytest.approx(22)
    call = session.calls[0]
    assert call["params"]["origins"] == "place_id:p1"
    assert call["params"]["destinations"] == "place_id:p2"
    assert call["params"]["key"] == "k"
    assert call["timeout"] == 3


@pytest.mark.parametrize("session", [
    FakeSession(FakeResponse(_matrix({}, status="REQUEST_DENIED"))),
    FakeSession(FakeResponse(_matrix({"status": "ZERO_RESULTS"}))),
    FakeSession(FakeResponse({"status": "OK", "rows": []})),
    FakeSession(FakeResponse(_matrix({"status": "OK"}))),
    FakeSession(FakeResponse(_matrix({"status": "OK", "distance": {"value": 1000}, "duration": None}))),
    FakeSession(FakeResponse({}, status_code=502)),
    FakeSession(exc=requests.ConnectionError("down")),
])
def test_google_client_failures(session):
    with pytest.raises(DistanceLookupError):
        _client(session).distance("p1", "p2")


def test_google_client_needs_api_key(monkeypatch):
    import config

    monkeypatch.setattr(config, "GOOGLE_MAPS_API_KEY", None)
    client = GoogleDistanceMatrixClient(api_key=None, session=FakeSession())
    with pytest.raises(DistanceLookupError):
        client.distance("p1", "p2")


def test_lookup_patch_for_distance_booking(make_draft):
    provider = MockDistanceProvider(routes={("p1", "p2"): (20000, 1500)})
    assert lookup_distance_patch(provider, make_draft()) == {"distance": 20, "duration": 25}


def test_lookup_failure_leaves_draft_unpriced(make_draft, caplog):
    provider = MockDistanceProvider()
    with caplog.at_level(logging.WARNING):
        assert lookup_distance_patch(provider, make_draft()) == {}
    assert "distance lookup failed" in caplog.text


def test_lookup_failure_falls_back_to_straight_line(make_draft):
    draft = make_draft(
        pickup={"address": "Plaça Catalunya", "placeId": "p1", "lat": 41.3870, "lng": 2.1700},
        dropoff={"address": "El Prat", "placeId": "p2", "lat": 41.2974, "lng": 2.0833},
    )
    patch = lookup_distance_patch(MockDistanceProvider(), draft)

    assert patch["distance"] == haversine_km(41.3870, 2.1700, 41.2974, 2.0833)
    assert patch["duration"] is None


def test_incomplete_matrix_element_falls_back(make_draft):
    session = FakeSession(FakeResponse(_matrix({"status": "OK"})))
    assert lookup_distance_patch(_client(session), make_draft()) == {}


def test_lookup_skipped_without_place_ids(make_draft):
    provider = MockDistanceProvider(default=(1000, 60))
    assert lookup_distance_patch(provider, make_draft(dropoff={"address": "Hotel X"})) == {}
    assert lookup_distance_patch(provider, make_draft(serviceType="hourly")) == {}
    assert lookup_distance_patch(provider, BookingDraft()) == {}


def test_haversine():
    assert haversine_km(41.3874, 2.1686, 41.3874, 2.1686) == 0
    # Plaça Catalunya to El Prat, roughly 12 km as the crow flies
    assert 11 < haversine_km(41.3870, 2.1700, 41.2974, 2.0833) < 14


def test_booking_id_format():
    ids = {generate_booking_id() for _ in range(50)}
    assert len(ids) == 50
    for booking_id in ids:
        assert re.fullmatch(r"RT-[0-9A-Z]+-[0-9A-Z]{7}", booking_id)
