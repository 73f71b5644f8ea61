"""
Turns an external trip draft into a patch for the canonical BookingDraft.

Two payload shapes reach the wizard through session storage:

* HeroDraft (``version == "2.0"``) from the homepage form, with
  ``pickupDateTime`` / ``returnDateTime`` and an explicit distance|hourly
  service type.
* LegacyDraft, a loose partial BookingDraft that may carry a
  ``serviceCategory`` hint and keeps return fields inside ``dateTime``.

Every field the patch carries is resolved through an explicit fallback chain
(draft value, then previous state, then a fixed default). The patch never
carries anything else, so unrelated previous-state fields are not merged
in a second time.
"""

import json
import logging
from numbers import Real
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from booking_errors import DraftParseError
from booking_schemas import (
    LOCATION_KINDS,
    BookingDraft,
    BookingPatch,
    DraftLocation,
    DraftPassengers,
    HeroDraft,
    LegacyDraft,
    Location,
)

logger = logging.getLogger(__name__)

DraftInput = Union[HeroDraft, LegacyDraft]

SERVICE_TYPES = ("distance", "hourly")
TRANSFER_TYPES = ("oneWay", "return")


def parse_draft(raw: Union[str, bytes, Dict[str, Any]]) -> DraftInput:
    """
    Decode a raw draft payload and pick its shape by the version tag.
    Raises DraftParseError for malformed JSON or a structurally invalid payload.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise DraftParseError(f"Draft is not valid JSON: {exc}") from exc
    else:
        payload = raw

    if not isinstance(payload, dict):
        raise DraftParseError(f"Draft must be a JSON object, got {type(payload).__name__}")

    try:
        if payload.get("version") == "2.0":
            return HeroDraft.model_validate(payload)
        return LegacyDraft.model_validate(payload)
    except ValidationError as exc:
        raise DraftParseError(f"Draft has an unexpected shape: {exc}") from exc


def _resolve_service_type(draft: DraftInput, previous: BookingDraft) -> str:
    if isinstance(draft, HeroDraft):
        return "hourly" if draft.service_type == "hourly" else "distance"
    if draft.service_type in SERVICE_TYPES:
        return draft.service_type
    if draft.service_category in SERVICE_TYPES:
        return draft.service_category
    return previous.service_type or "distance"


def _resolve_transfer_type(hint: Optional[str], previous: BookingDraft) -> str:
    if hint in TRANSFER_TYPES:
        return hint
    return previous.transfer_type or "oneWay"


def _merge_location(prev: Optional[Location], provided: Optional[DraftLocation]) -> Dict[str, Any]:
    merged = (prev or Location()).model_dump()
    if provided is not None:
        fields = provided.model_dump(exclude_none=True)
        if "type" in fields and fields["type"] not in LOCATION_KINDS:
            logger.debug("ignoring unknown location type %r", fields["type"])
            fields["type"] = None
        merged.update(fields)
    return merged


def _merge_passengers(previous: BookingDraft, provided: Optional[DraftPassengers]) -> Dict[str, Any]:
    merged = previous.passengers.model_dump()
    if provided is not None:
        merged.update(provided.model_dump(exclude_none=True))
    return merged


def _resolve_hourly_duration(value: Any, previous: BookingDraft) -> Optional[float]:
    # bool is a Real; a JSON true is not a duration
    if isinstance(value, Real) and not isinstance(value, bool) and value > 0:
        return float(value)
    return previous.hourly_duration


def _pick(value: Optional[str], fallback: Optional[str]) -> Optional[str]:
    return value if value is not None else fallback


def normalize_draft(draft: DraftInput, previous: BookingDraft) -> BookingPatch:
    """Build the merge patch for ``draft`` against the ``previous`` wizard state."""
    prev_dt = previous.date_time

    if isinstance(draft, HeroDraft):
        pickup_dt = draft.pickup_date_time
        date = _pick(pickup_dt.date if pickup_dt else None, prev_dt.date)
        time = _pick(pickup_dt.time if pickup_dt else None, prev_dt.time)
        return_date = draft.return_date_time.date if draft.return_date_time else None
        return_time = draft.return_date_time.time if draft.return_date_time else None
    elif isinstance(draft, LegacyDraft):
        legacy_dt = draft.date_time
        date = _pick(legacy_dt.date if legacy_dt else None, prev_dt.date)
        time = _pick(legacy_dt.time if legacy_dt else None, prev_dt.time)
        return_date = legacy_dt.return_date if legacy_dt else None
        return_time = legacy_dt.return_time if legacy_dt else None
    else:
        raise TypeError(f"Unsupported draft type: {type(draft).__name__}")

    service_type = _resolve_service_type(draft, previous)
    is_distance = service_type == "distance"
    transfer_type = _resolve_transfer_type(draft.transfer_type, previous) if is_distance else "oneWay"

    date_time = {"date": date or "", "time": time or ""}
    if is_distance and transfer_type == "return":
        date_time["return_date"] = _pick(return_date, prev_dt.return_date)
        date_time["return_time"] = _pick(return_time, prev_dt.return_time)
    else:
        # explicit clear, so a stale return leg cannot survive the merge
        date_time["return_date"] = None
        date_time["return_time"] = None

    patch: BookingPatch = {
        "service_type": service_type,
        "transfer_type": transfer_type,
        "pickup": _merge_location(previous.pickup, draft.pickup),
        "dropoff": _merge_location(previous.dropoff, draft.dropoff) if is_distance else Location().model_dump(),
        "date_time": date_time,
        "passengers": _merge_passengers(previous, draft.passengers),
    }

    if is_distance:
        patch["hourly_duration"] = None
    else:
        patch["hourly_duration"] = _resolve_hourly_duration(draft.hourly_duration, previous)
        patch["distance"] = None
        patch["duration"] = None

    logger.debug("normalized %s draft to %s service", type(draft).__name__, service_type)
    return patch
