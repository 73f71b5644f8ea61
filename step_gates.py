"""
Forward-navigation gates for the four wizard steps.

can_advance() is a pure predicate over the draft. A False result just keeps
the "next" button disabled; the reason is re-derivable from the draft, so no
message is produced.
"""

from datetime import datetime
from typing import Optional

from booking_schemas import BookingDraft
from fleet import BOOKING_CONFIG

WIZARD_STEPS = ("ride_details", "vehicle_selection", "contact_details", "summary")
FIRST_STEP = 0
LAST_STEP = len(WIZARD_STEPS) - 1

RIDE_DETAILS, VEHICLE_SELECTION, CONTACT_DETAILS, SUMMARY = range(len(WIZARD_STEPS))

TIMESTAMP_FORMATS = ("%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S")


def parse_timestamp(date: Optional[str], time: Optional[str]) -> Optional[datetime]:
    """Combined date + time, or None when either part is missing or unparseable."""
    if not date or not time:
        return None
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(f"{date}T{time}", fmt)
        except ValueError:
            continue
    return None


def _ride_details_complete(draft: BookingDraft) -> bool:
    if not draft.pickup.address:
        return False
    if not draft.date_time.date or not draft.date_time.time:
        return False

    if draft.service_type == "hourly":
        return bool(draft.hourly_duration) and draft.hourly_duration >= BOOKING_CONFIG["min_hourly_duration"]

    if draft.service_type == "distance":
        dropoff = draft.dropoff
        if dropoff is None or not dropoff.address:
            return False
        # both ends must be geocoded, free text is not enough to price a route
        if not draft.pickup.place_id or not dropoff.place_id:
            return False
        if draft.transfer_type == "return":
            pickup_at = parse_timestamp(draft.date_time.date, draft.date_time.time)
            return_at = parse_timestamp(draft.date_time.return_date, draft.date_time.return_time)
            if pickup_at is None or return_at is None:
                return False
            if return_at <= pickup_at:
                return False
        return True

    return False


def _contact_details_complete(draft: BookingDraft) -> bool:
    details = draft.passenger_details
    return bool(details.first_name and details.last_name and details.email and details.phone)


def can_advance(step: int, draft: BookingDraft) -> bool:
    if step == RIDE_DETAILS:
        return _ride_details_complete(draft)
    if step == VEHICLE_SELECTION:
        return draft.selected_vehicle is not None
    if step == CONTACT_DETAILS:
        return _contact_details_complete(draft)
    if step == SUMMARY:
        return True
    return False
