"""Server-side checks run on a submitted booking before anything is charged or stored."""

from typing import List

from booking_errors import BookingValidationError, FieldError
from booking_schemas import BookingDraft
from fleet import BOOKING_CONFIG


def booking_field_errors(draft: BookingDraft) -> List[FieldError]:
    errors = []

    if draft.service_type is None:
        errors.append(FieldError("serviceType", "Service type is required"))

    if draft.selected_vehicle is None:
        errors.append(FieldError("selectedVehicle", "No vehicle selected"))

    if not draft.pickup.address:
        errors.append(FieldError("pickup.address", "Pickup address is required"))

    # dropoff only matters for point-to-point trips
    if draft.service_type == "distance" and (draft.dropoff is None or not draft.dropoff.address):
        errors.append(FieldError("dropoff.address", "Dropoff address is required"))

    if draft.service_type == "hourly":
        hours = draft.hourly_duration
        lo, hi = BOOKING_CONFIG["min_hourly_duration"], BOOKING_CONFIG["max_hourly_duration"]
        if hours is None or not lo <= hours <= hi:
            errors.append(FieldError("hourlyDuration", f"Hourly duration must be between {lo} and {hi} hours"))

    if not draft.date_time.date:
        errors.append(FieldError("dateTime.date", "Date is required"))
    if not draft.date_time.time:
        errors.append(FieldError("dateTime.time", "Time is required"))

    details = draft.passenger_details
    if not details.first_name:
        errors.append(FieldError("passengerDetails.firstName", "First name is required"))
    if not details.last_name:
        errors.append(FieldError("passengerDetails.lastName", "Last name is required"))
    if not details.email:
        errors.append(FieldError("passengerDetails.email", "Email is required"))
    if not details.phone:
        errors.append(FieldError("passengerDetails.phone", "Phone number is required"))

    if draft.passengers.count < 1:
        errors.append(FieldError("passengers.count", "At least one passenger is required"))

    return errors


def validate_booking(draft: BookingDraft) -> None:
    errors = booking_field_errors(draft)
    if errors:
        raise BookingValidationError(errors)
