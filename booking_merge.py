"""
Field-by-field merge of a partial update into the canonical BookingDraft.

Composite fields are merged key by key so that updating dateTime.time does
not drop dateTime.date. Only the composites listed below get this treatment;
everything else is overwritten when present in the patch.
"""

from typing import Any, Dict, Type

from pydantic import BaseModel

from booking_schemas import (
    BookingDraft,
    BookingPatch,
    DateTimeInfo,
    Extras,
    Location,
    PassengerDetails,
    PassengerInfo,
)

NESTED_FIELDS: Dict[str, Type[BaseModel]] = {
    "pickup": Location,
    "date_time": DateTimeInfo,
    "passengers": PassengerInfo,
    "passenger_details": PassengerDetails,
    "extras": Extras,
}


def _field_names(model_cls: Type[BaseModel], data: Dict[str, Any]) -> Dict[str, Any]:
    """Rewrite camelCase alias keys to field names; unknown keys are dropped."""
    by_alias = {f.alias: name for name, f in model_cls.model_fields.items() if f.alias}
    out = {}
    for key, value in data.items():
        name = by_alias.get(key, key)
        if name in model_cls.model_fields:
            out[name] = value
    return out


def _as_dict(model_cls: Type[BaseModel], value: Any) -> Dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_unset=True)
    return _field_names(model_cls, dict(value))


def merge_booking(current: BookingDraft, patch: BookingPatch) -> BookingDraft:
    data = current.model_dump()

    for key, value in _field_names(BookingDraft, patch).items():
        if key in NESTED_FIELDS:
            # None on a composite means "not supplied"
            if value is None:
                continue
            data[key] = {**data[key], **_as_dict(NESTED_FIELDS[key], value)}
        elif key == "dropoff":
            if value is None:
                data[key] = Location().model_dump()
                continue
            base = data[key] or {"address": ""}
            data[key] = {**base, **_as_dict(Location, value)}
        elif isinstance(value, BaseModel):
            data[key] = value.model_dump()
        else:
            data[key] = value

    return BookingDraft.model_validate(data)
