from typing import List, NamedTuple


class DraftParseError(ValueError):
    """
    Raised when an external draft payload (session storage, URL) cannot be read.
    Callers recover locally and keep the draft source intact so it can be retried.
    """


class InvalidPricingError(RuntimeError):
    """Server-side recomputed price is not payable (no vehicle, or total <= 0)."""


class BookingNotFoundError(LookupError):
    def __init__(self, booking_id: str):
        super().__init__(f"Booking not found: {booking_id}")
        self.booking_id = booking_id


class FieldError(NamedTuple):
    field: str
    message: str


class BookingValidationError(ValueError):
    """
    Booking submission is missing required fields.
    Carries one FieldError per problem; nothing is persisted when raised.
    """

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        super().__init__(self.errors[0].message if self.errors else "Invalid booking")

    def to_dict(self) -> List[dict]:
        return [{"field": e.field, "message": e.message} for e in self.errors]
