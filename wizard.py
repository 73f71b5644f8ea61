import logging
from typing import Optional

from booking_merge import merge_booking
from booking_schemas import BookingDraft, BookingPatch, PriceBreakdown
from booking_tools import DistanceResult, distance_patch
from draft_normalizer import DraftInput, normalize_draft, parse_draft
from pricing import calculate_price
from step_gates import FIRST_STEP, LAST_STEP, can_advance

logger = logging.getLogger(__name__)

DRAFT_KEY = "booking-draft"


class SessionDraftStore:
    """
    In-memory stand-in for the browser's session storage: one JSON draft per key.
    """

    def __init__(self, items: dict = None):
        self.items = dict(items or {})

    def get(self, key: str = DRAFT_KEY) -> Optional[str]:
        return self.items.get(key)

    def set(self, raw: str, key: str = DRAFT_KEY):
        self.items[key] = raw

    def clear(self, key: str = DRAFT_KEY):
        self.items.pop(key, None)


class BookingWizard:
    """
    Four-step booking wizard for one user session (ride details -> vehicle ->
    contact details -> summary).
    Owns the canonical BookingDraft; every change goes through merge_booking so
    nested fields are never clobbered. Create one per session, never share.
    """

    def __init__(self, initial_step: int = FIRST_STEP, draft: BookingDraft = None):
        self.draft = draft or BookingDraft()
        self.current_step = min(max(initial_step, FIRST_STEP), LAST_STEP)

    # ---- state updates ----

    def update(self, patch: BookingPatch) -> BookingDraft:
        self.draft = merge_booking(self.draft, patch)
        return self.draft

    def update_pricing(self, pricing: PriceBreakdown) -> BookingDraft:
        return self.update({"pricing": pricing})

    def recalculate_pricing(self) -> PriceBreakdown:
        """
        Client-side estimate from the current draft. The server re-prices
        independently before any payment.
        """
        pricing = calculate_price(self.draft, self.draft.distance)
        self.update_pricing(pricing)
        return pricing

    def apply_distance(self, result: DistanceResult) -> BookingDraft:
        return self.update(distance_patch(result))

    def hydrate_from_draft(self, draft: DraftInput) -> BookingDraft:
        """
        Merge an external draft into the current state and go back to the first step.
        """
        patch = normalize_draft(draft, self.draft)
        self.update(patch)
        self.current_step = FIRST_STEP
        return self.draft

    def hydrate_from_source(self, source, step_param: Optional[int] = None) -> bool:
        """
        Load the pending draft from ``source`` (get/clear), hydrate, then jump to
        the requested step (1-based, as it appears in the URL).
        Returns False when there was nothing to load. On DraftParseError the
        source is left untouched so the user can retry.
        """
        raw = source.get(DRAFT_KEY)
        if not raw:
            return False

        draft = parse_draft(raw)
        self.hydrate_from_draft(draft)
        self.go_to_step(max(FIRST_STEP, (step_param or 1) - 1))
        source.clear(DRAFT_KEY)
        logger.info("hydrated booking draft, now at step %s", self.current_step)
        return True

    def reset(self):
        self.draft = BookingDraft()
        self.current_step = FIRST_STEP

    # ---- navigation ----

    def can_advance(self, step: int) -> bool:
        return can_advance(step, self.draft)

    def can_proceed(self) -> bool:
        return self.can_advance(self.current_step)

    def go_to_next_step(self) -> bool:
        """Advance one step if the current step's gate passes."""
        if not self.can_proceed():
            return False
        self.current_step = min(self.current_step + 1, LAST_STEP)
        return True

    def go_to_previous_step(self):
        self.current_step = max(self.current_step - 1, FIRST_STEP)

    def go_to_step(self, step: int):
        # explicit jumps are not gated; out-of-range requests are ignored
        if FIRST_STEP <= step <= LAST_STEP:
            self.current_step = step
