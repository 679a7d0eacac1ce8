from __future__ import annotations

from enum import IntEnum
from typing import Any

from listings_hub.core.config import settings
from listings_hub.core.errors import BadRequest


class ListingStatus(IntEnum):
    DRAFT = 0
    PENDING_REVIEW = 1
    APPROVED = 2
    REJECTED = 3


class ReviewDecision(IntEnum):
    # values are the listing status the decision moves to
    APPROVED = 2
    REJECTED = 3

    @property
    def target_status(self) -> ListingStatus:
        return ListingStatus(int(self))


# Rejected is terminal: there is no resubmission edge.
TRANSITIONS: dict[ListingStatus, frozenset[ListingStatus]] = {
    ListingStatus.DRAFT: frozenset({ListingStatus.DRAFT, ListingStatus.PENDING_REVIEW}),
    ListingStatus.PENDING_REVIEW: frozenset({ListingStatus.APPROVED, ListingStatus.REJECTED}),
    ListingStatus.APPROVED: frozenset(),
    ListingStatus.REJECTED: frozenset(),
}


def can_transition(src: int, dst: int) -> bool:
    try:
        return ListingStatus(dst) in TRANSITIONS[ListingStatus(src)]
    except ValueError:
        return False


def parse_status(value: Any) -> ListingStatus:
    if isinstance(value, bool):
        raise BadRequest("Invalid status value")
    if isinstance(value, str):
        key = value.strip().upper()
        if key in ListingStatus.__members__:
            return ListingStatus[key]
        if not key.isdigit():
            raise BadRequest("Invalid status value")
    try:
        return ListingStatus(int(value))
    except (TypeError, ValueError):
        raise BadRequest("Invalid status value")


def parse_decision(value: Any) -> ReviewDecision:
    """
    Accepts the numeric decision (2/3) or its name ("approved"/"rejected").
    """
    if value is None or isinstance(value, bool):
        raise BadRequest("Invalid decision value")
    if isinstance(value, str):
        key = value.strip().upper()
        if key in ReviewDecision.__members__:
            return ReviewDecision[key]
        if not key.isdigit():
            raise BadRequest("Invalid decision value")
    try:
        return ReviewDecision(int(value))
    except (TypeError, ValueError):
        raise BadRequest("Invalid decision value")


def is_moderator(permission_level: int | None) -> bool:
    return permission_level is not None and permission_level == settings.moderator_permission_level
