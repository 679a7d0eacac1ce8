import pytest

from listings_hub.core.config import settings
from listings_hub.core.errors import BadRequest
from listings_hub.services.listing_status import (
    TRANSITIONS,
    ListingStatus,
    ReviewDecision,
    can_transition,
    is_moderator,
    parse_decision,
    parse_status,
)


def test_status_values_are_closed_set():
    assert [int(s) for s in ListingStatus] == [0, 1, 2, 3]
    assert set(TRANSITIONS) == set(ListingStatus)


@pytest.mark.parametrize(
    "src,dst",
    [
        (ListingStatus.DRAFT, ListingStatus.DRAFT),
        (ListingStatus.DRAFT, ListingStatus.PENDING_REVIEW),
        (ListingStatus.PENDING_REVIEW, ListingStatus.APPROVED),
        (ListingStatus.PENDING_REVIEW, ListingStatus.REJECTED),
    ],
)
def test_allowed_edges(src, dst):
    assert can_transition(src, dst)


@pytest.mark.parametrize(
    "src,dst",
    [
        (ListingStatus.DRAFT, ListingStatus.APPROVED),
        (ListingStatus.DRAFT, ListingStatus.REJECTED),
        (ListingStatus.PENDING_REVIEW, ListingStatus.DRAFT),
        (ListingStatus.APPROVED, ListingStatus.DRAFT),
        (ListingStatus.REJECTED, ListingStatus.PENDING_REVIEW),
        (ListingStatus.REJECTED, ListingStatus.DRAFT),
        (ListingStatus.DRAFT, 7),
        (9, ListingStatus.DRAFT),
    ],
)
def test_forbidden_edges(src, dst):
    assert not can_transition(src, dst)


def test_parse_status_accepts_names_and_numbers():
    assert parse_status(1) is ListingStatus.PENDING_REVIEW
    assert parse_status("2") is ListingStatus.APPROVED
    assert parse_status("pending_review") is ListingStatus.PENDING_REVIEW
    for bad in (4, -1, "published", True, None):
        with pytest.raises(BadRequest):
            parse_status(bad)


def test_parse_decision():
    assert parse_decision(2) is ReviewDecision.APPROVED
    assert parse_decision("Rejected") is ReviewDecision.REJECTED
    assert ReviewDecision.REJECTED.target_status is ListingStatus.REJECTED
    for bad in (0, 1, "maybe", None, False):
        with pytest.raises(BadRequest):
            parse_decision(bad)


def test_is_moderator_uses_configured_level():
    assert is_moderator(settings.moderator_permission_level)
    assert not is_moderator(settings.moderator_permission_level + 1)
    assert not is_moderator(None)
