import pytest
from sqlalchemy import select, func

from listings_hub.core.config import settings
from listings_hub.core.errors import Conflict, Forbidden, Unauthorized
from listings_hub.models.listing import Listing
from listings_hub.models.listing_review import ListingReview
from listings_hub.models.notification import Notification
from listings_hub.services import moderation
from listings_hub.services.auth import Actor
from listings_hub.services.pagination import PageParams

from fixtures_seed import make_listing


async def _count(db_session, model, *where) -> int:
    stmt = select(func.count()).select_from(model)
    if where:
        stmt = stmt.where(*where)
    return (await db_session.execute(stmt)).scalar_one()


@pytest.mark.asyncio
async def test_list_pending_requires_moderator(client, seed_users):
    r = await client.get("/v1/moderation/pending")
    assert r.status_code == 401

    r = await client.get("/v1/moderation/pending", headers=seed_users["owner"]["headers"])
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_list_pending_returns_queue_with_owner_contact(client, db_session, seed_users, seed_geo):
    owner_id = seed_users["owner"]["id"]
    await make_listing(db_session, user_id=owner_id, status=0)
    first = await make_listing(db_session, user_id=owner_id, status=1, title="Older", state_id=1)
    second = await make_listing(db_session, user_id=owner_id, status=1, title="Newer", municipality_id=20)
    await make_listing(db_session, user_id=owner_id, status=2)

    r = await client.get("/v1/moderation/pending", headers=seed_users["moderator"]["headers"])
    assert r.status_code == 200, r.text
    body = r.json()
    assert [item["id"] for item in body["data"]] == [second.id, first.id]
    assert body["pagination"]["total"] == 2
    assert body["data"][0]["owner"] == {
        "id": owner_id,
        "first_name": "Olivia",
        "last_name": "Owner",
        "phone": "+100000001",
    }
    assert body["data"][0]["municipality"]["name"] == "Summit"
    assert body["data"][1]["state"]["name"] == "Riverside"


@pytest.mark.asyncio
async def test_approve_pending_listing(client, db_session, seed_users):
    owner_id = seed_users["owner"]["id"]
    listing = await make_listing(db_session, user_id=owner_id, status=1, title="Garden house")

    r = await client.post(
        "/v1/moderation/reviews",
        headers=seed_users["moderator"]["headers"],
        json={"listing_id": listing.id, "decision": 2},
    )
    assert r.status_code == 201, r.text
    review = r.json()
    assert review["decision"] == 2
    assert review["moderator_id"] == seed_users["moderator"]["id"]
    assert review["reason"] is None

    fresh = await db_session.get(Listing, listing.id, populate_existing=True)
    assert fresh.status == 2
    assert await _count(db_session, ListingReview, ListingReview.listing_id == listing.id) == 1

    notes = (await db_session.execute(select(Notification))).scalars().all()
    assert len(notes) == 1
    assert notes[0].user_id == owner_id
    assert notes[0].listing_id == listing.id
    assert notes[0].is_read is False
    assert "approved" in notes[0].message


@pytest.mark.asyncio
async def test_reject_pending_listing_with_reason(client, db_session, seed_users):
    owner_id = seed_users["owner"]["id"]
    listing = await make_listing(db_session, user_id=owner_id, status=1, title="Loft")

    r = await client.post(
        "/v1/moderation/reviews",
        headers=seed_users["moderator"]["headers"],
        json={"listing_id": listing.id, "decision": "rejected", "reason": "missing photos"},
    )
    assert r.status_code == 201, r.text
    assert r.json()["reason"] == "missing photos"

    fresh = await db_session.get(Listing, listing.id, populate_existing=True)
    assert fresh.status == 3

    review = (await db_session.execute(select(ListingReview))).scalar_one()
    assert review.decision == 3
    assert review.reason == "missing photos"

    note = (await db_session.execute(select(Notification))).scalar_one()
    assert note.user_id == owner_id
    assert "missing photos" in note.message


@pytest.mark.asyncio
@pytest.mark.parametrize("reason", [None, "", "   "])
async def test_reject_requires_reason(client, db_session, seed_users, reason):
    listing = await make_listing(db_session, user_id=seed_users["owner"]["id"], status=1)

    body = {"listing_id": listing.id, "decision": 3}
    if reason is not None:
        body["reason"] = reason
    r = await client.post("/v1/moderation/reviews", headers=seed_users["moderator"]["headers"], json=body)
    assert r.status_code == 400

    fresh = await db_session.get(Listing, listing.id, populate_existing=True)
    assert fresh.status == 1
    assert await _count(db_session, ListingReview) == 0
    assert await _count(db_session, Notification) == 0


@pytest.mark.asyncio
async def test_review_of_non_pending_listing_is_rejected(client, db_session, seed_users):
    listing = await make_listing(db_session, user_id=seed_users["owner"]["id"], status=2)

    r = await client.post(
        "/v1/moderation/reviews",
        headers=seed_users["moderator"]["headers"],
        json={"listing_id": listing.id, "decision": 3, "reason": "late"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Listing is not in pending review status"

    fresh = await db_session.get(Listing, listing.id, populate_existing=True)
    assert fresh.status == 2


@pytest.mark.asyncio
async def test_rejected_listing_is_terminal(client, db_session, seed_users):
    owner = seed_users["owner"]
    listing = await make_listing(db_session, user_id=owner["id"], status=3)

    r = await client.post(f"/v1/listings/{listing.id}/submit", headers=owner["headers"])
    assert r.status_code == 403
    r = await client.post(
        "/v1/moderation/reviews",
        headers=seed_users["moderator"]["headers"],
        json={"listing_id": listing.id, "decision": 2},
    )
    assert r.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body,status",
    [
        ({"decision": 2}, 400),
        ({"listing_id": "", "decision": 2}, 400),
        ({"listing_id": "lst_x", "decision": "maybe"}, 400),
        ({"listing_id": "lst_x"}, 400),
        ({"listing_id": "lst_missing", "decision": 2}, 404),
    ],
)
async def test_review_input_validation(client, seed_users, body, status):
    r = await client.post("/v1/moderation/reviews", headers=seed_users["moderator"]["headers"], json=body)
    assert r.status_code == status


@pytest.mark.asyncio
async def test_review_requires_moderator(client, db_session, seed_users):
    listing = await make_listing(db_session, user_id=seed_users["owner"]["id"], status=1)
    body = {"listing_id": listing.id, "decision": 2}

    r = await client.post("/v1/moderation/reviews", json=body)
    assert r.status_code == 401

    r = await client.post("/v1/moderation/reviews", headers=seed_users["owner"]["headers"], json=body)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_record_review_service_guards(db_session, seed_users):
    with pytest.raises(Unauthorized):
        await moderation.record_review(db_session, actor=None, listing_id="lst_x", decision=2)
    with pytest.raises(Forbidden):
        await moderation.record_review(
            db_session, actor=Actor(user_id="usr_owner", permission_level=0), listing_id="lst_x", decision=2,
        )
    with pytest.raises(Forbidden):
        await moderation.list_pending(
            db_session, actor=Actor(user_id="usr_owner", permission_level=0), params=PageParams(page=1, limit=10),
        )


@pytest.mark.asyncio
async def test_losing_a_review_race_is_a_conflict(db_session, seed_users, monkeypatch):
    listing = await make_listing(db_session, user_id=seed_users["owner"]["id"], status=1)
    listing_id, owner_id = listing.id, listing.user_id
    moderator = Actor(user_id=seed_users["moderator"]["id"], permission_level=settings.moderator_permission_level)

    await moderation.record_review(db_session, actor=moderator, listing_id=listing_id, decision=2)

    # second moderator read the listing while it was still pending
    class _StalePending:
        id = listing_id
        user_id = owner_id
        title = None
        status = 1

    async def _stale_read(db, listing_id, **kwargs):
        return _StalePending()

    monkeypatch.setattr(moderation, "get_listing_or_404", _stale_read)

    with pytest.raises(Conflict):
        await moderation.record_review(
            db_session, actor=moderator, listing_id=listing_id, decision=3, reason="too late",
        )

    fresh = await db_session.get(Listing, listing_id, populate_existing=True)
    assert fresh.status == 2
    assert await _count(db_session, ListingReview) == 1
    assert await _count(db_session, Notification) == 1
