import pytest

from fixtures_seed import make_listing


@pytest.fixture
async def catalog(db_session, seed_users, seed_geo):
    owner_id = seed_users["owner"]["id"]
    approved = [
        await make_listing(
            db_session, user_id=owner_id, status=2, title="Sea View Villa", property_type=2,
            operation_type=0, state_id=1, municipality_id=10, seller_price=450000, rooms=5, stories=2, total_area=320,
        ),
        await make_listing(
            db_session, user_id=owner_id, status=2, title="City flat", property_type=1,
            operation_type=1, state_id=1, municipality_id=11, seller_price=900, rooms=2, stories=1, total_area=75,
        ),
        await make_listing(
            db_session, user_id=owner_id, status=2, title="Mountain villa retreat", property_type=2,
            operation_type=0, state_id=2, municipality_id=20, seller_price=300000, rooms=4, stories=3, total_area=250,
        ),
    ]
    # same shape as the villas, but never public
    for status in (0, 1, 3):
        await make_listing(
            db_session, user_id=owner_id, status=status, title="Hidden villa", property_type=2,
            operation_type=0, state_id=1, municipality_id=10, seller_price=400000, rooms=5, stories=2, total_area=300,
        )
    return approved


def _titles(r) -> list[str]:
    return [item["title"] for item in r.json()["data"]]


@pytest.mark.asyncio
async def test_search_only_returns_approved(client, catalog):
    r = await client.get("/v1/listings", params={"query": "villa"})
    assert r.status_code == 200, r.text
    assert sorted(_titles(r)) == ["Mountain villa retreat", "Sea View Villa"]
    assert all(item["status"] == 2 for item in r.json()["data"])


@pytest.mark.asyncio
async def test_search_default_sort_is_newest_first(client, catalog):
    r = await client.get("/v1/listings")
    assert [item["id"] for item in r.json()["data"]] == [c.id for c in reversed(catalog)]
    assert r.json()["pagination"] == {"total": 3, "page": 1, "limit": 12, "totalPages": 1}


@pytest.mark.asyncio
async def test_search_equality_filters(client, catalog):
    r = await client.get("/v1/listings", params={"property_type": 2, "state_id": 1})
    assert _titles(r) == ["Sea View Villa"]

    r = await client.get("/v1/listings", params={"operation_type": 1})
    assert _titles(r) == ["City flat"]

    r = await client.get("/v1/listings", params={"municipality_id": 20})
    assert _titles(r) == ["Mountain villa retreat"]


@pytest.mark.asyncio
async def test_search_range_filters(client, catalog):
    r = await client.get("/v1/listings", params={"min_price": 1000, "max_price": 350000})
    assert _titles(r) == ["Mountain villa retreat"]

    r = await client.get("/v1/listings", params={"min_rooms": 4, "min_stories": 3})
    assert _titles(r) == ["Mountain villa retreat"]

    r = await client.get("/v1/listings", params={"min_area": 100, "max_area": 300})
    assert _titles(r) == ["Mountain villa retreat"]


@pytest.mark.asyncio
async def test_search_title_is_case_insensitive_substring(client, catalog):
    r = await client.get("/v1/listings", params={"query": "  SEA view "})
    assert _titles(r) == ["Sea View Villa"]

    r = await client.get("/v1/listings", params={"query": "100%"})
    assert r.json()["data"] == []


@pytest.mark.asyncio
async def test_search_sort_override(client, catalog):
    r = await client.get("/v1/listings", params={"sort_by": "seller_price", "sort_order": "asc"})
    assert _titles(r) == ["City flat", "Mountain villa retreat", "Sea View Villa"]

    r = await client.get("/v1/listings", params={"sort_by": "seller_price"})
    assert _titles(r) == ["Sea View Villa", "Mountain villa retreat", "City flat"]


@pytest.mark.asyncio
async def test_search_rejects_unknown_sort_field(client, catalog):
    r = await client.get("/v1/listings", params={"sort_by": "user_id"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_search_pagination(client, catalog):
    r = await client.get("/v1/listings", params={"page": 2, "limit": 2})
    body = r.json()
    assert len(body["data"]) == 1
    assert body["pagination"] == {"total": 3, "page": 2, "limit": 2, "totalPages": 2}

    r = await client.get("/v1/listings", params={"page": 5, "limit": 2})
    body = r.json()
    assert body["data"] == []
    assert body["pagination"]["total"] == 3
    assert body["pagination"]["totalPages"] == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 1000}])
async def test_search_rejects_bad_paging(client, params):
    r = await client.get("/v1/listings", params=params)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_search_empty_catalog(client):
    r = await client.get("/v1/listings")
    assert r.status_code == 200
    assert r.json() == {"data": [], "pagination": {"total": 0, "page": 1, "limit": 12, "totalPages": 0}}


@pytest.mark.asyncio
async def test_search_sort_order_is_case_insensitive(client, catalog):
    r = await client.get("/v1/listings", params={"sort_by": "seller_price", "sort_order": "ASC"})
    assert r.status_code == 200, r.text
    assert _titles(r) == ["City flat", "Mountain villa retreat", "Sea View Villa"]


@pytest.mark.asyncio
@pytest.mark.parametrize("order", ["sideways", "ascending", ""])
async def test_search_rejects_unknown_sort_order(client, catalog, order):
    r = await client.get("/v1/listings", params={"sort_by": "seller_price", "sort_order": order})
    assert r.status_code == 400
    assert r.json()["detail"] == f"Unsupported sort order: {order}"
