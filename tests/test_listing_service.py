import pytest


async def _create(client, user_id=1, listing_type="rent", price=1000):
    r = await client.post(
        "/listings",
        data={"user_id": str(user_id), "listing_type": listing_type, "price": str(price)},
    )
    assert r.status_code == 200, r.text
    return r.json()["data"]["listing"]


@pytest.mark.asyncio
async def test_create_listing(listing_client):
    listing = await _create(listing_client, user_id=3, listing_type="sale", price=250000)

    assert listing["id"] == 1
    assert listing["user_id"] == 3
    assert listing["listing_type"] == "sale"
    assert listing["price"] == 250000
    assert listing["created_at"] == listing["updated_at"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "form, error",
    [
        ({"listing_type": "rent", "price": "10"}, "user_id is required"),
        ({"user_id": "x", "listing_type": "rent", "price": "10"}, "user_id must be a valid integer"),
        ({"user_id": "1", "price": "10"}, "listing_type is required"),
        ({"user_id": "1", "listing_type": "rent"}, "price is required"),
        ({"user_id": "1", "listing_type": "rent", "price": "1.5"}, "price must be a valid integer"),
        ({"user_id": "1", "listing_type": "lease", "price": "10"}, "listing_type must be either 'rent' or 'sale'"),
        ({"user_id": "1", "listing_type": "rent", "price": "0"}, "price must be greater than 0"),
    ],
)
async def test_create_listing_rejects_bad_input(listing_client, form, error):
    r = await listing_client.post("/listings", data=form)
    assert r.status_code == 400
    assert r.json() == {"result": False, "errors": [error]}


@pytest.mark.asyncio
async def test_list_listings_second_page(listing_client):
    for i in range(12):
        await _create(listing_client, price=100 + i)

    r = await listing_client.get("/listings", params={"page_num": 2, "page_size": 5})
    assert r.status_code == 200
    ids = [row["id"] for row in r.json()["data"]["listings"]]

    # newest first: 12..8 on page one, 2 and 1 on page three
    assert ids == [7, 6, 5, 4, 3]


@pytest.mark.asyncio
async def test_list_listings_defaults_to_ten(listing_client):
    for _ in range(12):
        await _create(listing_client)

    r = await listing_client.get("/listings")
    rows = r.json()["data"]["listings"]
    assert len(rows) == 10
    assert rows[0]["id"] == 12


@pytest.mark.asyncio
async def test_list_listings_user_filter(listing_client):
    mine = await _create(listing_client, user_id=1)
    await _create(listing_client, user_id=2)

    r = await listing_client.get("/listings", params={"user_id": 1})
    assert [row["id"] for row in r.json()["data"]["listings"]] == [mine["id"]]

    r = await listing_client.get("/listings", params={"user_id": 99})
    assert r.json()["data"]["listings"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params, error",
    [
        ({"page_num": "0"}, "page_num must be a positive integer"),
        ({"page_num": "abc"}, "page_num must be a positive integer"),
        ({"page_size": "-3"}, "page_size must be a positive integer"),
        ({"user_id": "me"}, "user_id must be a valid integer"),
    ],
)
async def test_list_listings_rejects_bad_params(listing_client, params, error):
    r = await listing_client.get("/listings", params=params)
    assert r.status_code == 400
    assert r.json()["errors"] == [error]


@pytest.mark.asyncio
async def test_unsupported_method(listing_client):
    r = await listing_client.put("/listings")
    assert r.status_code == 405
    assert r.json() == {"result": False, "errors": ["method not allowed"]}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "form, error",
    [
        ({"user_id": "1", "listing_type": "rent", "price": "99999999999999999999"}, "price must be a valid integer"),
        ({"user_id": "9223372036854775808", "listing_type": "rent", "price": "10"}, "user_id must be a valid integer"),
    ],
)
async def test_create_listing_rejects_out_of_range_integers(listing_client, form, error):
    r = await listing_client.post("/listings", data=form)
    assert r.status_code == 400
    assert r.json() == {"result": False, "errors": [error]}


@pytest.mark.asyncio
async def test_create_listing_accepts_int64_max_price(listing_client):
    listing = await _create(listing_client, price=2**63 - 1)
    assert listing["price"] == 2**63 - 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params, error",
    [
        ({"page_size": "99999999999999999999"}, "page_size must be a positive integer"),
        ({"user_id": "-99999999999999999999"}, "user_id must be a valid integer"),
    ],
)
async def test_list_listings_rejects_out_of_range_params(listing_client, params, error):
    r = await listing_client.get("/listings", params=params)
    assert r.status_code == 400
    assert r.json()["errors"] == [error]
