import uuid

from sqlalchemy import func, select

from conftest import auth
from models import Interest, Order, Produce, Tracking


async def test_create_produce(client, register):
    token, farmer = await register("Farmer")

    resp = await client.post(
        "/farmer/create",
        json={"name": "Spinach", "quantity": 30, "price": 1.25, "unit": "bunch", "imageURL": "https://img/spinach.png"},
        headers=auth(token),
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["farmer_id"] == farmer["id"]
    assert body["name"] == "Spinach"
    assert body["image_url"] == "https://img/spinach.png"
    assert body["price"] == 1.25


async def test_create_produce_requires_farmer(client, register):
    token, _ = await register("Admin", community_name="Orchard Row")

    resp = await client.post(
        "/farmer/create", json={"name": "Plums", "quantity": 1, "price": 1, "unit": "kg"}, headers=auth(token)
    )

    assert resp.status_code == 403


async def test_create_produce_rejects_bad_numbers(client, register):
    token, _ = await register("Farmer")

    negative_stock = await client.post(
        "/farmer/create", json={"name": "Plums", "quantity": -1, "price": 1, "unit": "kg"}, headers=auth(token)
    )
    free = await client.post(
        "/farmer/create", json={"name": "Plums", "quantity": 1, "price": 0, "unit": "kg"}, headers=auth(token)
    )

    assert negative_stock.status_code == 400
    assert free.status_code == 400


async def test_catalog_lists_everyones_produce_with_farmer_details(client, register, create_produce):
    farmer_token, farmer = await register("Farmer", name="Meera", location=(76.95, 11.01))
    await create_produce(farmer_token, name="Okra")
    other_token, _ = await register("Farmer")
    await create_produce(other_token, name="Beans")
    admin_token, _ = await register("Admin", community_name="Lakeside")

    resp = await client.get("/farmer", headers=auth(admin_token))

    assert resp.status_code == 200
    listings = {p["name"]: p for p in resp.json()}
    assert set(listings) == {"Okra", "Beans"}
    okra = listings["Okra"]
    assert okra["farmer_name"] == "Meera"
    assert okra["farmer_phone_number"] == farmer["phone_number"]
    assert okra["farmer_location"] == {"type": "Point", "coordinates": [76.95, 11.01]}


async def test_mine_only_returns_own_listings(client, register, create_produce):
    token, _ = await register("Farmer")
    await create_produce(token, name="Carrots")
    other_token, _ = await register("Farmer")
    await create_produce(other_token, name="Beets")

    resp = await client.get("/farmer/mine", headers=auth(token))

    assert [p["name"] for p in resp.json()] == ["Carrots"]


async def test_partial_update(client, register, create_produce):
    token, _ = await register("Farmer")
    produce = await create_produce(token, name="Potatoes", quantity=100, price=0.8)

    resp = await client.put(f"/farmer/update/{produce['id']}", json={"price": 0.95}, headers=auth(token))

    assert resp.status_code == 200
    body = resp.json()
    assert body["price"] == 0.95
    assert body["quantity"] == 100
    assert body["name"] == "Potatoes"


async def test_only_owner_may_update(client, register, create_produce, db_session):
    owner_token, _ = await register("Farmer")
    produce = await create_produce(owner_token, price=2.5)
    intruder_token, _ = await register("Farmer")

    resp = await client.put(f"/farmer/update/{produce['id']}", json={"price": 99}, headers=auth(intruder_token))

    assert resp.status_code == 403
    stored = await db_session.scalar(select(Produce.price).where(Produce.id == uuid.UUID(produce["id"])))
    assert stored == 2.5


async def test_missing_and_foreign_listing_look_the_same(client, register, create_produce):
    owner_token, _ = await register("Farmer")
    produce = await create_produce(owner_token)
    intruder_token, _ = await register("Farmer")

    foreign = await client.delete(f"/farmer/delete/{produce['id']}", headers=auth(intruder_token))
    missing = await client.delete(f"/farmer/delete/{uuid.uuid4()}", headers=auth(intruder_token))

    assert foreign.status_code == missing.status_code == 403
    assert foreign.json() == missing.json()


async def test_delete_removes_interests_and_orders(client, register, create_produce, db_session):
    farmer_token, _ = await register("Farmer")
    produce = await create_produce(farmer_token)
    admin_token, _ = await register("Admin", community_name="Meadow")
    user_token, _ = await register("User", community_name="Meadow")

    for qty in (2, 3):
        resp = await client.post(
            "/interest", json={"product_id": produce["id"], "quantity": qty}, headers=auth(user_token)
        )
        assert resp.status_code == 201
    order = await client.post(f"/order/{produce['id']}", json={"quantity": 5}, headers=auth(admin_token))
    assert order.status_code == 201

    resp = await client.delete(f"/farmer/delete/{produce['id']}", headers=auth(farmer_token))

    assert resp.status_code == 200
    assert resp.json()["id"] == produce["id"]

    produce_id = uuid.UUID(produce["id"])
    assert await db_session.scalar(select(func.count()).select_from(Produce).where(Produce.id == produce_id)) == 0
    assert await db_session.scalar(
        select(func.count()).select_from(Interest).where(Interest.product_id == produce_id)
    ) == 0
    assert await db_session.scalar(select(func.count()).select_from(Order).where(Order.produce_id == produce_id)) == 0
    assert await db_session.scalar(select(func.count()).select_from(Tracking)) == 0


async def test_farmer_orders(client, register, create_produce):
    farmer_token, farmer = await register("Farmer")
    produce = await create_produce(farmer_token)
    other_farmer_token, _ = await register("Farmer")
    admin_token, _ = await register("Admin", community_name="Meadow")

    await client.post(f"/order/{produce['id']}", json={"quantity": 10}, headers=auth(admin_token))

    mine = await client.get("/farmer/orders", headers=auth(farmer_token))
    theirs = await client.get("/farmer/orders", headers=auth(other_farmer_token))

    assert [o["farmer_id"] for o in mine.json()] == [farmer["id"]]
    assert mine.json()[0]["quantity"] == 10
    assert theirs.json() == []
