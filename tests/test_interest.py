import uuid

import config
from conftest import auth


async def test_member_registers_interest(client, register, create_produce):
    farmer_token, _ = await register("Farmer")
    produce = await create_produce(farmer_token, quantity=5)
    await register("Admin", community_name="Elm Court")
    user_token, user = await register("User", community_name="Elm Court")

    # Interest may exceed stock
    resp = await client.post(
        "/interest", json={"product_id": produce["id"], "quantity": 50}, headers=auth(user_token)
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["user_id"] == user["id"]
    assert body["product_id"] == produce["id"]
    assert body["quantity"] == 50


async def test_interest_in_missing_produce(client, register):
    await register("Admin", community_name="Elm Court")
    user_token, _ = await register("User", community_name="Elm Court")

    resp = await client.post(
        "/interest", json={"product_id": str(uuid.uuid4()), "quantity": 1}, headers=auth(user_token)
    )

    assert resp.status_code == 404


async def test_interest_requires_positive_quantity(client, register, create_produce):
    farmer_token, _ = await register("Farmer")
    produce = await create_produce(farmer_token)
    await register("Admin", community_name="Elm Court")
    user_token, _ = await register("User", community_name="Elm Court")

    resp = await client.post(
        "/interest", json={"product_id": produce["id"], "quantity": 0}, headers=auth(user_token)
    )

    assert resp.status_code == 400


async def test_only_members_register_interest(client, register, create_produce):
    farmer_token, _ = await register("Farmer")
    produce = await create_produce(farmer_token)
    admin_token, _ = await register("Admin", community_name="Elm Court")

    for token in (farmer_token, admin_token):
        resp = await client.post(
            "/interest", json={"product_id": produce["id"], "quantity": 1}, headers=auth(token)
        )
        assert resp.status_code == 403


async def test_duplicate_interests_allowed_by_default(client, register, create_produce):
    farmer_token, _ = await register("Farmer")
    produce = await create_produce(farmer_token)
    await register("Admin", community_name="Elm Court")
    user_token, _ = await register("User", community_name="Elm Court")

    for qty in (1, 2):
        resp = await client.post(
            "/interest", json={"product_id": produce["id"], "quantity": qty}, headers=auth(user_token)
        )
        assert resp.status_code == 201

    mine = await client.get("/interest/me", headers=auth(user_token))
    assert sorted(i["quantity"] for i in mine.json()) == [1, 2]


async def test_duplicate_interests_rejected_when_disabled(client, register, create_produce, monkeypatch):
    monkeypatch.setattr(config, "ALLOW_DUPLICATE_INTERESTS", False)
    farmer_token, _ = await register("Farmer")
    produce = await create_produce(farmer_token)
    await register("Admin", community_name="Elm Court")
    user_token, _ = await register("User", community_name="Elm Court")

    first = await client.post(
        "/interest", json={"product_id": produce["id"], "quantity": 1}, headers=auth(user_token)
    )
    second = await client.post(
        "/interest", json={"product_id": produce["id"], "quantity": 2}, headers=auth(user_token)
    )

    assert first.status_code == 201
    assert second.status_code == 409


async def test_admin_lists_all_interests_with_names(client, register, create_produce):
    farmer_token, _ = await register("Farmer")
    produce = await create_produce(farmer_token, name="Guavas")
    admin_token, _ = await register("Admin", community_name="Elm Court")
    await register("Admin", community_name="Birch Lane")
    user_token, _ = await register("User", community_name="Elm Court", name="Kiran")
    other_token, _ = await register("User", community_name="Birch Lane", name="Lena")

    for token in (user_token, other_token):
        await client.post("/interest", json={"product_id": produce["id"], "quantity": 1}, headers=auth(token))

    resp = await client.get("/interest", headers=auth(admin_token))

    assert resp.status_code == 200
    assert sorted(i["user_name"] for i in resp.json()) == ["Kiran", "Lena"]
    assert {i["product_name"] for i in resp.json()} == {"Guavas"}


async def test_interest_me_is_scoped_to_caller(client, register, create_produce):
    farmer_token, _ = await register("Farmer")
    produce = await create_produce(farmer_token)
    await register("Admin", community_name="Elm Court")
    user_token, _ = await register("User", community_name="Elm Court")
    other_token, _ = await register("User", community_name="Elm Court")

    await client.post("/interest", json={"product_id": produce["id"], "quantity": 7}, headers=auth(other_token))

    resp = await client.get("/interest/me", headers=auth(user_token))

    assert resp.status_code == 200
    assert resp.json() == []
