from conftest import auth


def _payload(role, email, community_name=None, location=(77.59, 12.97)):
    payload = {
        "name": f"{role} account",
        "email": email,
        "password": "secret123",
        "role": role,
        "phone_number": "+15550001111",
        "location": {"type": "Point", "coordinates": list(location)},
    }
    if community_name is not None:
        payload["community_name"] = community_name
    return payload


async def test_register_farmer(client):
    resp = await client.post("/auth/register", json=_payload("Farmer", "grower@example.com"))

    assert resp.status_code == 201
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["user"]["role"] == "Farmer"
    assert body["user"]["community_id"] is None
    assert body["user"]["location"] == {"type": "Point", "coordinates": [77.59, 12.97]}
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]


async def test_register_farmer_with_community_name_is_rejected(client):
    resp = await client.post(
        "/auth/register", json=_payload("Farmer", "grower@example.com", community_name="Green Acres")
    )
    assert resp.status_code == 400


async def test_register_admin_requires_community_name(client):
    resp = await client.post("/auth/register", json=_payload("Admin", "admin@example.com"))
    assert resp.status_code == 400


async def test_register_admin_creates_community_and_user_joins_it(client):
    resp = await client.post(
        "/auth/register", json=_payload("Admin", "admin@example.com", community_name="Green Acres")
    )
    assert resp.status_code == 201
    admin = resp.json()["user"]
    assert admin["role"] == "Admin"

    resp = await client.post(
        "/auth/register", json=_payload("User", "buyer@example.com", community_name="Green Acres")
    )
    assert resp.status_code == 201
    member = resp.json()["user"]
    assert member["community_id"] is not None


async def test_register_user_for_unknown_community(client):
    resp = await client.post(
        "/auth/register", json=_payload("User", "buyer@example.com", community_name="Nowhere")
    )
    assert resp.status_code == 404


async def test_register_duplicate_community_name(client):
    first = await client.post(
        "/auth/register", json=_payload("Admin", "a1@example.com", community_name="Green Acres")
    )
    assert first.status_code == 201

    second = await client.post(
        "/auth/register", json=_payload("Admin", "a2@example.com", community_name="Green Acres")
    )
    assert second.status_code == 409


async def test_register_duplicate_email_is_case_insensitive(client):
    first = await client.post("/auth/register", json=_payload("Farmer", "grower@example.com"))
    assert first.status_code == 201

    second = await client.post("/auth/register", json=_payload("Farmer", "Grower@Example.com"))
    assert second.status_code == 409


async def test_register_invalid_role(client):
    resp = await client.post("/auth/register", json=_payload("Supplier", "s@example.com"))
    assert resp.status_code == 400


async def test_register_invalid_coordinates(client):
    resp = await client.post(
        "/auth/register", json=_payload("Farmer", "grower@example.com", location=(200, 12.97))
    )
    assert resp.status_code == 400


async def test_login(client, register):
    await register("Farmer", email="grower@example.com", password="secret123")

    resp = await client.post("/auth/login", json={"email": "grower@example.com", "password": "secret123"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["email"] == "grower@example.com"

    me = await client.get("/user/me", headers=auth(body["access_token"]))
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]


async def test_login_wrong_password_and_unknown_email_look_the_same(client, register):
    await register("Farmer", email="grower@example.com", password="secret123")

    wrong_password = await client.post("/auth/login", json={"email": "grower@example.com", "password": "nope123"})
    unknown_email = await client.post("/auth/login", json={"email": "ghost@example.com", "password": "secret123"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()


async def test_protected_route_without_token(client):
    resp = await client.get("/farmer")
    assert resp.status_code == 401


async def test_protected_route_with_garbage_token(client):
    resp = await client.get("/farmer", headers=auth("not-a-jwt"))
    assert resp.status_code == 401


async def test_token_of_deleted_account_is_rejected(client, register):
    token, _ = await register("Farmer")

    resp = await client.delete("/user/me", headers=auth(token))
    assert resp.status_code == 200

    resp = await client.get("/user/me", headers=auth(token))
    assert resp.status_code == 401
