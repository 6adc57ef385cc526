import uuid

import jwt
import pytest
from fastapi import HTTPException

from dependencies.rbac import has_permission
from routers.auth.helpers import AuthHelpers, auth_helpers


class TestPasswordHashing:
    def test_hash_round_trip(self):
        hashed = auth_helpers.hash_password("hunter22")

        assert hashed.startswith("pbkdf2_sha256$")
        assert "hunter22" not in hashed
        assert auth_helpers.verify_password("hunter22", hashed)
        assert not auth_helpers.verify_password("hunter23", hashed)

    def test_salts_differ(self):
        assert auth_helpers.hash_password("same") != auth_helpers.hash_password("same")

    def test_malformed_hash_is_rejected(self):
        assert not auth_helpers.verify_password("x", "not-a-hash")
        assert not auth_helpers.verify_password("x", "md5$1$salt$abc")


class TestTokens:
    def test_token_carries_user_and_role(self):
        user_id = uuid.uuid4()
        token = auth_helpers.create_access_token(user_id, "Farmer")

        decoded = auth_helpers.verify_token(token)

        assert decoded["user_id"] == user_id
        assert decoded["role"] == "Farmer"
        assert decoded["payload"]["sub"] == str(user_id)

    def test_expired_token(self):
        token = auth_helpers.create_access_token(uuid.uuid4(), "User", expires_minutes=-1)

        with pytest.raises(HTTPException) as exc:
            auth_helpers.verify_token(token)
        assert exc.value.status_code == 401
        assert exc.value.detail == "Token expired"

    def test_token_signed_with_other_key(self):
        token = AuthHelpers(secret_key="another-key").create_access_token(uuid.uuid4(), "Admin")

        with pytest.raises(HTTPException) as exc:
            auth_helpers.verify_token(token)
        assert exc.value.status_code == 401

    def test_token_with_non_uuid_subject(self):
        token = jwt.encode({"sub": "farmer-1", "exp": 4102444800}, auth_helpers.secret_key, algorithm="HS256")

        with pytest.raises(HTTPException) as exc:
            auth_helpers.verify_token(token)
        assert exc.value.status_code == 401

    def test_missing_secret(self, monkeypatch):
        import routers.auth.helpers as helpers_module

        monkeypatch.setattr(helpers_module, "JWT_SECRET_KEY", None)
        with pytest.raises(ValueError):
            AuthHelpers().create_access_token(uuid.uuid4(), "User")


@pytest.mark.parametrize(
    "role, resource, permission, expected",
    [
        ("Farmer", "produce", "write", True),
        ("Farmer", "produce", "delete", True),
        ("Admin", "produce", "write", False),
        ("User", "produce", "read", True),
        ("Admin", "orders", "write", True),
        ("Farmer", "orders", "write", False),
        ("User", "orders", "write", False),
        ("User", "orders/status", "write", True),
        ("User", "interests", "write", True),
        ("Admin", "interests", "write", False),
        ("Admin", "interests/community", "read", True),
        ("User", "interests/community", "read", False),
        ("Farmer", "interests/me", "read", False),
        ("Guest", "produce", "read", False),
    ],
)
def test_role_permissions(role, resource, permission, expected):
    assert has_permission(role, resource, permission) is expected
