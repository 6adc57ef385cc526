from fastapi import HTTPException, status
from config import JWT_SECRET_KEY, JWT_ALGORITHM, JWT_ACCESS_TOKEN_EXPIRE_MINUTES, PASSWORD_HASH_ITERATIONS
from datetime import datetime, timedelta, timezone
import hashlib
import hmac
import secrets
import uuid
import jwt
import logging

logger = logging.getLogger(__name__)

PASSWORD_HASH_SCHEME = "pbkdf2_sha256"


class AuthHelpers:
    """Helper functions for authentication operations"""

    def __init__(self, secret_key: str = None, algorithm: str = JWT_ALGORITHM):
        self._secret_key = secret_key
        self.algorithm = algorithm

    @property
    def secret_key(self) -> str:
        secret_key = self._secret_key or JWT_SECRET_KEY
        if not secret_key:
            raise ValueError("JWT_SECRET_KEY must be set in environment variables")
        return secret_key

    def hash_password(self, password: str, iterations: int = PASSWORD_HASH_ITERATIONS) -> str:
        """Hash a password as pbkdf2_sha256$<iterations>$<salt>$<hex digest>"""
        salt = secrets.token_hex(16)
        digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
        return f"{PASSWORD_HASH_SCHEME}${iterations}${salt}${digest.hex()}"

    def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            scheme, iterations, salt, expected = password_hash.split("$")
        except ValueError:
            logger.warning("Stored password hash has an unexpected format")
            return False

        if scheme != PASSWORD_HASH_SCHEME:
            return False

        digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations))
        return hmac.compare_digest(digest.hex(), expected)

    def create_access_token(self, user_id: uuid.UUID, role: str, expires_minutes: int = None) -> str:
        """Issue a signed access token carrying the user id and role"""
        now = datetime.now(timezone.utc)
        expire = now + timedelta(minutes=expires_minutes or JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
        payload = {
            "sub": str(user_id),
            "role": role,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> dict:
        """
        Verify a bearer token locally.
        Returns {"user_id": UUID, "role": str, "payload": dict}
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": True,
                    "verify_iat": True,
                    "verify_signature": True,
                    "require": ["sub", "exp"]
                }
            )

            try:
                user_id = uuid.UUID(payload.get("sub"))
            except (TypeError, ValueError):
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid token: missing user ID"
                )

            return {
                "user_id": user_id,
                "role": payload.get("role"),
                "payload": payload
            }

        except HTTPException:
            raise
        except jwt.ExpiredSignatureError:
            logger.warning("JWT token expired")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token expired"
            )
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid JWT token: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token"
            )


auth_helpers = AuthHelpers()
