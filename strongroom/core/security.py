"""Credential hashing and bearer-token issue/verification."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from strongroom.core.config import Settings

BCRYPT_ROUNDS = 12
# bcrypt ignores input past 72 bytes.
BCRYPT_MAX_BYTES = 72

PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of an access token."""

    user_id: str
    role_id: str | None
    expires_at: datetime


def _password_bytes(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain_password: str) -> str:
    """bcrypt hash of the password, as text for the password_hash column."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(plain_password), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """False for a mismatch and for a stored value that is not a bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: str, role_id: str | None, settings: Settings) -> str:
    """Signed JWT carrying the user id (sub) and role id, valid for JWT_EXPIRE_MINUTES."""
    issued_at = datetime.now(UTC)
    claims = {
        "sub": user_id,
        "role": role_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    }
    return jwt.encode(
        claims,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str, settings: Settings) -> TokenClaims:
    """
    Verify signature and expiry.

    Raises jwt.PyJWTError for a bad, expired or subject-less token.
    """
    payload = jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )
    user_id = payload["sub"]
    if not isinstance(user_id, str) or not user_id:
        raise jwt.InvalidTokenError("Token subject must be a non-empty string")
    role_id = payload.get("role")
    return TokenClaims(
        user_id=user_id,
        role_id=role_id if isinstance(role_id, str) else None,
        expires_at=datetime.fromtimestamp(payload["exp"], UTC),
    )
