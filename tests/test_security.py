"""Tests for strongroom.core.security: password hashing and access tokens."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import jwt
from pydantic import SecretStr

from strongroom.core.config import Settings
from strongroom.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswords(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch("strongroom.core.security.BCRYPT_ROUNDS", 4)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_hash_and_verify(self) -> None:
        hashed = hash_password("secret123")
        self.assertNotEqual(hashed, "secret123")
        self.assertTrue(verify_password("secret123", hashed))
        self.assertFalse(verify_password("secret124", hashed))

    def test_non_bcrypt_hash_never_verifies(self) -> None:
        self.assertFalse(verify_password("secret123", "plain-text"))


class TestAccessTokens(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = Settings(_env_file=None, JWT_SECRET=SecretStr("test-secret"))

    def test_round_trip_claims(self) -> None:
        token = create_access_token("user-1", "role-1", self.settings)
        claims = decode_access_token(token, self.settings)
        self.assertEqual(claims.user_id, "user-1")
        self.assertEqual(claims.role_id, "role-1")
        self.assertGreater(claims.expires_at, datetime.now(UTC))

    def test_wrong_secret_is_rejected(self) -> None:
        token = create_access_token("user-1", None, self.settings)
        other = Settings(_env_file=None, JWT_SECRET=SecretStr("another-secret"))
        with self.assertRaises(jwt.PyJWTError):
            decode_access_token(token, other)

    def test_expired_token_is_rejected(self) -> None:
        token = jwt.encode(
            {"sub": "user-1", "exp": datetime.now(UTC) - timedelta(minutes=1)},
            "test-secret",
            algorithm="HS256",
        )
        with self.assertRaises(jwt.ExpiredSignatureError):
            decode_access_token(token, self.settings)

    def test_token_without_subject_is_rejected(self) -> None:
        token = jwt.encode(
            {"exp": datetime.now(UTC) + timedelta(minutes=5)}, "test-secret", algorithm="HS256"
        )
        with self.assertRaises(jwt.PyJWTError):
            decode_access_token(token, self.settings)


if __name__ == "__main__":
    unittest.main()
