"""Tests for strongroom.services.users: email uniqueness policy, updates, status and credentials."""

import unittest
from unittest.mock import patch

from strongroom.core.config import Settings
from strongroom.core.errors import ConflictError, NotFoundError
from strongroom.models import Role, UserStatus
from strongroom.schemas.user import UserCreate, UserRead, UserUpdate
from strongroom.services import users as user_service
from strongroom.services.query import compose_query
from tests.support import sqlite_session_factory


class UserServiceTestCase(unittest.TestCase):
    email_reuse = False

    def setUp(self) -> None:
        patcher = patch("strongroom.core.security.BCRYPT_ROUNDS", 4)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.db = sqlite_session_factory()()
        self.settings = Settings(_env_file=None, EMAIL_REUSE_AFTER_SOFT_DELETE=self.email_reuse)

    def tearDown(self) -> None:
        self.db.close()

    def _create(self, email: str = "alice@example.com", **kwargs):
        body = UserCreate(email=email, password="secret123", **kwargs)
        return user_service.create_user(self.db, body, self.settings)


class TestCreateUser(UserServiceTestCase):
    def test_password_is_hashed_and_never_serialized(self) -> None:
        user = self._create(name="Alice")
        self.assertNotEqual(user.password_hash, "secret123")
        self.assertEqual(user.status, UserStatus.ACTIVE)
        dumped = UserRead.model_validate(user).model_dump(by_alias=True)
        self.assertNotIn("passwordHash", dumped)
        self.assertNotIn("password_hash", dumped)
        self.assertEqual(dumped["email"], "alice@example.com")

    def test_duplicate_live_email_conflicts(self) -> None:
        self._create()
        with self.assertRaises(ConflictError):
            self._create()

    def test_unknown_role_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            self._create(role_id="no-such-role")

    def test_known_role_is_assigned(self) -> None:
        role = Role(name="editor")
        self.db.add(role)
        self.db.commit()
        user = self._create(role_id=role.id)
        self.assertEqual(user.role_id, role.id)


class TestEmailReservedAfterSoftDelete(UserServiceTestCase):
    """Default policy: a soft-deleted user's email stays reserved."""

    def test_create_with_soft_deleted_email_conflicts(self) -> None:
        user = self._create()
        user_service.soft_delete_user(self.db, user.id)
        with self.assertRaises(ConflictError):
            self._create()

    def test_update_to_soft_deleted_email_conflicts(self) -> None:
        gone = self._create()
        user_service.soft_delete_user(self.db, gone.id)
        other = self._create(email="bob@example.com")
        with self.assertRaises(ConflictError):
            user_service.update_user(
                self.db, other.id, UserUpdate(email="alice@example.com"), self.settings
            )

    def test_restore_keeps_email(self) -> None:
        user = self._create()
        user_service.soft_delete_user(self.db, user.id)
        restored = user_service.restore_user(self.db, user.id, self.settings)
        self.assertEqual(restored.email, "alice@example.com")
        self.assertEqual(user_service.get_user(self.db, user.id).id, user.id)


class TestEmailReuseAfterSoftDelete(UserServiceTestCase):
    """With reuse enabled, only live users hold an email."""

    email_reuse = True

    def test_soft_deleted_email_can_be_registered_again(self) -> None:
        first = self._create()
        user_service.soft_delete_user(self.db, first.id)
        second = self._create()
        self.assertNotEqual(first.id, second.id)

    def test_restore_conflicts_when_email_was_taken(self) -> None:
        first = self._create()
        user_service.soft_delete_user(self.db, first.id)
        self._create()
        with self.assertRaises(ConflictError):
            user_service.restore_user(self.db, first.id, self.settings)
        with self.assertRaises(NotFoundError):
            user_service.get_user(self.db, first.id)


class TestUpdateUser(UserServiceTestCase):
    def test_partial_update_leaves_other_fields(self) -> None:
        user = self._create(name="Alice")
        old_hash = user.password_hash
        updated = user_service.update_user(
            self.db, user.id, UserUpdate(name="Alice B"), self.settings
        )
        self.assertEqual(updated.name, "Alice B")
        self.assertEqual(updated.email, "alice@example.com")
        self.assertEqual(updated.password_hash, old_hash)

    def test_email_taken_by_live_user_conflicts(self) -> None:
        self._create()
        bob = self._create(email="bob@example.com")
        with self.assertRaises(ConflictError):
            user_service.update_user(
                self.db, bob.id, UserUpdate(email="alice@example.com"), self.settings
            )

    def test_same_email_is_not_a_conflict(self) -> None:
        user = self._create()
        updated = user_service.update_user(
            self.db, user.id, UserUpdate(email="alice@example.com"), self.settings
        )
        self.assertEqual(updated.email, "alice@example.com")

    def test_new_password_is_rehashed(self) -> None:
        user = self._create()
        user_service.update_user(self.db, user.id, UserUpdate(password="another-pass"), self.settings)
        self.assertIsNone(user_service.validate_credentials(self.db, "alice@example.com", "secret123"))
        self.assertIsNotNone(
            user_service.validate_credentials(self.db, "alice@example.com", "another-pass")
        )

    def test_soft_deleted_user_cannot_be_updated(self) -> None:
        user = self._create()
        user_service.soft_delete_user(self.db, user.id)
        with self.assertRaises(NotFoundError):
            user_service.update_user(self.db, user.id, UserUpdate(name="x"), self.settings)


class TestStatusAndDeletion(UserServiceTestCase):
    def test_status_update(self) -> None:
        user = self._create()
        updated = user_service.update_user_status(self.db, user.id, UserStatus.SUSPENDED)
        self.assertEqual(updated.status, UserStatus.SUSPENDED)
        updated = user_service.update_user_status(self.db, user.id, UserStatus.ACTIVE)
        self.assertEqual(updated.status, UserStatus.ACTIVE)

    def test_status_update_on_soft_deleted_user(self) -> None:
        user = self._create()
        user_service.soft_delete_user(self.db, user.id)
        with self.assertRaises(NotFoundError):
            user_service.update_user_status(self.db, user.id, UserStatus.INACTIVE)

    def test_list_excludes_soft_deleted(self) -> None:
        alice = self._create()
        self._create(email="bob@example.com")
        user_service.soft_delete_user(self.db, alice.id)
        users, total = user_service.list_users(self.db, compose_query({}))
        self.assertEqual(total, 1)
        self.assertEqual([u.email for u in users], ["bob@example.com"])

    def test_hard_delete_frees_the_email(self) -> None:
        user = self._create()
        user_service.hard_delete_user(self.db, user.id)
        with self.assertRaises(NotFoundError):
            user_service.restore_user(self.db, user.id, self.settings)
        self.assertIsNotNone(self._create())


class TestValidateCredentials(UserServiceTestCase):
    def test_matching_password(self) -> None:
        user = self._create()
        found = user_service.validate_credentials(self.db, "alice@example.com", "secret123")
        self.assertEqual(found.id, user.id)

    def test_wrong_password_or_unknown_email(self) -> None:
        self._create()
        self.assertIsNone(user_service.validate_credentials(self.db, "alice@example.com", "nope"))
        self.assertIsNone(user_service.validate_credentials(self.db, "who@example.com", "secret123"))

    def test_soft_deleted_user_cannot_authenticate(self) -> None:
        user = self._create()
        user_service.soft_delete_user(self.db, user.id)
        self.assertIsNone(
            user_service.validate_credentials(self.db, "alice@example.com", "secret123")
        )


if __name__ == "__main__":
    unittest.main()
