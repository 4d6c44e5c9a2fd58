"""Tests for strongroom.services.authorization."""

import unittest
from unittest.mock import MagicMock

from strongroom.models import Action, Resource
from strongroom.services.authorization import (
    granted_permissions,
    is_authorized,
    missing_permissions,
)

USER_READ = (Resource.USER, Action.READ)
USER_UPDATE = (Resource.USER, Action.UPDATE)
FILE_READ = (Resource.FILE, Action.READ)


class TestGrantedPermissions(unittest.TestCase):
    def test_user_without_role_has_nothing(self) -> None:
        user = MagicMock(role=None)
        self.assertEqual(granted_permissions(user), frozenset())

    def test_role_grants_are_collected(self) -> None:
        perms = [MagicMock(resource=r, action=a) for r, a in (USER_READ, FILE_READ)]
        user = MagicMock()
        user.role.permissions = perms
        self.assertEqual(granted_permissions(user), frozenset({USER_READ, FILE_READ}))


class TestIsAuthorized(unittest.TestCase):
    """Every required pair must be granted."""

    def test_all_required_granted(self) -> None:
        self.assertTrue(is_authorized({USER_READ, USER_UPDATE}, [USER_READ, USER_UPDATE]))

    def test_one_missing_denies(self) -> None:
        self.assertFalse(is_authorized({USER_READ}, [USER_READ, USER_UPDATE]))
        self.assertEqual(missing_permissions({USER_READ}, [USER_READ, USER_UPDATE]), [USER_UPDATE])

    def test_nothing_required_is_allowed(self) -> None:
        self.assertTrue(is_authorized(set(), []))

    def test_same_action_on_other_resource_does_not_count(self) -> None:
        self.assertFalse(is_authorized({FILE_READ}, [USER_READ]))


if __name__ == "__main__":
    unittest.main()
