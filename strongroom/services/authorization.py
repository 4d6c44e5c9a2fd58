"""Permission evaluation: a caller holds the grants of their role; a route requires all of its pairs."""

from collections.abc import Iterable

from strongroom.models import Action, Resource, User

Grant = tuple[Resource, Action]


def granted_permissions(user: User) -> frozenset[Grant]:
    """(resource, action) pairs granted through the user's role; empty without a role."""
    if user.role is None:
        return frozenset()
    return frozenset((p.resource, p.action) for p in user.role.permissions)


def missing_permissions(granted: Iterable[Grant], required: Iterable[Grant]) -> list[Grant]:
    """Required pairs absent from granted, in the order they were required."""
    held = set(granted)
    return [pair for pair in required if pair not in held]


def is_authorized(granted: Iterable[Grant], required: Iterable[Grant]) -> bool:
    """True iff every required pair is granted. Nothing required means allowed."""
    return not missing_permissions(granted, required)
