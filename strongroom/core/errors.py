"""Domain error taxonomy shared by services; mapped to HTTP status codes in main."""


class StrongroomError(Exception):
    """Base class for expected service failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(StrongroomError):
    """Identifier does not resolve to a live entity."""


class ConflictError(StrongroomError):
    """Uniqueness violation, or a state transition the entity's current state forbids."""


class InvalidQueryError(StrongroomError):
    """List query names a field the persistence layer does not know (e.g. an unknown sort column)."""


class StorageError(StrongroomError):
    """
    Persistence or object-store I/O failure.

    The message is safe for logs only; the HTTP layer replaces it with a generic body.
    """
