"""Failure kinds raised by the party engine.

Callers are expected to catch :class:`PartyError` (or a specific subclass)
and decide for themselves whether a retry is safe; the engine never retries.
"""


class PartyError(Exception):
    """Base exception for party engine errors."""
    pass


class NotFoundError(PartyError):
    """Raised when a party, user or song does not exist."""
    pass


class InvalidInputError(PartyError):
    """Raised for malformed arguments such as a wrong song count or round number."""
    pass


class AlreadyStartedError(InvalidInputError):
    """Raised when starting a competition that is already running."""
    pass


class NoSongsError(PartyError):
    """Raised when starting a competition with an empty song pool."""
    pass


class NotRevealedError(PartyError):
    """Raised when asking for the owners of a round that has not been revealed."""
    pass


class UnauthorizedError(PartyError):
    """Raised when an admin-only action is attempted with the wrong token."""
    pass


class StorageFailureError(PartyError):
    """Raised when the database rejects a read or write."""
    pass
