"""Error kinds surfaced to callers of the quest engine."""

from __future__ import annotations


class HunterError(Exception):
    """Base class for every error the engine reports to a caller."""


class ValidationError(HunterError):
    """Bad input; account state is unchanged."""


class AuthenticationError(HunterError):
    """Login failed. Subclasses say why; the message never does."""

    def __init__(self, message: str = "invalid username or password"):
        super().__init__(message)


class UnknownAccountError(AuthenticationError):
    pass


class InvalidCredentialsError(AuthenticationError):
    pass


class ConflictError(HunterError):
    """Username already registered."""


class StorageError(HunterError):
    """Reading or writing an account record failed."""
