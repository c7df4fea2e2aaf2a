"""
Exception handling utilities.

Defines the domain exception hierarchy used by services. Each class
carries the HTTP status the web layer answers with.
"""


class PlatformError(Exception):
    """Base class for expected domain failures."""

    status_code = 500


class ValidationError(PlatformError):
    """Input failed validation (bad amount, address, tx hash...)."""

    status_code = 400


class InsufficientFundsError(ValidationError):
    """Requested amount exceeds what the user can withdraw."""


class NotFoundError(PlatformError):
    """Referenced user or withdrawal does not exist."""

    status_code = 404


class InvalidStateError(PlatformError):
    """Operation is not allowed in the entity's current state."""

    status_code = 400


class CooldownError(InvalidStateError):
    """Action is rate-limited; retry after the remaining time."""

    def __init__(self, message: str, remaining_hours: int | None = None) -> None:
        super().__init__(message)
        self.remaining_hours = remaining_hours


class DuplicateTransactionError(PlatformError):
    """Transaction id is already credited to another user."""

    status_code = 400
