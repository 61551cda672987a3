"""
Error taxonomy for form actions.

Every failure of a user action ends up as one of the ``RegistrationError``
subclasses below; routes convert them to a ``FormResponse`` carrying the
message and the matching HTTP status.
"""
from typing import Optional


PERMISSION_MESSAGE = (
    "Row Level Security policy error. Please contact administrator or check "
    "the table policies in the backend."
)
AUTHENTICATION_MESSAGE = "Authentication error. Please check the backend API key."
NOT_CONFIGURED_MESSAGE = (
    "Backend is not configured yet. Please contact the administrator."
)
SESSION_UNAVAILABLE_MESSAGE = "Session service is unavailable. Please try again later."


class StoreError(Exception):
    """Raised by the store adapter for any failed remote call."""

    def __init__(self, message: str, code: Optional[str] = None,
                 status: Optional[int] = None, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.details = details


class RegistrationError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(RegistrationError):
    status_code = 422


class RegistrationClosedError(RegistrationError):
    status_code = 403


class RecordLookupError(RegistrationError):
    status_code = 404


class ConflictError(RegistrationError):
    status_code = 409


class ConfigurationError(RegistrationError):
    status_code = 503

    def __init__(self, message: str = NOT_CONFIGURED_MESSAGE):
        super().__init__(message)


class UnknownRemoteError(RegistrationError):
    status_code = 502


class SessionUnavailableError(RegistrationError):
    status_code = 503

    def __init__(self, message: str = SESSION_UNAVAILABLE_MESSAGE):
        super().__init__(message)


def is_conflict(err: StoreError) -> bool:
    message = (err.message or "").lower()
    return err.code == "23505" or "duplicate" in message or "unique" in message


def classify_store_error(err: StoreError, conflict_message: str) -> RegistrationError:
    """
    Maps a failed insert to the error shown to the user.

    :param err: Error raised by the store adapter.
    :param conflict_message: Event specific text for duplicate-key failures.
    :return: The ``RegistrationError`` to raise.
    """
    if is_conflict(err):
        return ConflictError(conflict_message)
    if err.code in ("PGRST116", "42501"):
        return UnknownRemoteError(PERMISSION_MESSAGE)
    if err.status == 401 or err.code == "PGRST301":
        return UnknownRemoteError(AUTHENTICATION_MESSAGE)
    if "row-level security" in (err.message or "").lower():
        return UnknownRemoteError(PERMISSION_MESSAGE)
    if err.message:
        return UnknownRemoteError(f"Error: {err.message}")
    return UnknownRemoteError("An error occurred while submitting. Please try again later.")
