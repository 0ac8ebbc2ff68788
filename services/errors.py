# services/errors.py
from typing import Optional


class ChallengeError(Exception):
    """Base class for errors surfaced to the user as a short message"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ChallengeError):
    status_code = 400


class InvalidWeight(ValidationError):
    def __init__(self, message: str = "Weight must be between 30 and 300 kg"):
        super().__init__(message)


class DuplicateRegistration(ChallengeError):
    status_code = 409

    def __init__(self, message: str = "Mobile number already registered"):
        super().__init__(message)


class ParticipantNotFound(ChallengeError):
    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class AccessDenied(ChallengeError):
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class PersistenceFailure(ChallengeError):
    """A backend call failed. The user resubmits manually; nothing is retried."""
    status_code = 503

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
