"""
Application Error Codes

Stable error codes returned inside Result errors, plus the exceptions
raised by infrastructure that use cases or the API layer translate.
"""


class ErrorCode:
    # InvalidInput
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_OR_EXPIRED_TOKEN = "INVALID_OR_EXPIRED_TOKEN"
    TWO_FACTOR_NOT_INITIATED = "TWO_FACTOR_NOT_INITIATED"
    TWO_FACTOR_NOT_ENABLED = "TWO_FACTOR_NOT_ENABLED"

    # Conflict
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    USERNAME_ALREADY_EXISTS = "USERNAME_ALREADY_EXISTS"
    TWO_FACTOR_ALREADY_ENABLED = "TWO_FACTOR_ALREADY_ENABLED"

    # Unauthorized
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    INVALID_TWO_FACTOR_CODE = "INVALID_TWO_FACTOR_CODE"
    INCORRECT_PASSWORD = "INCORRECT_PASSWORD"

    # Locked
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"

    # Forbidden
    ACCOUNT_DISABLED = "ACCOUNT_DISABLED"

    # NotFound
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"

    # RateLimited
    RATE_LIMITED = "RATE_LIMITED"

    # Unavailable
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    # Internal
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ServiceUnavailableError(Exception):
    """A dependency (store, password hasher) did not answer in time."""


class DuplicateRecordError(Exception):
    """A unique constraint was violated by the record store."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Duplicate value for {field}")
