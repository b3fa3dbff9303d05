"""
Application error codes and infrastructure failures.

Codes travel inside ``libs.result.Error`` and are mapped to HTTP statuses by
the routers. The exceptions below are raised by best-effort collaborators
(email, realtime push) and never escape a security flow.
"""


class ErrorCode:
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    ACCOUNT_DISABLED = "ACCOUNT_DISABLED"
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    PASSWORD_MISMATCH = "PASSWORD_MISMATCH"

    TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_ALREADY_USED = "TOKEN_ALREADY_USED"
    INVALID_TOKEN = "INVALID_TOKEN"

    TWO_FACTOR_ALREADY_ENABLED = "TWO_FACTOR_ALREADY_ENABLED"
    TWO_FACTOR_NOT_ENABLED = "TWO_FACTOR_NOT_ENABLED"
    INVALID_TWO_FACTOR_CODE = "INVALID_TWO_FACTOR_CODE"

    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    SESSION_REVOKED = "SESSION_REVOKED"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"


TOKEN_FAILURE_CODES = (
    ErrorCode.TOKEN_NOT_FOUND,
    ErrorCode.TOKEN_EXPIRED,
    ErrorCode.TOKEN_ALREADY_USED,
)


class EmailDeliveryError(Exception):
    """Email could not be handed to the delivery provider"""


class NotificationDeliveryError(Exception):
    """Realtime event could not be queued for delivery"""
