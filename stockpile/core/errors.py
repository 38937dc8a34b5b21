"""Exception taxonomy and error classification for user-facing replies."""

from enum import Enum, StrEnum

from pydantic import BaseModel

from stockpile.core import message_templates


class ValidationErrorKind(StrEnum):
    """Which field rule rejected a registration input."""

    INVALID_CATEGORY = "invalid_category"
    EMPTY_NAME = "empty_name"
    NAME_TOO_LONG = "name_too_long"
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_DATE_FORMAT = "invalid_date_format"
    PAST_DATE = "past_date"


class StockpileError(Exception):
    """Base class for errors raised by stockpile services."""


class FieldValidationError(StockpileError, ValueError):
    """A single registration field failed its validation rule.

    Always recovered inside the registration flow by re-prompting the same step.
    """

    def __init__(self, kind: ValidationErrorKind, value: str) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"{kind.value}: {value!r}")


class ItemNotFoundError(StockpileError, LookupError):
    """The requested stock item does not exist for this owner."""

    def __init__(self, user_id: str, item_id: str) -> None:
        self.user_id = user_id
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class StoreError(StockpileError):
    """A store write or read failed (item create, update, delete or scan, or a session write)."""


class DispatchError(StockpileError):
    """A notification batch could not be delivered to one user."""

    def __init__(self, user_id: str, offset_days: int, reason: str) -> None:
        self.user_id = user_id
        self.offset_days = offset_days
        self.reason = reason
        super().__init__(f"Delivery to {user_id} (offset {offset_days}) failed: {reason}")


class AuthenticationError(StockpileError):
    """Inbound webhook signature did not match the channel secret."""


class PostbackDecodeError(StockpileError, ValueError):
    """Postback data could not be decoded into a known action."""


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_ITEM_NOT_FOUND = "ERR_ITEM_NOT_FOUND"
    ERR_INVALID_INPUT = "ERR_INVALID_INPUT"
    ERR_UNKNOWN_ACTION = "ERR_UNKNOWN_ACTION"
    ERR_STORE_FAILURE = "ERR_STORE_FAILURE"
    ERR_DELIVERY_FAILURE = "ERR_DELIVERY_FAILURE"
    ERR_AUTHENTICATION_FAILED = "ERR_AUTHENTICATION_FAILED"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with a user-facing message."""

    code: str
    message: str
    severity: ErrorSeverity


def classify_error(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an exception and return the reply a user should see.

    Args:
        exception: The exception raised while processing a turn

    Returns:
        ErrorResponse with code, message and severity
    """
    if isinstance(exception, ItemNotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_ITEM_NOT_FOUND,
            message=message_templates.ITEM_NOT_FOUND,
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, FieldValidationError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_INPUT,
            message=message_templates.validation_error(exception.kind),
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, PostbackDecodeError):
        return ErrorResponse(
            code=ErrorCode.ERR_UNKNOWN_ACTION,
            message=message_templates.UNKNOWN_ACTION,
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, StoreError):
        return ErrorResponse(
            code=ErrorCode.ERR_STORE_FAILURE,
            message=message_templates.ERROR_GENERAL,
            severity=ErrorSeverity.HIGH,
        )

    if isinstance(exception, DispatchError):
        return ErrorResponse(
            code=ErrorCode.ERR_DELIVERY_FAILURE,
            message=message_templates.ERROR_GENERAL,
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, AuthenticationError):
        return ErrorResponse(
            code=ErrorCode.ERR_AUTHENTICATION_FAILED,
            message=message_templates.ERROR_GENERAL,
            severity=ErrorSeverity.CRITICAL,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message=message_templates.ERROR_GENERAL,
        severity=ErrorSeverity.MEDIUM,
    )
