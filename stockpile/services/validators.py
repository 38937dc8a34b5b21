"""Field validators for the registration flow.

Each validator takes the raw user input and returns the normalized value, or
raises FieldValidationError naming the rule that failed.
"""

import re
from datetime import date

from stockpile.core import dates
from stockpile.core.config import Constants
from stockpile.core.errors import FieldValidationError, ValidationErrorKind
from stockpile.domain.stock import Category


_DIGITS_PATTERN = re.compile(r"[0-9]+")


def validate_category(text: str) -> Category:
    """Exact membership in the category enumeration (no trimming, no case folding)."""
    try:
        return Category(text)
    except ValueError:
        raise FieldValidationError(ValidationErrorKind.INVALID_CATEGORY, text) from None


def validate_name(text: str) -> str:
    name = text.strip()
    if not name:
        raise FieldValidationError(ValidationErrorKind.EMPTY_NAME, text)
    if len(name) > Constants.MAX_NAME_LENGTH:
        raise FieldValidationError(ValidationErrorKind.NAME_TOO_LONG, text)
    return name


def validate_quantity(text: str) -> int:
    """Parse ASCII digits into a quantity from 1 to MAX_QUANTITY (e.g. "3"; not "+2", " 5", "2.5" or "0")."""
    if not _DIGITS_PATTERN.fullmatch(text):
        raise FieldValidationError(ValidationErrorKind.INVALID_QUANTITY, text)

    # Leading zeros are allowed, so compare significant digits before converting
    significant = text.lstrip("0")
    if len(significant) > len(str(Constants.MAX_QUANTITY)):
        raise FieldValidationError(ValidationErrorKind.INVALID_QUANTITY, text)

    quantity = int(significant or "0")
    if not 1 <= quantity <= Constants.MAX_QUANTITY:
        raise FieldValidationError(ValidationErrorKind.INVALID_QUANTITY, text)
    return quantity


def validate_expiry_date(text: str, *, today: date | None = None) -> date:
    """Validate a YYYY-MM-DD expiry date that is today or later.

    The format check runs first, so "2023-02-30" is a format error even though
    it is also in the past.

    Args:
        text: Raw user input
        today: Reference date (defaults to today in the configured timezone)

    Returns:
        The parsed date

    Raises:
        FieldValidationError: INVALID_DATE_FORMAT or PAST_DATE
    """
    parsed = dates.parse_iso_date(text)
    if parsed is None:
        raise FieldValidationError(ValidationErrorKind.INVALID_DATE_FORMAT, text)

    if parsed < (today or dates.today()):
        raise FieldValidationError(ValidationErrorKind.PAST_DATE, text)
    return parsed
