"""Parsing helpers for request input.

Each helper raises ``ValidationError`` naming the offending field.
"""
import re
from datetime import date
from decimal import Decimal, InvalidOperation

from flask import request

from .errors import ValidationError

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
CENT = Decimal("0.01")
MIN_YEAR = 1970
MAX_YEAR = 2100


def parse_date(value, field="date"):
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise ValidationError.for_field(field, "Invalid date format. Use YYYY-MM-DD")
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        raise ValidationError.for_field(field, "Invalid calendar date")
    if not MIN_YEAR <= parsed.year <= MAX_YEAR:
        raise ValidationError.for_field(field, f"Date must fall between {MIN_YEAR} and {MAX_YEAR}")
    return parsed


def parse_optional_date(value, field="date", default=None):
    if value in (None, ""):
        return default
    return parse_date(value, field)


def parse_amount(value, field="amount", maximum=None, allow_zero=False):
    """Parse a money amount into a ``Decimal`` with at most two fractional digits."""
    if isinstance(value, bool) or value in (None, ""):
        raise ValidationError.for_field(field, "Amount is required and must be a valid number")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError.for_field(field, "Amount is required and must be a valid number")
    if not amount.is_finite():
        raise ValidationError.for_field(field, "Amount must be a finite number")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError.for_field(field, "Amount must be greater than zero")
    if maximum is not None and amount > Decimal(str(maximum)):
        raise ValidationError.for_field(field, f"Amount cannot exceed {maximum}")
    try:
        cents = amount.quantize(CENT)
    except InvalidOperation:
        raise ValidationError.for_field(field, "Amount is out of range")
    if amount != cents:
        raise ValidationError.for_field(field, "Amount cannot have more than 2 decimal places")
    return cents


def parse_int(value, field, default=None, minimum=None, maximum=None):
    if value in (None, ""):
        if default is None:
            raise ValidationError.for_field(field, f"{field} is required")
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError.for_field(field, f"{field} must be an integer")
    if minimum is not None and number < minimum:
        raise ValidationError.for_field(field, f"{field} must be at least {minimum}")
    if maximum is not None and number > maximum:
        raise ValidationError.for_field(field, f"{field} must be at most {maximum}")
    return number


def clean_text(value, field, max_length, required=False):
    if value is None:
        if required:
            raise ValidationError.for_field(field, f"{field.capitalize()} is required")
        return None
    if not isinstance(value, str):
        raise ValidationError.for_field(field, f"{field.capitalize()} must be a string")
    text = value.strip()
    if not text:
        if required:
            raise ValidationError.for_field(field, f"{field.capitalize()} is required")
        return None
    if len(text) > max_length:
        raise ValidationError.for_field(field, f"{field.capitalize()} cannot exceed {max_length} characters")
    return text


def collect(errors, fn, *args, **kwargs):
    """Run ``fn`` and append its field errors to ``errors`` instead of raising."""
    try:
        return fn(*args, **kwargs)
    except ValidationError as err:
        errors.extend(err.details or [{"field": None, "message": err.message}])
        return None


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
