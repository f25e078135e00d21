from datetime import date, datetime
from typing import Union

from .exceptions import ValidationError

DATE_FORMAT = "%Y-%m-%d"

def parse_date(value: Union[date, str]) -> date:
    """Accept a ``date`` or a ``YYYY-MM-DD`` string; nothing else."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), DATE_FORMAT).date()
        except ValueError:
            pass
    raise ValidationError(f"Please enter a valid date: {value!r}")

def require_name(value: str, field: str = "name") -> str:
    """Return the stripped identifier, rejecting empty or non-string values."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must be a non-empty string")
    return value.strip()
