"""
Due date parsing and formatting utilities.
"""

from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..core.exceptions import InvalidDateComponentsError
from ..core.models import DueDate


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """
    Parse a date string into a date object.

    Handles various formats:
    - ISO format (YYYY-MM-DD)
    - ISO datetime (YYYY-MM-DDTHH:MM:SS), time part dropped
    - Single digit month/day (YYYY-M-D)

    Args:
        date_str: Date string to parse

    Returns:
        Parsed date object or None if invalid
    """
    if not date_str:
        return None

    # Take only date part if it's a datetime string
    if 'T' in date_str:
        date_str = date_str.split('T')[0]

    try:
        return datetime.strptime(date_str, '%Y-%m-%d').date()
    except ValueError:
        pass

    try:
        parts = date_str.split('-')
        if len(parts) == 3:
            return date(int(parts[0]), int(parts[1]), int(parts[2]))
    except (ValueError, IndexError):
        pass

    return None


def parse_due_date(value: Any) -> Optional[DueDate]:
    """
    Build a DueDate from a transport value.

    Accepts ``None``, a ``{"year", "month", "day"}`` mapping or an ISO date
    string.

    Raises:
        InvalidDateComponentsError: components missing or not a real date
    """
    if value is None:
        return None

    if isinstance(value, Mapping):
        try:
            return DueDate(value["year"], value["month"], value["day"])
        except KeyError:
            raise InvalidDateComponentsError() from None

    if isinstance(value, str):
        parsed = parse_date(value)
        if parsed is None:
            raise InvalidDateComponentsError()
        return DueDate.from_date(parsed)

    raise InvalidDateComponentsError()

