"""Shared validation utilities"""

from datetime import date, datetime
from typing import Any, Optional

from .envelope import ErrorCode, WorkflowError


def validate_date(value: Any) -> date:
    """
    Parse a session date.

    Args:
        value: a date, a datetime or an ISO-8601 string ("2025-05-01")

    Returns:
        The calendar date

    Raises:
        ValueError: If the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError as e:
            raise ValueError(f"Invalid date: {value}") from e
    raise ValueError(f"Invalid date: {value!r}")


def require_id(value: Optional[str], name: str) -> str:
    """Reject missing or blank identifiers with INVALID_DATA"""
    if value is None or not str(value).strip():
        raise WorkflowError(ErrorCode.INVALID_DATA, f"{name} is required")
    return str(value).strip()
