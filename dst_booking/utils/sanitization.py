import html
from typing import Iterable, Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def clean_identifiers(values: Optional[Iterable[str]]) -> list[str]:
    """
    Normalize a list of resource identifiers (setup/module ids).
    Blank entries are dropped, duplicates removed, order preserved.
    """
    if not values:
        return []

    seen = set()
    cleaned = []
    for value in values:
        if value is None:
            continue
        item = str(value).strip()
        if item and item not in seen:
            seen.add(item)
            cleaned.append(item)
    return cleaned
