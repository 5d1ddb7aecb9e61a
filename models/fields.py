# models/fields.py

from typing import Any


def require_value(value: Any, field_name: str) -> Any:
    """
    For columns that can be left out of a partial update but never cleared.
    Called from mode="before" validators, which only see values the client sent.
    """
    if value is None:
        raise ValueError(f"{field_name} may be omitted but cannot be null")
    if isinstance(value, str) and not value.strip():
        raise ValueError(f"{field_name} cannot be blank")
    return value
