"""Request body validation.

This module provides:
- json_body: pulls a JSON object out of the current request
- get_item: retrieves a value from a dict, checking its type
- username, password, title, content, expires_in, shared_with, role: field validators
- is_share_id: tells whether a string looks like a share ID

Every validator raises ``ValidationError`` carrying the first violation found.
"""

from math import isfinite
from re import fullmatch
from typing import Any

from flask import request

from ..constants import (
    MAX_CONTENT,
    MAX_EXPIRES_IN,
    MAX_PASSWORD,
    MAX_SHARED_WITH,
    MAX_TITLE,
    MIN_PASSWORD,
    ROLES,
    SHARE_ID_RE,
    USERNAME_RE,
)
from .errors import ValidationError

_MISSING = object()


def json_body() -> dict:
    """Returns the request's JSON object.

    Raises:
        ValidationError: If the body is not a JSON object
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def get_item(
        store: dict,
        key: str,
        types: type | tuple[type, ...],
        default: Any = _MISSING,
) -> Any:
    """Retrieves a value from a dictionary, checking its type.

    Args:
        store (dict): The dictionary to retrieve the value from
        key (str): The key of a dictionary item
        types (type | tuple[type]): The type(s) to check the value against
        default (Any): The value to return if ``key`` is absent or null.
            Without a default the key is required

    Returns:
        Any: The value associated with the key.

    Raises:
        ValidationError: If the key is required but missing, or the value is of wrong type
    """
    item = store.get(key)
    if item is None:
        if default is _MISSING:
            raise ValidationError(f"{key} is required")
        return default
    # bool is an int, never let it pass as a number
    if isinstance(item, bool) and bool not in (types if isinstance(types, tuple) else (types,)):
        raise ValidationError(f"{key} has a wrong type")
    if not isinstance(item, types):
        raise ValidationError(f"{key} has a wrong type")
    return item


def username(value: str) -> str:
    if not fullmatch(USERNAME_RE, value):
        raise ValidationError(
            "Username must be 3-32 characters of letters, digits or underscores"
        )
    return value


def password(value: str, field: str = "Password") -> str:
    if len(value) < MIN_PASSWORD:
        raise ValidationError(f"{field} must be at least {MIN_PASSWORD} characters")
    if len(value) > MAX_PASSWORD:
        raise ValidationError(f"{field} must be at most {MAX_PASSWORD} characters")
    return value


def title(value: str) -> str:
    if len(value) > MAX_TITLE:
        raise ValidationError(f"Title must be at most {MAX_TITLE} characters")
    return value


def content(value: str) -> str:
    if not value:
        raise ValidationError("Content cannot be empty")
    if len(value) > MAX_CONTENT:
        raise ValidationError(f"Content must be at most {MAX_CONTENT} characters")
    return value


def expires_in(value: int | float) -> int | float:
    """Hours until a paste expires."""
    if not isfinite(value):
        raise ValidationError("expiresIn must be a finite number")
    if value <= 0:
        raise ValidationError("expiresIn must be positive")
    if value > MAX_EXPIRES_IN:
        raise ValidationError(f"expiresIn must be at most {MAX_EXPIRES_IN} hours")
    return value


def shared_with(value: list) -> list[tuple[str, bool]]:
    """Normalizes a sharing list into ``(username, can_edit)`` pairs.

    Entries are either plain usernames (view only) or
    ``{"username": ..., "canEdit": ...}`` objects.
    """
    if len(value) > MAX_SHARED_WITH:
        raise ValidationError(f"sharedWith can list at most {MAX_SHARED_WITH} users")
    entries = []
    for entry in value:
        if isinstance(entry, str):
            entries.append((entry, False))
        elif isinstance(entry, dict):
            name = get_item(entry, "username", str)
            can_edit = get_item(entry, "canEdit", bool, False)
            entries.append((name, can_edit))
        else:
            raise ValidationError("sharedWith entries must be usernames or objects")
    return entries


def role(value: str) -> str:
    if value not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")
    return value


def is_share_id(value: str) -> bool:
    return bool(fullmatch(SHARE_ID_RE, value))
