"""A module for handling share ID generation.

This module provides:
- generate_id: a function that spits out a random cryptographically secure ID
- generate_share_id: a shortcut producing an ID in the share link format
"""

from secrets import choice

from ..constants import SHARE_ID_CHARACTER_SET, SHARE_ID_LENGTH


def generate_id(length: int, symbols: str) -> str:
    """Generates a random cryptographically secure ID string.

    Args:
        length (int): The length of the ID
        symbols (str): The string of allowed possible characters

    Returns:
        str: An ID string.

    Raises:
        TypeError: If ``length`` is not int or ``symbols`` is not a string
        ValueError: If ``length`` is not positive or ``symbols`` is empty
    """
    if not isinstance(length, int):
        raise TypeError("length must be int")
    if not isinstance(symbols, str):
        raise TypeError("symbols must be a string")
    if length <= 0:
        raise ValueError("length must be positive")
    if not symbols:
        raise ValueError("symbols cannot be empty")
    return "".join(choice(symbols) for _ in range(length))


def generate_share_id() -> str:
    """Generates a 10-character URL-safe share ID."""
    return generate_id(SHARE_ID_LENGTH, SHARE_ID_CHARACTER_SET)
