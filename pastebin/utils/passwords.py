"""Password hashing with bcrypt.

This module provides:
- hash_password: a function that salts and hashes a password
- compare_password: a function that checks a password against a stored hash
"""

from bcrypt import checkpw, gensalt, hashpw

from ..constants import BCRYPT_MAX_BYTES


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> bytes:
    """Hashes a password using bcrypt.

    Args:
        password (str): The password to hash. Truncated to 72 bytes, as bcrypt would
        rounds (int): The salt's work factor. >=4 <32

    Returns:
        bytes: Hashed result in bytes.

    Raises:
        TypeError: Provided password is not a string or rounds is not an integer
        ValueError: Provided password is empty or rounds is outside range
    """
    if not isinstance(password, str):
        raise TypeError("password must be a string")
    if not password:
        raise ValueError("password cannot be empty")
    if not isinstance(rounds, int):
        raise TypeError("rounds must be an integer")
    if not 4 <= rounds < 32:  # noqa: PLR2004
        raise ValueError("rounds should be inside [4;32)")
    return hashpw(_encode(password), gensalt(rounds=rounds))


def compare_password(true_hash: bytes, suggestion: str) -> bool:
    """Compares the true value hash to provided password.

    Args:
        true_hash (bytes): The true value hash
        suggestion (str): The suggested password

    Returns:
        bool: True if passwords match, False otherwise.

    Raises:
        TypeError: Provided hash is not bytes or suggestion is not a string
    """
    if not isinstance(suggestion, str):
        raise TypeError("suggestion must be a string")
    if not isinstance(true_hash, bytes):
        raise TypeError("true_hash must be bytes")
    if not suggestion:
        return False
    try:
        return checkpw(_encode(suggestion), true_hash)
    except ValueError:
        # a malformed stored hash never matches
        return False
