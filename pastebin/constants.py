"""Constants shared across the app.

This module provides:
- Role names
- Share ID alphabet and length
- Validation patterns and bounds for users and pastes
"""

from string import ascii_letters, digits

# Roles
ADMIN = "admin"
USER = "user"
ROLES = (ADMIN, USER)

SHARE_ID_CHARACTER_SET = ascii_letters + digits + "_-"
SHARE_ID_LENGTH = 10
SHARE_ID_RE = r"[A-Za-z0-9_-]{10}"
SHARE_ID_ATTEMPTS = 8

USERNAME_RE = r"[A-Za-z0-9_]{3,32}"
MIN_PASSWORD = 6
MAX_PASSWORD = 100
BCRYPT_MAX_BYTES = 72  # bcrypt ignores (or refuses) anything past this

DEFAULT_TITLE = "Untitled"
MAX_TITLE = 200
MAX_CONTENT = 500_000
MAX_EXPIRES_IN = 24 * 365  # hours
MAX_SHARED_WITH = 50

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
