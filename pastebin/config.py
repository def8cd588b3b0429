"""Manages configuration variables.

This module provides:
- Config: a base class for pulling environment variables
- DevelopmentConfig: a dev config class
- ProductionConfig: a config class for production
- TestingConfig: a config class for the test suite
- config: a dict for getting configuration depending on environment
"""

import os
from base64 import b64encode
from secrets import token_bytes

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base class for pulling environment variables."""

    DEBUG = False
    TESTING = False

    AUTH_SECRET = os.getenv("AUTH_SECRET", b64encode(token_bytes(32)).decode("utf-8"))
    TOKEN_LIFETIME_DAYS = int(os.getenv("TOKEN_LIFETIME_DAYS", "7"))
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    DATABASE_URI = os.getenv("DB_PATH", "./data/pastebin.db")

    # Leave empty to build share links from the request host
    SHARE_BASE_URL = os.getenv("SHARE_BASE_URL", "")

    # Creates the first admin when no users exist yet
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "True").lower() == "true"
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True
    API_RATE_LIMIT = os.getenv("API_RATE_LIMIT", "100 per 15 minutes")
    AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "5 per 15 minutes")
    PASTE_RATE_LIMIT = os.getenv("PASTE_RATE_LIMIT", "20 per hour")

    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_TO_FILE = True
    LOG_ACTIONS = os.getenv("LOG_ACTIONS", "True").lower() == "true"
    LOG_REQUESTS = os.getenv("LOG_REQUESTS", "False").lower() == "true"


class DevelopmentConfig(Config):
    """Config class with DEBUG on."""

    DEBUG = True


class ProductionConfig(Config):
    """Config class with DEBUG off."""

    DEBUG = False


class TestingConfig(Config):
    """Config class for tests: in-memory DB, cheap hashing, no limits, no log files."""

    TESTING = True
    AUTH_SECRET = b64encode(b"0" * 32).decode("utf-8")
    BCRYPT_ROUNDS = 4
    DATABASE_URI = "file::memory:?cache=shared"
    SHARE_BASE_URL = ""
    ADMIN_PASSWORD = None
    RATELIMIT_ENABLED = False
    LOG_TO_FILE = False
    LOG_REQUESTS = False


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
