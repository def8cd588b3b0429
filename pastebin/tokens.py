"""Token issuing and verification.

This module provides:
- Anonymous, Authenticated, Rejected: who is calling, as told by the Authorization header
- TokenIssuer: a class that mints and verifies PASETO v4.local access tokens
"""

import logging
from base64 import b64decode
from binascii import Error as Base64Error
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from hashlib import blake2b
from json import JSONDecodeError, dumps, loads

from pyseto import Key, Paseto, PysetoError

from .constants import ADMIN, ROLES
from .utils.clock import Clock, utcnow
from .utils.errors import AuthenticationError


@dataclass(frozen=True)
class Anonymous:
    """No token was presented."""


@dataclass(frozen=True)
class Authenticated:
    """A valid token was presented."""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


@dataclass(frozen=True)
class Rejected:
    """A token was presented but it is malformed, tampered with or expired."""

    reason: str


Identity = Anonymous | Authenticated | Rejected

ANONYMOUS = Anonymous()


def derive_key(secret: str | bytes) -> bytes:
    """Turns the configured secret into 32 bytes of key material.

    A base64 string of exactly 32 bytes is used as is; anything else is hashed.
    """
    raw = secret.encode("utf-8") if isinstance(secret, str) else secret
    try:
        decoded = b64decode(raw, validate=True)
    except (Base64Error, ValueError):
        decoded = b""
    if len(decoded) == 32:  # noqa: PLR2004
        return decoded
    return blake2b(raw, digest_size=32).digest()


class TokenIssuer:
    """Mints and verifies stateless access tokens carrying a user ID and a role."""

    def __init__(
            self,
            secret: str | bytes,
            lifetime: timedelta = timedelta(days=7),
            clock: Clock = utcnow,
    ):
        if not secret:
            raise ValueError("secret cannot be empty")
        self.key = Key.new(version=4, purpose="local", key=derive_key(secret))
        self.paseto = Paseto()
        self.lifetime = lifetime
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def issue(self, user_id: int, role: str) -> str:
        """Mints a token valid for ``lifetime`` from now.

        Args:
            user_id (int): The owner of the token
            role (str): The owner's role at the time of issuing

        Returns:
            str: The token.

        Raises:
            TypeError: If ``user_id`` is not int
            ValueError: If ``role`` is unknown
        """
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise TypeError("user_id must be int")
        if role not in ROLES:
            raise ValueError("role is invalid")
        issued_at = self.clock()
        claims = {
            "uid": user_id,
            "role": role,
            "iat": issued_at.isoformat(),
            "exp": (issued_at + self.lifetime).isoformat(),
        }
        token = self.paseto.encode(self.key, dumps(claims).encode("utf-8"))
        return token.decode("utf-8")

    def verify(self, token: str) -> Authenticated:
        """Decrypts a token and checks its expiration.

        Args:
            token (str): The token to check

        Returns:
            Authenticated: The identity carried by the token.

        Raises:
            AuthenticationError: If the token is malformed, tampered with or expired
        """
        if not isinstance(token, str) or not token:
            raise AuthenticationError("Invalid token")
        try:
            decoded = self.paseto.decode(self.key, token.encode("utf-8"))
            claims = loads(decoded.payload.decode("utf-8"))
        except (PysetoError, ValueError, JSONDecodeError, UnicodeDecodeError) as e:
            raise AuthenticationError("Invalid token") from e
        if not isinstance(claims, dict):
            raise AuthenticationError("Invalid token")
        exp = claims.get("exp")
        if not exp:
            self.logger.warning("token is missing an expiration mark. your secret key may be leaked!")
            raise AuthenticationError("Invalid token")
        try:
            expires_at = datetime.fromisoformat(exp.replace("Z", "+00:00"))
        except (AttributeError, ValueError) as e:
            raise AuthenticationError("Invalid token") from e
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        if self.clock() >= expires_at:
            raise AuthenticationError("Token expired")
        user_id = claims.get("uid")
        role = claims.get("role")
        if not isinstance(user_id, int) or role not in ROLES:
            raise AuthenticationError("Invalid token")
        return Authenticated(user_id=user_id, role=role)

    def identify(self, authorization: str | None) -> Identity:
        """Reads an ``Authorization`` header value.

        Returns:
            ``ANONYMOUS`` when the header is absent,
            ``Authenticated`` for a valid bearer token,
            ``Rejected`` for anything else.
        """
        if not authorization:
            return ANONYMOUS
        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":  # noqa PLR2004
            return Rejected("Invalid authentication scheme. Use Bearer token")
        try:
            return self.verify(parts[1])
        except AuthenticationError as e:
            return Rejected(e.message)
