"""Auth middleware for endpoint methods.

This module provides:
- require_auth: a decorator that requires a valid Bearer token and passes ``identity`` downstream
- optional_auth: a decorator that reads a Bearer token if there is one and passes ``identity``
- require_admin: a decorator that requires a valid Bearer token of a current admin

The decorated methods belong to an endpoint class holding a ``tokens`` issuer
(and a ``users`` store for ``require_admin``).
"""

from collections.abc import Callable
from functools import wraps

from flask import request

from ..tokens import Authenticated, Rejected
from .errors import AuthenticationError, AuthorizationError


def _identify(self):
    return self.tokens.identify(request.headers.get("Authorization"))


def require_auth(f: Callable) -> Callable:
    """Requires a PASETO Bearer token to continue and passes ``identity`` downstream."""

    @wraps(f)
    def decorated(self, *args, **kwargs):
        identity = _identify(self)
        if isinstance(identity, Rejected):
            raise AuthenticationError(identity.reason)
        if not isinstance(identity, Authenticated):
            raise AuthenticationError("No token provided")
        return f(self, *args, identity=identity, **kwargs)

    return decorated


def optional_auth(f: Callable) -> Callable:
    """Accepts a PASETO Bearer token and passes ``identity`` downstream.

    Passes ``ANONYMOUS`` if no token was given and ``Rejected`` if it didn't verify,
    the endpoint decides what either means.
    """

    @wraps(f)
    def decorated(self, *args, **kwargs):
        return f(self, *args, identity=_identify(self), **kwargs)

    return decorated


def require_admin(f: Callable) -> Callable:
    """Requires a token of a user who is an admin both in the token and in the store."""

    @wraps(f)
    @require_auth
    def decorated(self, *args, identity: Authenticated, **kwargs):
        user = self.users.find_by_id(identity.user_id)
        if user is None:
            raise AuthenticationError("User not found")
        if not identity.is_admin or not user.is_admin:
            raise AuthorizationError("Admin access required")
        return f(self, *args, identity=identity, **kwargs)

    return decorated
