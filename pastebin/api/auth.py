"""Account endpoints.

This module provides:
- AuthAPI: a class of signup, signin, password and role endpoints
"""

import logging
from http import HTTPStatus

from flask import jsonify

from ..access import Denied, resolve_role_change
from ..constants import USER
from ..stores import UserStore
from ..tokens import Authenticated, TokenIssuer
from ..utils import validation
from ..utils.auth import require_admin, require_auth
from ..utils.errors import AuthenticationError, NotFoundError, ValidationError
from ..utils.passwords import compare_password, hash_password


class AuthAPI:
    """Endpoints under ``/auth``."""

    def __init__(
            self,
            users: UserStore,
            tokens: TokenIssuer,
            bcrypt_rounds: int = 12,
            log_actions: bool = True,
    ):
        self.users = users
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds
        self.log_actions = log_actions
        self.logger = logging.getLogger(__name__)

    def _session(self, user, message: str) -> dict:
        return {
            "message": message,
            "token": self.tokens.issue(user.id, user.role),
            "user": user.to_json(),
        }

    def signup(self):
        """Creates an account and signs it in.

        Requires ``username`` and ``password`` fields in request JSON body.
        """
        data = validation.json_body()
        username = validation.username(validation.get_item(data, "username", str))
        password = validation.password(validation.get_item(data, "password", str))
        user = self.users.create_user(
            username, hash_password(password, self.bcrypt_rounds), USER
        )
        if self.log_actions:
            self.logger.info("User %s signed up with id %d", user.username, user.id)
        return jsonify(self._session(user, "Signed up successfully")), HTTPStatus.CREATED

    def signin(self):
        """Checks credentials and hands out a token.

        Requires ``username`` and ``password`` fields in request JSON body.
        """
        data = validation.json_body()
        username = validation.get_item(data, "username", str)
        password = validation.get_item(data, "password", str)
        user = self.users.find_by_username(username)
        if user is None or not compare_password(user.password_hash, password):
            raise AuthenticationError("Invalid credentials")
        return jsonify(self._session(user, "Signed in successfully"))

    @require_auth
    def change_password(self, identity: Authenticated):
        """Replaces the caller's password, given ``currentPassword`` and ``newPassword``."""
        data = validation.json_body()
        current = validation.get_item(data, "currentPassword", str)
        new = validation.password(
            validation.get_item(data, "newPassword", str), field="New password"
        )
        user = self.users.find_by_id(identity.user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not compare_password(user.password_hash, current):
            raise AuthenticationError("Current password is incorrect")
        self.users.update_password(user.id, hash_password(new, self.bcrypt_rounds))
        if self.log_actions:
            self.logger.info("User %d changed their password", user.id)
        return jsonify({"message": "Password changed successfully"})

    @require_auth
    def me(self, identity: Authenticated):
        user = self.users.find_by_id(identity.user_id)
        if user is None:
            raise NotFoundError("User not found")
        return jsonify({"user": user.to_json()})

    @require_admin
    def list_users(self, identity: Authenticated):  # noqa: ARG002
        return jsonify({"users": [user.to_json() for user in self.users.list_users()]})

    @require_admin
    def update_role(self, user_id: int, identity: Authenticated):
        """Sets another user's role from the ``role`` field. Admins can't demote themselves."""
        denial = resolve_role_change(identity, user_id)
        if isinstance(denial, Denied):
            raise ValidationError(denial.reason)
        data = validation.json_body()
        role = validation.role(validation.get_item(data, "role", str))
        user = self.users.update_role(user_id, role)
        if self.log_actions:
            self.logger.info(
                "Admin %d set the role of user %d to %s", identity.user_id, user.id, role
            )
        return jsonify({"message": "User role updated successfully", "user": user.to_json()})
