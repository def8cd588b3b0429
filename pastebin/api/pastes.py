"""Paste endpoints.

This module provides:
- PasteAPI: a class of endpoints creating, reading, editing and deleting pastes
"""

import logging
from datetime import timedelta
from http import HTTPStatus

from flask import jsonify, request

from ..access import (
    Action,
    Allowed,
    Denied,
    Expired,
    NotFound,
    View,
    resolve_mutation,
    resolve_read,
)
from ..constants import DEFAULT_TITLE
from ..stores import Paste, PasteStore, UserStore
from ..tokens import Authenticated, Identity, Rejected, TokenIssuer
from ..utils import validation
from ..utils.auth import optional_auth, require_admin, require_auth
from ..utils.clock import Clock, to_json, utcnow
from ..utils.errors import AuthorizationError, GoneError, NotFoundError, ValidationError


class PasteAPI:
    """Endpoints under ``/pastes``, plus the expired paste cleanup."""

    def __init__(
            self,
            pastes: PasteStore,
            users: UserStore,
            tokens: TokenIssuer,
            clock: Clock = utcnow,
            share_base_url: str = "",
            log_actions: bool = True,
    ):
        self.pastes = pastes
        self.users = users
        self.tokens = tokens
        self.clock = clock
        self.share_base_url = share_base_url.rstrip("/")
        self.log_actions = log_actions
        self.logger = logging.getLogger(__name__)

    def share_url(self, share_id: str) -> str:
        base = self.share_base_url or request.host_url.rstrip("/")
        return f"{base}/share/{share_id}"

    def _lookup(self, share_id: str) -> Paste | None:
        if not validation.is_share_id(share_id):
            return None
        return self.pastes.find_by_share_id(share_id)

    @staticmethod
    def _refuse(decision: NotFound | Expired | Denied):
        """Turns a negative decision into the matching error."""
        match decision:
            case NotFound():
                raise NotFoundError("Paste not found")
            case Expired():
                raise GoneError("Paste has expired")
            case Denied(reason=reason):
                raise AuthorizationError(reason)
        raise TypeError(f"not a refusal: {decision!r}")

    def _authorize(self, share_id: str, identity: Identity, action: Action) -> Allowed:
        decision = resolve_mutation(
            self._lookup(share_id), identity, action, self.pastes.find_grant, self.clock()
        )
        if not isinstance(decision, Allowed):
            self._refuse(decision)
        return decision

    @require_auth
    def create(self, identity: Authenticated):
        """Creates a new paste.

        Takes ``content`` and optionally ``title``, ``expiresIn`` (hours) and
        ``sharedWith`` (usernames or ``{username, canEdit}`` objects) from JSON body.
        """
        data = validation.json_body()
        title = validation.title(validation.get_item(data, "title", str, ""))
        content = validation.content(validation.get_item(data, "content", str))
        expires_in = data.get("expiresIn")
        if expires_in is not None:
            expires_in = validation.expires_in(
                validation.get_item(data, "expiresIn", (int, float))
            )
        shared_with = validation.shared_with(validation.get_item(data, "sharedWith", list, []))

        now = self.clock()
        expires_at = now + timedelta(hours=expires_in) if expires_in else None
        paste = self.pastes.create(
            owner_id=identity.user_id,
            title=title or DEFAULT_TITLE,
            content=content,
            created_at=now,
            expires_at=expires_at,
            shared_with=shared_with,
        )
        if self.log_actions:
            self.logger.info("User %d created paste %s", identity.user_id, paste.share_id)
        returnable = {
            **paste.summary(),
            "content": paste.content,
            "shareUrl": self.share_url(paste.share_id),
        }
        return (
            jsonify({"message": "Paste created successfully", "paste": returnable}),
            HTTPStatus.CREATED,
        )

    @require_auth
    def my_pastes(self, identity: Authenticated):
        """Lists the caller's own pastes and the pastes shared with them."""
        owned = self.pastes.find_owned_by(identity.user_id)
        shared = self.pastes.list_granted_to(identity.user_id)
        return jsonify({
            "pastes": [paste.summary() for paste in owned],
            "sharedWithMe": [entry.to_json() for entry in shared],
        })

    @optional_auth
    def fetch(self, share_id: str, identity: Identity):
        """Reads a paste. Anyone holding the share ID may read it."""
        if isinstance(identity, Rejected):
            self.logger.debug("Reading %s anonymously: %s", share_id, identity.reason)
        decision = resolve_read(
            self._lookup(share_id), identity, self.pastes.find_grant, self.clock()
        )
        if not isinstance(decision, View):
            self._refuse(decision)
        paste = decision.paste
        return jsonify({
            "paste": {
                "shareId": paste.share_id,
                "title": paste.title,
                "content": paste.content,
                "createdAt": to_json(paste.created_at),
                "expiresAt": to_json(paste.expires_at),
                "isOwner": decision.is_owner,
                "canEdit": decision.can_edit,
            }
        })

    @require_auth
    def update(self, share_id: str, identity: Authenticated):
        """Edits ``content`` and/or ``title``. Open to the owner and edit grantees."""
        data = validation.json_body()
        content = data.get("content")
        title = data.get("title")
        if content is None and title is None:
            raise ValidationError("Nothing to update, supply content or title")
        if content is not None:
            content = validation.content(validation.get_item(data, "content", str))
        if title is not None:
            title = validation.title(validation.get_item(data, "title", str)) or DEFAULT_TITLE

        self._authorize(share_id, identity, Action.UPDATE)
        paste = self.pastes.update(share_id, content=content, title=title)
        if self.log_actions:
            self.logger.info("User %d updated paste %s", identity.user_id, share_id)
        return jsonify({
            "message": "Paste updated successfully",
            "paste": {**paste.summary(), "content": paste.content},
        })

    @require_auth
    def shared_users(self, share_id: str, identity: Authenticated):
        """Lists who the paste is shared with. Owner only."""
        allowed = self._authorize(share_id, identity, Action.MANAGE)
        grants = self.pastes.list_grants_for_paste(allowed.paste.id)
        return jsonify({"sharedUsers": [grant.to_json() for grant in grants]})

    @require_auth
    def delete(self, share_id: str, identity: Authenticated):
        """Deletes a paste with its grants. Owner only."""
        self._authorize(share_id, identity, Action.DELETE)
        self.pastes.delete(share_id)
        if self.log_actions:
            self.logger.info("User %d deleted paste %s", identity.user_id, share_id)
        return jsonify({"message": "Paste deleted successfully"})

    @require_admin
    def cleanup(self, identity: Authenticated):  # noqa: ARG002
        """Physically removes expired pastes."""
        removed = self.pastes.purge_expired(self.clock())
        return jsonify({"message": "Expired pastes removed", "removed": removed})
