"""Who may see and who may change a paste.

This module provides:
- Action: the mutations a caller may attempt on a paste
- NotFound, Expired, Denied, View, Allowed: the possible decisions
- resolve_read: decides what a caller sees when opening a share link
- resolve_mutation: decides whether a caller may update, delete or manage a paste
- resolve_role_change: the admin-plane rule guarding role updates

Checks always run in the same order: existence, then expiry, then permission.
Expiry therefore wins over permission, for the owner too. Read access needs
only the share ID; grants matter for the edit flag and for mutations.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .stores.pastes import Paste, ShareGrant
from .tokens import Authenticated, Identity

GrantLookup = Callable[[int, int], ShareGrant | None]


class Action(Enum):
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"  # listing who a paste is shared with


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Expired:
    pass


@dataclass(frozen=True)
class Denied:
    reason: str = "Not authorized"


@dataclass(frozen=True)
class View:
    paste: Paste
    is_owner: bool
    can_edit: bool

    @property
    def content(self) -> str:
        return self.paste.content


@dataclass(frozen=True)
class Allowed:
    paste: Paste
    is_owner: bool


Decision = NotFound | Expired | Denied | View | Allowed

NOT_FOUND = NotFound()
EXPIRED = Expired()


def _caller_id(identity: Identity | None) -> int | None:
    # Rejected tokens carry no identity, they count as anonymous here
    if isinstance(identity, Authenticated):
        return identity.user_id
    return None


def resolve_read(
        paste: Paste | None,
        identity: Identity | None,
        find_grant: GrantLookup,
        now: datetime,
) -> NotFound | Expired | View:
    """Decides what a caller gets when reading a paste.

    Args:
        paste (Paste | None): The paste looked up by share ID, ``None`` if there is none
        identity (Identity | None): The caller
        find_grant (GrantLookup): ``(paste_id, user_id) -> ShareGrant | None``
        now (datetime): The current time

    Returns:
        ``NotFound``, ``Expired`` or a ``View`` with the full content.
    """
    if paste is None:
        return NOT_FOUND
    if paste.is_expired(now):
        return EXPIRED
    caller_id = _caller_id(identity)
    if caller_id is None:
        return View(paste=paste, is_owner=False, can_edit=False)
    if caller_id == paste.owner_id:
        return View(paste=paste, is_owner=True, can_edit=True)
    grant = find_grant(paste.id, caller_id)
    return View(paste=paste, is_owner=False, can_edit=bool(grant and grant.can_edit))


def resolve_mutation(
        paste: Paste | None,
        identity: Identity | None,
        action: Action,
        find_grant: GrantLookup,
        now: datetime,
) -> NotFound | Expired | Denied | Allowed:
    """Decides whether a caller may change a paste.

    Deleting and managing are owner-only. Updating is open to the owner and
    to grantees holding an edit grant. Anonymous callers never mutate.

    Args:
        paste (Paste | None): The paste looked up by share ID, ``None`` if there is none
        identity (Identity | None): The caller
        action (Action): What the caller attempts
        find_grant (GrantLookup): ``(paste_id, user_id) -> ShareGrant | None``
        now (datetime): The current time

    Returns:
        ``NotFound``, ``Expired``, ``Denied`` or ``Allowed``.
    """
    if paste is None:
        return NOT_FOUND
    if paste.is_expired(now):
        return EXPIRED
    caller_id = _caller_id(identity)
    if caller_id is None:
        return Denied("Authentication required")
    if caller_id == paste.owner_id:
        return Allowed(paste=paste, is_owner=True)
    match action:
        case Action.DELETE:
            return Denied("Not authorized to delete this paste")
        case Action.MANAGE:
            return Denied("Only the owner can view shared users")
        case Action.UPDATE:
            grant = find_grant(paste.id, caller_id)
            if grant and grant.can_edit:
                return Allowed(paste=paste, is_owner=False)
            return Denied("Not authorized to edit this paste")
    raise ValueError(f"unknown action {action!r}")


def resolve_role_change(identity: Identity | None, target_user_id: int) -> Denied | None:
    """Returns ``Denied`` when an admin tries to change their own role, ``None`` otherwise.

    Holding the admin role is checked elsewhere; this only guards against self lockout.
    """
    if _caller_id(identity) == target_user_id:
        return Denied("You cannot change your own role")
    return None
