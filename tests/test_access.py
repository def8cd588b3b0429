from datetime import UTC, datetime, timedelta

import pytest

from pastebin.access import (
    Action,
    Allowed,
    Denied,
    Expired,
    NotFound,
    View,
    resolve_mutation,
    resolve_read,
    resolve_role_change,
)
from pastebin.stores import Paste, ShareGrant
from pastebin.tokens import ANONYMOUS, Authenticated, Rejected

NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)
OWNER = Authenticated(user_id=1, role="user")
EDITOR = Authenticated(user_id=2, role="user")
VIEWER = Authenticated(user_id=3, role="user")
STRANGER = Authenticated(user_id=4, role="admin")

GRANTS = {
    (10, 2): ShareGrant(paste_id=10, grantee_id=2, can_edit=True),
    (10, 3): ShareGrant(paste_id=10, grantee_id=3, can_edit=False),
}


def find_grant(paste_id, user_id):
    return GRANTS.get((paste_id, user_id))


def make_paste(expires_at=None):
    return Paste(
        id=10,
        share_id="abcdefghij",
        title="notes",
        content="hello",
        owner_id=1,
        created_at=NOW - timedelta(hours=2),
        expires_at=expires_at,
    )


ALL_CALLERS = [OWNER, EDITOR, VIEWER, STRANGER, ANONYMOUS, Rejected("bad token"), None]


def test_missing_paste_is_not_found():
    assert isinstance(resolve_read(None, OWNER, find_grant, NOW), NotFound)
    for action in Action:
        assert isinstance(resolve_mutation(None, OWNER, action, find_grant, NOW), NotFound)


@pytest.mark.parametrize("caller", ALL_CALLERS)
def test_paste_without_expiry_is_never_expired(caller):
    paste = make_paste()
    later = NOW + timedelta(days=3650)
    assert isinstance(resolve_read(paste, caller, find_grant, later), View)


@pytest.mark.parametrize("caller", ALL_CALLERS)
def test_expired_paste_wins_over_permission(caller):
    paste = make_paste(expires_at=NOW - timedelta(seconds=1))
    assert isinstance(resolve_read(paste, caller, find_grant, NOW), Expired)
    for action in Action:
        assert isinstance(resolve_mutation(paste, caller, action, find_grant, NOW), Expired)


def test_paste_expiring_right_now_is_still_visible():
    paste = make_paste(expires_at=NOW)
    assert isinstance(resolve_read(paste, ANONYMOUS, find_grant, NOW), View)


def test_owner_can_edit_and_delete():
    paste = make_paste(expires_at=NOW + timedelta(hours=1))
    view = resolve_read(paste, OWNER, find_grant, NOW)
    assert view == View(paste=paste, is_owner=True, can_edit=True)
    for action in Action:
        decision = resolve_mutation(paste, OWNER, action, find_grant, NOW)
        assert decision == Allowed(paste=paste, is_owner=True)


def test_edit_grantee_can_update_but_not_delete():
    paste = make_paste()
    view = resolve_read(paste, EDITOR, find_grant, NOW)
    assert view.can_edit and not view.is_owner
    assert resolve_mutation(paste, EDITOR, Action.UPDATE, find_grant, NOW) == Allowed(
        paste=paste, is_owner=False
    )
    assert isinstance(resolve_mutation(paste, EDITOR, Action.DELETE, find_grant, NOW), Denied)
    assert isinstance(resolve_mutation(paste, EDITOR, Action.MANAGE, find_grant, NOW), Denied)


def test_view_grantee_reads_full_content_but_cannot_mutate():
    paste = make_paste()
    view = resolve_read(paste, VIEWER, find_grant, NOW)
    assert view.content == "hello"
    assert view.can_edit is False
    for action in Action:
        assert isinstance(resolve_mutation(paste, VIEWER, action, find_grant, NOW), Denied)


@pytest.mark.parametrize("caller", [ANONYMOUS, Rejected("expired"), None])
def test_anonymous_reads_but_never_mutates(caller):
    paste = make_paste()
    view = resolve_read(paste, caller, find_grant, NOW)
    assert view == View(paste=paste, is_owner=False, can_edit=False)
    for action in Action:
        decision = resolve_mutation(paste, caller, action, find_grant, NOW)
        assert decision == Denied("Authentication required")


def test_admin_role_grants_nothing_on_pastes():
    paste = make_paste()
    assert resolve_read(paste, STRANGER, find_grant, NOW).can_edit is False
    for action in Action:
        assert isinstance(resolve_mutation(paste, STRANGER, action, find_grant, NOW), Denied)


def test_grant_lookup_is_skipped_for_owner_and_anonymous():
    calls = []

    def spy(paste_id, user_id):
        calls.append((paste_id, user_id))

    paste = make_paste()
    resolve_read(paste, OWNER, spy, NOW)
    resolve_read(paste, ANONYMOUS, spy, NOW)
    resolve_mutation(paste, OWNER, Action.UPDATE, spy, NOW)
    assert calls == []


def test_admin_cannot_change_own_role():
    admin = Authenticated(user_id=7, role="admin")
    assert isinstance(resolve_role_change(admin, 7), Denied)
    assert resolve_role_change(admin, 8) is None
