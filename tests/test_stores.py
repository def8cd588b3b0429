from datetime import timedelta

import pytest

from conftest import FakeClock, memory_db
from pastebin.glue import Glue
from pastebin.stores import PasteStore, UserStore
from pastebin.utils.errors import ConflictError, InternalError, NotFoundError


@pytest.fixture()
def glue():
    glue = Glue(memory_db())
    yield glue
    glue.close()


@pytest.fixture()
def users(glue, clock):
    return UserStore(glue, clock=clock)


@pytest.fixture()
def pastes(glue):
    return PasteStore(glue)


@pytest.fixture()
def owner(users):
    return users.create_user("alice", b"hash")


def test_usernames_are_unique(users):
    users.create_user("alice", b"hash")
    with pytest.raises(ConflictError):
        users.create_user("alice", b"other")
    assert users.count() == 1


def test_find_user(users):
    created = users.create_user("alice", b"hash")
    assert users.find_by_username("alice") == created
    assert users.find_by_id(created.id) == created
    assert users.find_by_username("nobody") is None
    assert users.find_by_id(999) is None
    assert created.role == "user"
    assert "password" not in str(created.to_json())


def test_list_users_newest_first(users, clock):
    users.create_user("first", b"h")
    clock.advance(minutes=1)
    users.create_user("second", b"h")
    users.create_user("third", b"h")
    assert [u.username for u in users.list_users()] == ["third", "second", "first"]


def test_update_password_and_role(users):
    user = users.create_user("alice", b"old")
    users.update_password(user.id, b"new")
    assert users.find_by_id(user.id).password_hash == b"new"
    assert users.update_role(user.id, "admin").is_admin
    with pytest.raises(NotFoundError):
        users.update_role(999, "admin")
    with pytest.raises(ValueError):
        users.update_role(user.id, "root")


def test_create_paste(pastes, owner, clock):
    paste = pastes.create(owner.id, "title", "hello", clock(), clock() + timedelta(hours=1))
    assert len(paste.share_id) == 10
    assert pastes.find_by_share_id(paste.share_id) == paste
    assert paste.expires_at - paste.created_at == timedelta(hours=1)
    assert pastes.find_by_share_id("missingxyz") is None


def test_share_id_collision_is_retried(pastes, owner, clock):
    ids = iter(["AAAAAAAAAA", "AAAAAAAAAA", "BBBBBBBBBB"])
    pastes.id_factory = lambda: next(ids)
    first = pastes.create(owner.id, None, "one", clock())
    second = pastes.create(owner.id, None, "two", clock())
    assert (first.share_id, second.share_id) == ("AAAAAAAAAA", "BBBBBBBBBB")


def test_share_id_attempts_run_out(pastes, owner, clock):
    pastes.id_factory = lambda: "AAAAAAAAAA"
    pastes.create(owner.id, None, "one", clock())
    with pytest.raises(InternalError):
        pastes.create(owner.id, None, "two", clock())


def test_paste_for_unknown_owner_fails(pastes, clock):
    with pytest.raises(InternalError):
        pastes.create(12345, None, "orphan", clock())


def test_find_owned_by_newest_first(pastes, owner, users, clock):
    other = users.create_user("bob", b"h")
    older = pastes.create(owner.id, None, "one", clock())
    clock.advance(seconds=5)
    newer = pastes.create(owner.id, None, "two", clock())
    pastes.create(other.id, None, "three", clock())
    assert [p.share_id for p in pastes.find_owned_by(owner.id)] == [
        newer.share_id,
        older.share_id,
    ]


def test_update_only_touches_supplied_fields(pastes, owner, clock):
    paste = pastes.create(owner.id, "title", "hello", clock())
    updated = pastes.update(paste.share_id, content="world")
    assert (updated.title, updated.content) == ("title", "world")
    updated = pastes.update(paste.share_id, title="renamed")
    assert (updated.title, updated.content) == ("renamed", "world")
    with pytest.raises(NotFoundError):
        pastes.update("missingxyz", content="x")


def test_share_with_skips_unknown_and_owner(pastes, owner, users, clock):
    bob = users.create_user("bob", b"h")
    carol = users.create_user("carol", b"h")
    paste = pastes.create(
        owner.id,
        None,
        "hello",
        clock(),
        shared_with=[("bob", False), ("ghost", True), ("alice", True), ("carol", True)],
    )
    grants = pastes.list_grants_for_paste(paste.id)
    assert [(g.username, g.can_edit) for g in grants] == [("bob", False), ("carol", True)]
    assert pastes.find_grant(paste.id, carol.id).can_edit is True
    assert pastes.find_grant(paste.id, bob.id).can_edit is False
    assert pastes.find_grant(paste.id, owner.id) is None


def test_duplicate_usernames_merge_edit_rights(pastes, owner, users, clock):
    bob = users.create_user("bob", b"h")
    paste = pastes.create(
        owner.id, None, "hello", clock(), shared_with=[("bob", False), ("bob", True)]
    )
    assert pastes.find_grant(paste.id, bob.id).can_edit is True


def test_grant_rules(pastes, owner, users, clock):
    bob = users.create_user("bob", b"h")
    paste = pastes.create(owner.id, None, "hello", clock())
    grant = pastes.grant(paste.id, bob.id, True)
    assert grant.can_edit
    with pytest.raises(ConflictError):
        pastes.grant(paste.id, bob.id, False)
    with pytest.raises(ValueError):
        pastes.grant(paste.id, owner.id, True)
    with pytest.raises(NotFoundError):
        pastes.grant(9999, bob.id, True)


def test_list_granted_to(pastes, owner, users, clock):
    bob = users.create_user("bob", b"h")
    first = pastes.create(owner.id, "first", "1", clock(), shared_with=[("bob", False)])
    clock.advance(seconds=1)
    second = pastes.create(owner.id, "second", "2", clock(), shared_with=[("bob", True)])
    shared = pastes.list_granted_to(bob.id)
    assert [(s.share_id, s.can_edit, s.owner_username) for s in shared] == [
        (second.share_id, True, "alice"),
        (first.share_id, False, "alice"),
    ]


def test_delete_cascades_grants(pastes, owner, users, clock):
    bob = users.create_user("bob", b"h")
    paste = pastes.create(owner.id, None, "hello", clock(), shared_with=[("bob", True)])
    pastes.delete(paste.share_id)
    assert pastes.find_by_share_id(paste.share_id) is None
    assert pastes.find_grant(paste.id, bob.id) is None
    assert pastes.list_granted_to(bob.id) == []
    with pytest.raises(NotFoundError):
        pastes.delete(paste.share_id)


def test_purge_expired(pastes, owner):
    clock = FakeClock()
    keep = pastes.create(owner.id, None, "forever", clock())
    soon = pastes.create(owner.id, None, "soon", clock(), clock() + timedelta(hours=1))
    later = pastes.create(owner.id, None, "later", clock(), clock() + timedelta(hours=3))
    clock.advance(hours=2)
    assert pastes.purge_expired(clock()) == 1
    assert pastes.find_by_share_id(soon.share_id) is None
    assert pastes.find_by_share_id(keep.share_id) is not None
    assert pastes.find_by_share_id(later.share_id) is not None
