from base64 import b64encode
from datetime import timedelta
from json import dumps

import pytest

from conftest import FakeClock
from pastebin.tokens import ANONYMOUS, Authenticated, Rejected, TokenIssuer, derive_key
from pastebin.utils.errors import AuthenticationError

SECRET = b64encode(b"k" * 32).decode()


@pytest.fixture()
def issuer(clock):
    return TokenIssuer(SECRET, clock=clock)


def test_issue_then_verify(issuer):
    token = issuer.issue(5, "admin")
    assert token.startswith("v4.local.")
    assert issuer.verify(token) == Authenticated(user_id=5, role="admin")


def test_token_expires_after_seven_days(issuer, clock):
    token = issuer.issue(5, "user")
    clock.advance(days=6, hours=23)
    assert issuer.verify(token).user_id == 5
    clock.advance(hours=1)
    with pytest.raises(AuthenticationError, match="expired"):
        issuer.verify(token)


def test_lifetime_is_configurable(clock):
    issuer = TokenIssuer(SECRET, lifetime=timedelta(minutes=5), clock=clock)
    token = issuer.issue(1, "user")
    clock.advance(minutes=5)
    with pytest.raises(AuthenticationError):
        issuer.verify(token)


def test_token_from_another_secret_is_invalid(issuer, clock):
    other = TokenIssuer(b64encode(b"x" * 32).decode(), clock=clock)
    with pytest.raises(AuthenticationError, match="Invalid token"):
        issuer.verify(other.issue(1, "user"))


@pytest.mark.parametrize("token", ["", "garbage", "v4.local.AAAA", "v4.public.AAAA"])
def test_malformed_tokens_are_invalid(issuer, token):
    with pytest.raises(AuthenticationError):
        issuer.verify(token)


def test_issue_rejects_unknown_role(issuer):
    with pytest.raises(ValueError):
        issuer.issue(1, "superuser")


def test_identify_tells_absent_from_invalid(issuer):
    assert issuer.identify(None) is ANONYMOUS
    assert issuer.identify("") is ANONYMOUS
    assert isinstance(issuer.identify("Bearer nope"), Rejected)
    assert isinstance(issuer.identify("Basic abc"), Rejected)
    token = issuer.issue(3, "user")
    assert issuer.identify(f"Bearer {token}") == Authenticated(3, "user")
    assert issuer.identify(f"bearer {token}") == Authenticated(3, "user")


def test_derive_key_accepts_passphrases():
    assert derive_key(SECRET) == b"k" * 32
    assert len(derive_key("correct horse battery staple")) == 32
    assert derive_key("a") == derive_key(b"a")


def test_tokens_are_not_deterministic():
    clock = FakeClock()
    issuer = TokenIssuer(SECRET, clock=clock)
    assert issuer.issue(1, "user") != issuer.issue(1, "user")


def test_expiry_without_offset_is_read_as_utc(issuer, clock):
    claims = {"uid": 3, "role": "user", "exp": "2026-01-01T13:00:00"}
    token = issuer.paseto.encode(issuer.key, dumps(claims).encode()).decode()
    assert issuer.verify(token).user_id == 3
    clock.advance(hours=1)
    with pytest.raises(AuthenticationError, match="expired"):
        issuer.verify(token)
