import json
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from session.authority import AuthenticatedIdentity, SessionAuthorityResolver, resolve_active, token_expiry
from session.credentials import Credential, Role

T0 = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)


def identity(role, last_login_at=None, expires_at=None):
    return AuthenticatedIdentity(role=role, token=f"{role.value}-token", last_login_at=last_login_at, expires_at=expires_at)


def test_single_identity_wins():
    assert resolve_active([identity(Role.DRIVER, T0)], now=T0).role == Role.DRIVER
    assert resolve_active([], now=T0) is None


@pytest.mark.parametrize("owner_at,driver_at,expected", [
    (T0, T0 + timedelta(seconds=1), Role.DRIVER),
    (T0 + timedelta(seconds=1), T0, Role.OWNER),
    (T0, T0, Role.OWNER),        # tie goes to the owner
    (None, T0, Role.DRIVER),     # missing timestamp counts as earliest
    (None, None, Role.OWNER),
])
def test_later_login_wins(owner_at, driver_at, expected):
    # Order of the input must not matter.
    identities = [identity(Role.DRIVER, driver_at), identity(Role.OWNER, owner_at)]
    assert resolve_active(identities, now=T0).role == expected


def test_expired_identity_is_skipped():
    identities = [
        identity(Role.OWNER, T0, expires_at=T0 + timedelta(hours=1)),
        identity(Role.DRIVER, T0 + timedelta(minutes=5), expires_at=T0 + timedelta(minutes=10)),
    ]
    assert resolve_active(identities, now=T0 + timedelta(minutes=20)).role == Role.OWNER


def test_token_expiry_reads_exp_without_verifying():
    exp = int((T0 + timedelta(hours=2)).timestamp())
    token = jwt.encode({"sub": "O1", "exp": exp}, "a-signing-key-this-client-never-sees-0123", algorithm="HS256")

    assert token_expiry(token) == T0 + timedelta(hours=2)
    assert token_expiry("opaque-token") is None


def test_resolve_loads_profile_of_latest_login(credential_store):
    credential_store.save(Credential(Role.OWNER, "owner-token", T0, json.dumps({"id": "O1"})))
    credential_store.save(Credential(Role.DRIVER, "driver-token", T0 + timedelta(minutes=1),
                                     json.dumps({"driverId": "D1", "fullName": "Ravi"})))

    context = SessionAuthorityResolver(credential_store).resolve(now=T0 + timedelta(minutes=2))

    assert context.role == Role.DRIVER
    assert context.token == "driver-token"
    assert context.user_id == "D1"


def test_unreadable_profile_degrades_to_unauthenticated(credential_store):
    credential_store.save(Credential(Role.OWNER, "owner-token", T0, "{not json"))
    resolver = SessionAuthorityResolver(credential_store)

    assert resolver.resolve(now=T0) is None
    assert resolver.current is None
    # The credential itself is left alone.
    assert credential_store.token(Role.OWNER) == "owner-token"


def test_missing_profile_degrades_to_unauthenticated(credential_store):
    credential_store.save(Credential(Role.DRIVER, "driver-token", T0))
    assert SessionAuthorityResolver(credential_store).resolve(now=T0) is None


def test_forget_only_drops_matching_role(credential_store):
    credential_store.save(Credential(Role.OWNER, "owner-token", T0, "{}"))
    resolver = SessionAuthorityResolver(credential_store)
    resolver.resolve(now=T0)

    resolver.forget(Role.DRIVER)
    assert resolver.current.role == Role.OWNER
    resolver.forget(Role.OWNER)
    assert resolver.current is None
