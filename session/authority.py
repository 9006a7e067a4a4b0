"""
Purpose: Session Authority Resolver.
What it does:
Given the identities found in the credential store, decides which single
role is authoritative for this app session and loads its profile into an
in-memory user context.

Precedence:
- only one live identity -> that one
- both -> the strictly later `last_login_at`; ties go to the owner
- none -> unauthenticated

The losing role's credential is left in place. It is not logged out, just
not current, and wins a later resolution if it logs in again afterwards.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import jwt

from .credentials import Credential, CredentialStore, Role

logger = logging.getLogger(__name__)

# First-checked role wins ties.
ROLE_PRECEDENCE: List[Role] = [Role.OWNER, Role.DRIVER]


def token_expiry(token: str) -> Optional[datetime]:
    """
    The `exp` claim of a JWT, read without verifying the signature.
    Opaque (non-JWT) tokens carry no expiry.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None

    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


@dataclass(frozen=True)
class AuthenticatedIdentity:
    role: Role
    token: str
    last_login_at: Optional[datetime] = None
    profile_snapshot: Optional[str] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_credential(cls, credential: Credential) -> AuthenticatedIdentity:
        return cls(
            role=credential.role,
            token=credential.token,
            last_login_at=credential.last_login_at,
            profile_snapshot=credential.profile,
            expires_at=token_expiry(credential.token),
        )


def _logged_in_later(candidate: Optional[datetime], incumbent: Optional[datetime]) -> bool:
    if candidate is None:
        return False
    if incumbent is None:
        return True
    return candidate > incumbent


def resolve_active(
    identities: Iterable[AuthenticatedIdentity],
    now: Optional[datetime] = None,
) -> Optional[AuthenticatedIdentity]:
    """
    Pure precedence rule. Identities whose token has already expired at `now`
    are ignored; a missing `last_login_at` counts as the earliest possible.
    """
    now = now or datetime.now(timezone.utc)

    live = [
        identity for identity in identities
        if identity.expires_at is None or identity.expires_at > now
    ]
    live.sort(key=lambda identity: ROLE_PRECEDENCE.index(identity.role))

    active: Optional[AuthenticatedIdentity] = None
    for identity in live:
        if active is None or _logged_in_later(identity.last_login_at, active.last_login_at):
            active = identity
    return active


@dataclass
class UserContext:
    """The in-memory profile of the authoritative role."""
    role: Role
    token: str
    profile: Dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> Optional[str]:
        for key in ("id", "driverId", "user_id", "sub"):
            value = self.profile.get(key)
            if value:
                return str(value)
        return None


class SessionAuthorityResolver:
    def __init__(self, credential_store: CredentialStore):
        self.credential_store = credential_store
        self.current: Optional[UserContext] = None

    def identities(self) -> List[AuthenticatedIdentity]:
        identities = []
        for role in ROLE_PRECEDENCE:
            credential = self.credential_store.load(role)
            if credential is not None:
                identities.append(AuthenticatedIdentity.from_credential(credential))
        return identities

    def resolve(self, now: Optional[datetime] = None) -> Optional[UserContext]:
        """
        Run at process start (and after every sign-in). Returns None when
        the caller must force a login.
        """
        active = resolve_active(self.identities(), now)
        if active is None:
            logger.info("No authenticated role found")
            self.current = None
            return None

        try:
            profile = json.loads(active.profile_snapshot)
            if not isinstance(profile, dict):
                raise ValueError("profile snapshot is not an object")
        except (TypeError, ValueError) as exc:
            # Corrupt or missing snapshot: degrade to unauthenticated.
            logger.warning("Cached %s profile unreadable (%s); forcing re-login", active.role.value, exc)
            self.current = None
            return None

        self.current = UserContext(role=active.role, token=active.token, profile=profile)
        logger.info("Authoritative role: %s", active.role.value)
        return self.current

    def forget(self, role: Optional[Role] = None) -> None:
        """Drop the in-memory context (all roles, or only if `role` is current)."""
        if self.current is not None and (role is None or self.current.role == role):
            self.current = None
