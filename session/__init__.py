"""
Session domain package.

Public API:
- Credential store: Role, Credential, CredentialStore, MemoryStorage, JsonFileStorage
- Authority: AuthenticatedIdentity, resolve_active, SessionAuthorityResolver, UserContext
- Expiry signalling: SessionObserver, SessionExpiryHandler
- Sign-in: SignInService
"""
from .credentials import Credential, CredentialStore, JsonFileStorage, MemoryStorage, Role, ROLE_KEYS
from .authority import AuthenticatedIdentity, SessionAuthorityResolver, UserContext, resolve_active
from .observer import SessionExpiryHandler, SessionObserver
from .sign_in import SignInService, normalize_mobile_number

__all__ = [
    "Role",
    "Credential",
    "CredentialStore",
    "MemoryStorage",
    "JsonFileStorage",
    "ROLE_KEYS",
    "AuthenticatedIdentity",
    "SessionAuthorityResolver",
    "UserContext",
    "resolve_active",
    "SessionObserver",
    "SessionExpiryHandler",
    "SignInService",
    "normalize_mobile_number",
]
