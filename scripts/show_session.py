"""
Prints which role the stored credentials resolve to on this machine.

    python scripts/show_session.py
"""
import logging

from api.config import ClientSettings
from session.authority import SessionAuthorityResolver
from session.credentials import CredentialStore, JsonFileStorage


def main():
    settings = ClientSettings.from_env()
    store = CredentialStore(JsonFileStorage(settings.credentials_path))
    resolver = SessionAuthorityResolver(store)

    for identity in resolver.identities():
        expires = identity.expires_at.isoformat() if identity.expires_at else "never"
        last_login = identity.last_login_at.isoformat() if identity.last_login_at else "unknown"
        print(f"{identity.role.value:<7} last login {last_login}, token expires {expires}")

    context = resolver.resolve()
    if context is None:
        print("Not signed in. Please login.")
        return

    print(f"Signed in as {context.role.value} (user {context.user_id or '?'})")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
