"""
Purpose: Credential Store.
What it does:
Persists one bearer token, one profile snapshot and one "last login"
timestamp per role, under role-scoped storage keys:

    owner  -> authToken / userData / ownerLastLogin
    driver -> driverAuthToken / driverAuthInfo / driverLastLogin

A new login for a role overwrites that role's keys only.

Rule: No resolution logic here. Which role is current is decided in
session.authority.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class Role(str, Enum):
    OWNER = "owner"
    DRIVER = "driver"


@dataclass(frozen=True)
class StorageKeys:
    token: str
    profile: str
    last_login: str


ROLE_KEYS: Dict[Role, StorageKeys] = {
    Role.OWNER: StorageKeys(token="authToken", profile="userData", last_login="ownerLastLogin"),
    Role.DRIVER: StorageKeys(token="driverAuthToken", profile="driverAuthInfo", last_login="driverLastLogin"),
}


@dataclass(frozen=True)
class Credential:
    role: Role
    token: str
    last_login_at: Optional[datetime] = None
    # Raw JSON snapshot of the user profile exactly as persisted.
    profile: Optional[str] = None


class MemoryStorage:
    """Dict-backed storage, for tests and short-lived scripts."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def delete_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """
    A single JSON object on disk, readable by the owning user only.
    Every write replaces the file atomically.
    """

    def __init__(self, path: str):
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as handle:
            return json.load(handle)

    def _write(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".credentials-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(items, handle)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def delete_item(self, key: str) -> None:
        items = self._read()
        if key in items:
            del items[key]
            self._write(items)


def _parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    try:
        if raw.isdigit():
            # epoch milliseconds
            return datetime.fromtimestamp(int(raw) / 1000, tz=timezone.utc)
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        logger.warning("Ignoring unreadable last-login timestamp %r", raw)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class CredentialStore:
    """
    Process-wide store of per-role credentials on top of a key/value storage.
    """

    def __init__(self, storage=None):
        self.storage = storage if storage is not None else MemoryStorage()

    def save(self, credential: Credential) -> None:
        keys = ROLE_KEYS[credential.role]
        self.storage.set_item(keys.token, credential.token)

        if credential.profile is not None:
            self.storage.set_item(keys.profile, credential.profile)
        else:
            self.storage.delete_item(keys.profile)

        last_login_at = credential.last_login_at or datetime.now(timezone.utc)
        self.storage.set_item(keys.last_login, last_login_at.isoformat())

    def load(self, role: Role) -> Optional[Credential]:
        keys = ROLE_KEYS[role]
        token = self.storage.get_item(keys.token)
        if not token:
            return None

        return Credential(
            role=role,
            token=token,
            last_login_at=_parse_timestamp(self.storage.get_item(keys.last_login)),
            profile=self.storage.get_item(keys.profile),
        )

    def token(self, role: Role) -> Optional[str]:
        return self.storage.get_item(ROLE_KEYS[role].token)

    def clear(self, role: Role) -> None:
        keys = ROLE_KEYS[role]
        for key in (keys.token, keys.profile, keys.last_login):
            self.storage.delete_item(key)

    def roles(self) -> List[Role]:
        """Roles currently holding a token, in precedence order (owner first)."""
        return [role for role in ROLE_KEYS if self.token(role)]
