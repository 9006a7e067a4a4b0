"""
Purpose: Connection settings for the Drop Cars REST backend.
What it does:
Reads the base URL, timeouts and credential file location from the
environment (a local .env is honoured) into a frozen settings object.

Example .env:
    DROPCARS_BASE_URL=https://drop-cars-api.example.com
    DROPCARS_TIMEOUT=30
    DROPCARS_UPLOAD_TIMEOUT=120
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CREDENTIALS_PATH = "~/.dropcars/credentials.json"


@dataclass(frozen=True)
class ClientSettings:
    base_url: str
    # Plain JSON calls. Odometer photo uploads get the longer budget.
    timeout: int = 30
    upload_timeout: int = 120
    credentials_path: str = DEFAULT_CREDENTIALS_PATH

    @classmethod
    def from_env(cls, base_url: Optional[str] = None) -> ClientSettings:
        settings = cls(
            base_url=(base_url or os.getenv("DROPCARS_BASE_URL") or "").rstrip("/"),
            timeout=int(os.getenv("DROPCARS_TIMEOUT", "30")),
            upload_timeout=int(os.getenv("DROPCARS_UPLOAD_TIMEOUT", "120")),
            credentials_path=os.getenv("DROPCARS_CREDENTIALS_PATH", DEFAULT_CREDENTIALS_PATH),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if not self.base_url:
            raise ValueError("Drop Cars base URL not set. Please set DROPCARS_BASE_URL in the .env file.")

        if self.timeout <= 0 or self.upload_timeout <= 0:
            raise ValueError("timeouts must be > 0")

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"
