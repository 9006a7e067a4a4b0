"""
Purpose: The Drop Cars REST "adapter/client".
Sole responsibility: talk to the backend over HTTP for one role and return
parsed JSON, mapping every failure onto the error taxonomy in api.errors.

Encapsulates:
- Bearer token attachment from the credential store
- pre-flight "no token" check
- timeouts (plain calls vs multipart uploads)
- session expiry: clear the role's credential, then notify the observer

It should not contain order, assignment or wallet rules.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .config import ClientSettings
from .errors import (
    AuthorizationError,
    BusinessRuleError,
    TransientNetworkError,
    UnexpectedError,
    translate_error_payload,
)

logger = logging.getLogger(__name__)


class DropCarsClient:
    """
    One client per role. The owner client and the driver client share the
    credential store and the observer but never each other's token.
    """

    def __init__(
        self,
        role,
        credential_store,
        observer,
        settings: Optional[ClientSettings] = None,
        *,
        session: Optional[requests.Session] = None,
        expire_on_transport_error: bool = True,
    ):
        self.role = role
        self.credential_store = credential_store
        self.observer = observer
        self.settings = settings or ClientSettings.from_env()
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        # A dropped connection on an authenticated call is treated like a
        # rejected token and forces re-login for this role.
        self.expire_on_transport_error = expire_on_transport_error

    # ----------------
    # Verb helpers
    # ----------------
    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs) -> Any:
        return self.request("PATCH", path, **kwargs)

    # ----------------
    # Core request
    # ----------------
    def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        headers: Dict[str, str] = {}

        if authenticated:
            token = self.credential_store.token(self.role)
            if not token:
                self._expire(f"No {self._role_name} authentication token found")
                raise AuthorizationError(self._role_name, "No authentication token found. Please login first.")
            headers["Authorization"] = f"Bearer {token}"

        timeout = self.settings.upload_timeout if files else self.settings.timeout
        logger.debug("%s %s role=%s auth=%s timeout=%ss", method, path, self._role_name, authenticated, timeout)

        try:
            response = self.session.request(
                method,
                self.settings.url(path),
                json=json,
                data=data,
                files=files,
                params=params,
                headers=headers,
                timeout=timeout,
            )
        except requests.Timeout as exc:
            logger.warning("%s %s timed out after %ss", method, path, timeout)
            self._expire_after_transport_error(authenticated)
            raise TransientNetworkError("Request timeout. Please check your connection.") from exc
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            self._expire_after_transport_error(authenticated)
            raise TransientNetworkError("Network error. Please check your internet connection.") from exc

        return self._handle_response(method, path, response, authenticated)

    # ----------------
    # Internal helpers
    # ----------------
    @property
    def _role_name(self) -> str:
        return getattr(self.role, "value", str(self.role))

    def _handle_response(self, method: str, path: str, response, authenticated: bool) -> Any:
        status = response.status_code

        if 200 <= status < 300:
            if status == 204 or not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise UnexpectedError(f"{method} {path} returned a non-JSON body") from exc

        body = self._error_body(response)
        logger.info("%s %s -> %s %s", method, path, status, body)

        if status == 401 and authenticated:
            self._expire(f"{self._role_name} session expired")
            raise AuthorizationError(self._role_name)

        if status >= 500:
            raise TransientNetworkError("Server error. Please try again later.")

        raise BusinessRuleError(status, translate_error_payload(status, body), detail=body)

    @staticmethod
    def _error_body(response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    def _expire_after_transport_error(self, authenticated: bool) -> None:
        if authenticated and self.expire_on_transport_error:
            self._expire(f"{self._role_name} session expired - network error")

    def _expire(self, reason: str) -> None:
        logger.warning("Expiring %s session: %s", self._role_name, reason)
        self.credential_store.clear(self.role)
        self.observer.emit(reason)
