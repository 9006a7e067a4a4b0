"""
Purpose: Sign-in / sign-out for both roles.
What it does:
Exchanges phone + password for a bearer token, writes the role's Credential
(token, profile snapshot, last-login time) and re-runs session resolution,
so whichever role logged in last becomes authoritative.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import jwt

from api.errors import BusinessRuleError, UnexpectedError, ValidationError
from .credentials import Credential, CredentialStore, Role

logger = logging.getLogger(__name__)


def normalize_mobile_number(phone: str) -> str:
    """'+91 98765-43210' -> '9876543210' (last ten digits, country code dropped)."""
    if not phone or not phone.strip():
        return ""
    digits = re.sub(r"\D", "", re.sub(r"^\+91", "", phone.strip()))
    return digits[-10:]


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key):
            return data[key]
    return None


class SignInService:
    def __init__(
        self,
        owner_client,
        driver_client,
        credential_store: CredentialStore,
        resolver=None,
        expiry_handler=None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.owner_client = owner_client
        self.driver_client = driver_client
        self.credential_store = credential_store
        self.resolver = resolver
        self.expiry_handler = expiry_handler
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def sign_in_driver(self, primary_number: str, password: str) -> Credential:
        if not primary_number or not password:
            raise ValidationError("primary_number", "Mobile number and password are required")

        try:
            data = self.driver_client.post(
                "/api/users/cardriver/signin",
                json={"primary_number": primary_number, "password": password},
                authenticated=False,
            )
        except BusinessRuleError as exc:
            if exc.status_code == 401:
                raise BusinessRuleError(401, "Invalid mobile number or password", exc.detail) from exc
            if exc.status_code == 404:
                raise BusinessRuleError(404, "Driver not found. Please check your mobile number", exc.detail) from exc
            raise

        data = data or {}
        token = _pick(data, "token", "access_token", "jwt_token")
        if not token:
            raise UnexpectedError("No access token received from server")

        driver = _pick(data, "driver", "user") or {}
        profile = {
            "driverId": driver.get("id"),
            "fullName": driver.get("full_name"),
            "driver_status": driver.get("driver_status") or driver.get("status"),
        }
        return self._store(Role.DRIVER, token, profile)

    def sign_in_owner(self, mobile_number: str, password: str) -> Credential:
        formatted = normalize_mobile_number(mobile_number)
        if len(formatted) != 10:
            raise ValidationError("mobile_number", "Enter a valid 10 digit mobile number")
        if not password:
            raise ValidationError("password", "Password is required")

        try:
            data = self.owner_client.post(
                "/api/users/vehicleowner/login",
                json={"mobile_number": formatted, "password": password},
                authenticated=False,
            )
        except BusinessRuleError as exc:
            if exc.status_code == 401:
                raise BusinessRuleError(
                    401,
                    "Invalid mobile number or password. Please check your credentials and try again.",
                    exc.detail,
                ) from exc
            if exc.status_code == 404:
                raise BusinessRuleError(
                    404, "Account not found. Please check your mobile number or sign up first.", exc.detail
                ) from exc
            raise

        data = data or {}
        token = _pick(data, "access_token", "token")
        if not token:
            raise UnexpectedError("No access token received from server")

        profile: Dict[str, Any] = {"mobile_number": formatted}
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
            if claims.get("sub"):
                profile["id"] = claims["sub"]
        except jwt.PyJWTError:
            logger.debug("Owner token is not a JWT; profile taken from response only")
        profile.update(_pick(data, "user", "vehicle_owner") or {})
        return self._store(Role.OWNER, token, profile)

    def sign_out(self, role: Role) -> None:
        """Clears only `role`; the other role's credential stays usable."""
        self.credential_store.clear(role)
        if self.resolver is not None:
            self.resolver.forget(role)
        logger.info("Signed out %s", role.value)

    def _store(self, role: Role, token: str, profile: Dict[str, Any]) -> Credential:
        credential = Credential(
            role=role,
            token=token,
            last_login_at=self.clock(),
            profile=json.dumps(profile),
        )
        self.credential_store.save(credential)
        logger.info("Signed in as %s", role.value)

        if self.expiry_handler is not None:
            self.expiry_handler.arm()
        if self.resolver is not None:
            self.resolver.resolve(now=credential.last_login_at)
        return credential
