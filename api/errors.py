"""
Purpose: Error taxonomy shared by every Drop Cars client module.
What it does:
- Defines one exception per failure class the apps distinguish:
  validation, authorization, transient network, backend business rule,
  unexpected.
- Translates the backend's structured error payloads into a human-readable
  message (`translate_error_payload`).

Rule: No HTTP calls here. Transport code raises these, callers render them.
"""

from __future__ import annotations

from typing import Any, Optional


class DropCarsError(Exception):
    """Base class for every error raised by the client packages."""
    pass


class ValidationError(DropCarsError):
    """
    Malformed input, rejected locally before any network call.
    `field` names the offending input so a form can highlight it.
    """

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class AuthorizationError(DropCarsError):
    """Missing or rejected token. The credential for `role` has already been cleared."""

    def __init__(self, role: str, message: str = "Authentication failed. Please login again."):
        super().__init__(message)
        self.role = role


class TransientNetworkError(DropCarsError):
    """Timeout, connectivity failure or server-side 5xx. Safe to retry by hand."""
    pass


class BusinessRuleError(DropCarsError):
    """A structured 4xx rejection from the backend (duplicate mobile, driver not assignable...)."""

    def __init__(self, status_code: int, message: str, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class UnexpectedError(DropCarsError):
    """Anything we could not classify. Shown as a generic failure."""
    pass


# "already exists" conflicts get a fixed wording, keyed by the words the
# backend uses for the field.
_DUPLICATE_MESSAGES = (
    (("primary_number", "secondary_number", "mobile", "phone"),
     "This mobile number is already registered. Please use a different number or try logging in instead."),
    (("aadhar",),
     "This Aadhar number is already registered. Please use a different number or try logging in instead."),
    (("email",),
     "This email address is already registered. Please use a different email or try logging in instead."),
)


def _duplicate_message(text: str) -> Optional[str]:
    lowered = text.lower()
    if "already exists" not in lowered:
        return None
    for keywords, message in _DUPLICATE_MESSAGES:
        if any(keyword in lowered for keyword in keywords):
            return message
    return None


def _describe_item(item: Any) -> str:
    if not isinstance(item, dict):
        return str(item)

    field = item.get("field")
    if field is None and item.get("loc"):
        # FastAPI style: ["body", "primary_number"]
        field = str(item["loc"][-1])
    message = item.get("message") or item.get("msg") or ""
    return f"{field}: {message}" if field else message


def translate_error_payload(status_code: int, payload: Any) -> str:
    """
    Map a backend error body to the message shown to the user.

    Understands:
        {"detail": "Mobile number already exists"}
        {"detail": [{"field": "primary_number", "message": "already exists"}, ...]}
        {"detail": [{"loc": ["body", "end_km"], "msg": "field required"}, ...]}
        {"message": "..."} / {"error": "..."}
    """
    if isinstance(payload, dict):
        detail = payload.get("detail")

        if isinstance(detail, list) and detail:
            described = [_describe_item(item) for item in detail]
            for text in described:
                duplicate = _duplicate_message(text)
                if duplicate:
                    return duplicate
            return "\n".join(described)

        text = detail or payload.get("message") or payload.get("error")
        if isinstance(text, str) and text:
            return _duplicate_message(text) or text

    if isinstance(payload, str) and payload.strip():
        return payload.strip()

    if status_code == 404:
        return "The requested resource was not found."
    return f"Request failed with status {status_code}."
