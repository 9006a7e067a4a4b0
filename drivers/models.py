"""
Purpose: Core data models for the drivers domain.
What it does:
Defines the structure of a Driver, their duty status and a Car, parsed
from the backend's roster payloads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class DriverStatus(str, Enum):
    """
    The state a driver can be in.
    PROCESSING means identity verification is not finished yet.
    """
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"
    DRIVING = "DRIVING"
    PROCESSING = "PROCESSING"
    BLOCKED = "BLOCKED"

    @classmethod
    def parse(cls, value: Any) -> DriverStatus:
        """
        Case-insensitive. Anything unrecognised is read as OFFLINE so an
        unknown status can never make a driver assignable.
        """
        if isinstance(value, DriverStatus):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            logger.warning("Unknown driver status %r, treating as OFFLINE", value)
            return cls.OFFLINE


# Never offered for a new assignment.
UNASSIGNABLE_DRIVER_STATUSES = frozenset({DriverStatus.PROCESSING, DriverStatus.OFFLINE, DriverStatus.BLOCKED})


@dataclass(frozen=True)
class Driver:
    """
    A stateless snapshot of a driver as returned by the roster endpoint.
    """
    id: str
    full_name: str
    primary_number: str
    status: DriverStatus
    current_assignment: Optional[str] = None

    @property
    def is_assignable(self) -> bool:
        return self.status not in UNASSIGNABLE_DRIVER_STATUSES

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Driver:
        # The backend has used both `driver_status` and `status`.
        raw_status = payload.get("driver_status") or payload.get("status")
        current = payload.get("current_assignment")
        return cls(
            id=str(payload["id"]),
            full_name=payload.get("full_name") or "",
            primary_number=payload.get("primary_number") or "",
            status=DriverStatus.parse(raw_status),
            current_assignment=str(current) if current else None,
        )


@dataclass(frozen=True)
class Car:
    id: str
    car_number: str
    car_type: str
    is_available: bool
    car_name: str = ""
    current_assignment: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Car:
        current = payload.get("current_assignment")
        return cls(
            id=str(payload["id"]),
            car_number=payload.get("car_number") or "",
            car_type=payload.get("car_type") or "",
            is_available=bool(payload.get("is_available", False)),
            car_name=payload.get("car_name") or "",
            current_assignment=str(current) if current else None,
        )
