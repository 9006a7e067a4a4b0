"""
Purpose: Core data model for assignments.
What it does:
An Assignment binds one accepted Order to the accepting owner, later to a
driver and a car, and tracks its execution status. Instances are frozen;
every transition produces a new one (see dispatch.state_machines).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class AssignmentStatus(str, Enum):
    ACCEPTED = "ACCEPTED"
    RESOURCED = "RESOURCED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


TERMINAL_STATUSES = frozenset({AssignmentStatus.COMPLETED, AssignmentStatus.CANCELLED, AssignmentStatus.EXPIRED})

# Names the backend uses for the same states.
BACKEND_STATUS_ALIASES: Dict[str, AssignmentStatus] = {
    "PENDING": AssignmentStatus.ACCEPTED,
    "ACCEPTED": AssignmentStatus.ACCEPTED,
    "ASSIGNED": AssignmentStatus.RESOURCED,
    "RESOURCED": AssignmentStatus.RESOURCED,
    "DRIVING": AssignmentStatus.IN_PROGRESS,
    "IN_PROGRESS": AssignmentStatus.IN_PROGRESS,
    "COMPLETED": AssignmentStatus.COMPLETED,
    "CANCELLED": AssignmentStatus.CANCELLED,
    "EXPIRED": AssignmentStatus.EXPIRED,
}


def parse_datetime(raw: Any) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        parsed = raw
    else:
        text = str(raw).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning("Ignoring unreadable timestamp %r", raw)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Assignment:
    id: str
    order_id: str
    status: AssignmentStatus
    owner_id: Optional[str] = None

    # Null until bound by the owner.
    driver_id: Optional[str] = None
    car_id: Optional[str] = None

    assigned_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_cancelled(self) -> bool:
        """EXPIRED counts as cancelled: the order was never resourced in time."""
        return self.status in (AssignmentStatus.CANCELLED, AssignmentStatus.EXPIRED)

    def is_expired(self, now: datetime) -> bool:
        return (
            self.status == AssignmentStatus.ACCEPTED
            and self.expires_at is not None
            and self.expires_at <= now
        )

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Assignment:
        driver_id = payload.get("driver_id")
        car_id = payload.get("car_id")
        owner_id = payload.get("vehicle_owner_id") or payload.get("owner_id")

        raw_status = payload.get("assignment_status") or payload.get("status")
        if raw_status:
            status = BACKEND_STATUS_ALIASES.get(str(raw_status).upper())
            if status is None:
                raise ValueError(f"Unknown assignment status {raw_status!r}")
        elif driver_id and car_id:
            status = AssignmentStatus.RESOURCED
        else:
            status = AssignmentStatus.ACCEPTED

        return cls(
            id=str(payload.get("assignment_id") or payload["id"]),
            order_id=str(payload["order_id"]),
            status=status,
            owner_id=str(owner_id) if owner_id else None,
            driver_id=str(driver_id) if driver_id else None,
            car_id=str(car_id) if car_id else None,
            assigned_at=parse_datetime(payload.get("assigned_at")),
            expires_at=parse_datetime(payload.get("expires_at")),
            cancelled_at=parse_datetime(payload.get("cancelled_at")),
            completed_at=parse_datetime(payload.get("completed_at")),
        )
