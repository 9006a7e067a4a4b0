"""
Purpose: Trip Execution Recorder.
What it does:
- Validates odometer readings and evidence before anything is sent.
- Keeps the start and end record of every trip, keyed by assignment id.
- Derives distance and fare.

No network calls here. The orchestrator decides when to record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from api.errors import ValidationError
from orders.pricing import round_half_up, to_decimal
from .state_machines.assignment_state import AssignmentStateException


@dataclass(frozen=True)
class TripStartRecord:
    assignment_id: str
    start_km: int
    evidence: str  # reference to the captured speedometer photo
    started_at: Optional[datetime] = None
    record_id: Optional[str] = None


@dataclass(frozen=True)
class TripEndRecord:
    assignment_id: str
    end_km: int
    evidence: str
    distance_km: int
    fare: Decimal
    ended_at: Optional[datetime] = None
    updated_toll_charges: Optional[Decimal] = None
    record_id: Optional[str] = None


def validate_rate(fare_per_km: Any) -> Decimal:
    rate = to_decimal(fare_per_km)
    if rate is None or rate < 0:
        raise ValidationError("fare_per_km", "Fare per km must be a non-negative number")
    return rate


def compute_fare(distance_km: int, fare_per_km: Any) -> Decimal:
    """round(distance * rate), half-up, in whole currency units."""
    return round_half_up(Decimal(distance_km) * validate_rate(fare_per_km))


def _odometer(value: Any, field: str) -> int:
    # Readings are typed into a form, so digit strings are accepted too.
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, "Odometer reading must be a whole number of kilometers")
    if value < 0:
        raise ValidationError(field, "Odometer reading cannot be negative")
    return value


def _evidence(value: Any, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(field, "Speedometer image is required")
    return str(value)


class TripExecutionRecorder:
    def __init__(self):
        self._starts: Dict[str, TripStartRecord] = {}
        self._ends: Dict[str, TripEndRecord] = {}

    def start_for(self, assignment_id: str) -> Optional[TripStartRecord]:
        return self._starts.get(assignment_id)

    def end_for(self, assignment_id: str) -> Optional[TripEndRecord]:
        return self._ends.get(assignment_id)

    # --- Validation (before any network call) ---

    def validate_start(self, start_km: Any, evidence: Any) -> int:
        start_km = _odometer(start_km, "start_km")
        _evidence(evidence, "speedometer_img")
        return start_km

    def validate_end(self, assignment_id: str, end_km: Any, evidence: Any, customer_acknowledged: bool) -> int:
        start = self._starts.get(assignment_id)
        if start is None:
            raise AssignmentStateException(f"Trip for assignment {assignment_id} was never started")

        end_km = _odometer(end_km, "end_km")
        if end_km <= start.start_km:
            raise ValidationError(
                "end_km", f"End KM ({end_km}) must be greater than start KM ({start.start_km})"
            )
        _evidence(evidence, "close_speedometer_img")
        if customer_acknowledged is not True:
            raise ValidationError("customer_acknowledged", "Customer must confirm the trip end")
        return end_km

    # --- Recording (after the backend accepted) ---

    def record_start(
        self,
        assignment_id: str,
        start_km: int,
        evidence: str,
        started_at: Optional[datetime] = None,
        record_id: Optional[str] = None,
    ) -> TripStartRecord:
        record = TripStartRecord(assignment_id, start_km, evidence, started_at, record_id)
        self._starts[assignment_id] = record
        return record

    def record_end(
        self,
        assignment_id: str,
        end_km: int,
        evidence: str,
        fare_per_km: Any,
        ended_at: Optional[datetime] = None,
        updated_toll_charges: Optional[Decimal] = None,
        record_id: Optional[str] = None,
    ) -> TripEndRecord:
        start = self._starts.get(assignment_id)
        if start is None:
            raise AssignmentStateException(f"Trip for assignment {assignment_id} was never started")

        distance_km = end_km - start.start_km
        record = TripEndRecord(
            assignment_id=assignment_id,
            end_km=end_km,
            evidence=evidence,
            distance_km=distance_km,
            fare=compute_fare(distance_km, fare_per_km),
            ended_at=ended_at,
            updated_toll_charges=updated_toll_charges,
            record_id=record_id,
        )
        self._ends[assignment_id] = record
        return record
