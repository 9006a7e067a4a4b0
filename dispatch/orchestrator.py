"""
Purpose: Orchestrator for the assignment lifecycle (the "glue").
What it does:
Drives an accepted order through

    ACCEPTED -> RESOURCED -> IN_PROGRESS -> COMPLETED
        |            |
        +-> CANCELLED/EXPIRED

Every transition is validated locally, sent to the backend, and only then
recorded. Nothing is applied optimistically: a failed call leaves the
assignment exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, List, Optional

from api.errors import BusinessRuleError, DropCarsError, UnexpectedError, ValidationError
from drivers.selection import is_car_assignable
from orders.models import Order, TripStatus
from orders.pricing import to_decimal
from .models import Assignment, AssignmentStatus
from .policy import DispatchPolicy, default_dispatch_policy
from .registry import AssignmentRegistry
from .state_machines.assignment_state import (
    AssignmentStateException,
    expire_if_elapsed,
    require_status,
    transition,
)
from .trip import TripExecutionRecorder, validate_rate

logger = logging.getLogger(__name__)

S = AssignmentStatus


class ResourceNotAssignableError(DropCarsError):
    """The driver or car failed the assignability predicate at bind time."""
    pass


@dataclass(frozen=True)
class TripSummary:
    assignment: Assignment
    distance_km: int
    fare: Decimal
    commission: Decimal
    wallet_balance: Decimal


class AssignmentOrchestrator:
    """
    Coordinates owner actions (accept, bind, cancel) and driver actions
    (start, end) on assignments.
    """
    def __init__(
        self,
        api,
        resource_pool,
        ledger,
        *,
        owner_id: Optional[str] = None,
        registry: Optional[AssignmentRegistry] = None,
        recorder: Optional[TripExecutionRecorder] = None,
        policy: Optional[DispatchPolicy] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.api = api
        self.resource_pool = resource_pool
        self.ledger = ledger
        self.owner_id = owner_id
        self.registry = registry or AssignmentRegistry()
        self.recorder = recorder or TripExecutionRecorder()
        self.policy = policy or default_dispatch_policy()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # ----------------
    # Reads
    # ----------------
    def get(self, assignment_id: str) -> Assignment:
        """The current assignment, with read-time expiry applied."""
        assignment = self.registry.get(assignment_id)
        if assignment is None:
            raise AssignmentStateException(f"Unknown assignment {assignment_id}")

        current = expire_if_elapsed(assignment, self.clock())
        if current is not assignment:
            logger.info("Assignment %s expired before it was resourced", assignment_id)
            self.registry.record(current)
        return current

    def assignments(self) -> List[Assignment]:
        return [self.get(assignment.id) for assignment in self.registry.all()]

    # ----------------
    # Owner actions
    # ----------------
    def accept(self, order: Order) -> Assignment:
        """
        PENDING order -> new ACCEPTED assignment. Accepting an order this
        owner already holds returns the existing assignment.
        """
        existing = self.registry.for_order(order.id)
        if existing is not None:
            if self._is_mine(existing):
                logger.info("Order %s already accepted as assignment %s", order.id, existing.id)
                return self.get(existing.id)
            raise AssignmentStateException(f"Order {order.id} was accepted by another owner")

        if order.owner_id and self.owner_id and order.owner_id != self.owner_id:
            raise AssignmentStateException(f"Order {order.id} is not offered to this owner")
        if order.trip_status != TripStatus.PENDING:
            raise AssignmentStateException(f"Order {order.id} is {order.trip_status.value}, not PENDING")

        now = self.clock()
        try:
            payload = self.api.accept_order(order.id)
        except BusinessRuleError as exc:
            if exc.status_code != 409:
                raise
            # Accepted earlier, possibly by a previous run of this app.
            assignment = self._find_existing(order.id)
            if assignment is None:
                raise
            logger.info("Order %s already accepted on the backend as %s", order.id, assignment.id)
            order.trip_status = TripStatus.ASSIGNED
            return self.registry.record(assignment, order=order)

        assignment = self._new_assignment(order, payload, now)
        order.trip_status = TripStatus.ASSIGNED
        logger.info("Accepted order %s as assignment %s", order.id, assignment.id)
        return self.registry.record(assignment, order=order)

    def bind_resources(self, assignment_id: str, driver_id: str, car_id: str) -> Assignment:
        """
        ACCEPTED -> RESOURCED. Rosters are re-fetched here so a driver who
        went offline after the picker was shown is rejected.
        """
        assignment = self.get(assignment_id)
        require_status(assignment, S.ACCEPTED, action="bind resources to")

        drivers = self.resource_pool.fetch_driver_roster().unwrap()
        driver = next((d for d in drivers if d.id == str(driver_id)), None)
        if driver is None or not driver.is_assignable:
            status = driver.status.value if driver else "unknown"
            raise ResourceNotAssignableError(f"Driver {driver_id} is not assignable (status {status})")

        cars = self.resource_pool.fetch_car_roster().unwrap()
        car = next((c for c in cars if c.id == str(car_id)), None)
        if car is None or not is_car_assignable(car, self.registry.active_car_ids()):
            raise ResourceNotAssignableError(f"Car {car_id} is not available")

        self.api.assign_car_driver(assignment.order_id, driver.id, car.id)

        updated = transition(assignment, S.RESOURCED, driver_id=driver.id, car_id=car.id)
        logger.info("Assignment %s bound to driver %s and car %s", assignment.id, driver.id, car.id)
        return self.registry.record(updated)

    def cancel(self, assignment_id: str, reason: str) -> Assignment:
        assignment = self.get(assignment_id)
        require_status(assignment, S.ACCEPTED, S.RESOURCED, action="cancel")

        self.api.cancel(assignment.id, reason)

        updated = transition(assignment, S.CANCELLED, cancelled_at=self.clock(), cancel_reason=reason)
        logger.info("Assignment %s cancelled: %s", assignment.id, reason)
        return self.registry.record(updated)

    # ----------------
    # Driver actions
    # ----------------
    def sync_driver_assignments(self) -> List[Assignment]:
        """
        Load the signed-in driver's assignments. Known assignments only move
        forward; a reported `start_km` restores the trip start record.
        """
        synced = []
        for row in self.api.driver_assigned_orders():
            try:
                incoming = Assignment.from_payload(row)
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping unreadable assignment row: %s", exc)
                continue

            assignment = self.registry.merge(incoming)
            start_km = row.get("start_km")
            if (
                assignment.status == S.IN_PROGRESS
                and start_km is not None
                and self.recorder.start_for(assignment.id) is None
            ):
                self.recorder.record_start(
                    assignment.id,
                    int(start_km),
                    row.get("speedometer_img_url") or "remote",
                    record_id=row.get("start_record_id"),
                )
            synced.append(assignment)
        return synced

    def start_trip(self, assignment_id: str, start_km: Any, start_odometer_evidence: str) -> Assignment:
        assignment = self.get(assignment_id)
        require_status(assignment, S.RESOURCED, action="start trip for")
        start_km = self.recorder.validate_start(start_km, start_odometer_evidence)

        response = self.api.start_trip(assignment.order_id, start_km, start_odometer_evidence)

        self.recorder.record_start(
            assignment.id,
            start_km,
            start_odometer_evidence,
            started_at=self.clock(),
            record_id=response.get("start_record_id") or response.get("id"),
        )
        updated = transition(assignment, S.IN_PROGRESS)
        logger.info("Trip started for assignment %s at %d km", assignment.id, start_km)
        return self.registry.record(updated)

    def end_trip(
        self,
        assignment_id: str,
        end_km: Any,
        end_odometer_evidence: str,
        customer_acknowledged: bool,
        *,
        fare_per_km: Any = None,
        updated_toll_charges: Any = None,
    ) -> TripSummary:
        """
        IN_PROGRESS -> COMPLETED, posting the platform commission debit.
        If the debit fails the end record is kept and a retry only re-posts
        the debit.
        """
        assignment = self.get(assignment_id)
        if self.recorder.start_for(assignment.id) is None:
            raise AssignmentStateException(f"Cannot end trip for assignment {assignment.id}: trip was never started")
        require_status(assignment, S.IN_PROGRESS, action="end trip for")

        end = self.recorder.end_for(assignment.id)
        if end is None:
            end_km = self.recorder.validate_end(assignment.id, end_km, end_odometer_evidence, customer_acknowledged)
            rate = self._fare_per_km(assignment, fare_per_km)
            toll = self._toll(updated_toll_charges)

            response = self.api.end_trip(assignment.order_id, end_km, end_odometer_evidence, toll)

            end = self.recorder.record_end(
                assignment.id,
                end_km,
                end_odometer_evidence,
                rate,
                ended_at=self.clock(),
                updated_toll_charges=toll,
                record_id=response.get("end_record_id"),
            )
        else:
            logger.info("End of trip %s already recorded; retrying commission debit", assignment.id)

        commission = self.policy.platform_commission
        balance = self.ledger.debit(
            commission,
            self.policy.commission_description,
            metadata={"assignment_id": assignment.id, "order_id": assignment.order_id},
        )

        completed = transition(assignment, S.COMPLETED, completed_at=self.clock())
        self.registry.record(completed)
        order = self.registry.order(assignment.order_id)
        if order is not None:
            order.trip_status = TripStatus.COMPLETED

        logger.info("Trip %s completed: %d km, fare %s", assignment.id, end.distance_km, end.fare)
        return TripSummary(
            assignment=completed,
            distance_km=end.distance_km,
            fare=end.fare,
            commission=commission,
            wallet_balance=balance,
        )

    # ----------------
    # Internal helpers
    # ----------------
    def _is_mine(self, assignment: Assignment) -> bool:
        # An assignment with no owner is never claimed by a known owner.
        if self.owner_id is None:
            return True
        return assignment.owner_id == self.owner_id

    def _find_existing(self, order_id: str) -> Optional[Assignment]:
        for row in self.api.order_assignments(order_id):
            try:
                candidate = Assignment.from_payload(row)
            except (KeyError, ValueError):
                continue
            if self._is_mine(candidate):
                return candidate
        return None

    def _new_assignment(self, order: Order, payload: dict, now: datetime) -> Assignment:
        data = dict(payload.get("assignment") or payload)
        data.setdefault("order_id", order.id)
        if self.owner_id:
            data.setdefault("vehicle_owner_id", self.owner_id)
        if not (data.get("assignment_id") or data.get("id")):
            raise UnexpectedError("Accept order response carried no assignment id")

        assignment = Assignment.from_payload(data)
        # Whatever the backend calls it, a fresh assignment starts ACCEPTED with nothing bound.
        assignment = replace(assignment, status=S.ACCEPTED, assigned_at=assignment.assigned_at or now)
        if assignment.expires_at is None and self.policy.acceptance_window_seconds:
            assignment = replace(
                assignment, expires_at=now + timedelta(seconds=self.policy.acceptance_window_seconds)
            )
        return assignment

    def _fare_per_km(self, assignment: Assignment, fare_per_km: Any) -> Decimal:
        if fare_per_km is None:
            order = self.registry.order(assignment.order_id)
            fare_per_km = order.cost_per_km if order is not None else None
        if fare_per_km is None:
            raise ValidationError("fare_per_km", "Fare per km is unknown for this trip")
        return validate_rate(fare_per_km)

    @staticmethod
    def _toll(value: Any) -> Optional[Decimal]:
        if value is None:
            return None
        toll = to_decimal(value)
        if toll is None or toll < 0:
            raise ValidationError("updated_toll_charges", "Toll charges must be a non-negative amount")
        return toll
