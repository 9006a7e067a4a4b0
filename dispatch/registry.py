"""
Purpose: Local book of assignments seen by this process.
What it does:
- Stores the latest known Assignment per id, the order it belongs to, and
  an order_id -> assignment_id index (one assignment per order).
- Merges backend reads without ever moving an assignment backwards.

Rule: Registry stores state, the orchestrator decides transitions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from orders.models import Order
from .models import Assignment
from .state_machines.assignment_state import reachable_from

logger = logging.getLogger(__name__)


@dataclass
class AssignmentRegistry:
    _assignments: Dict[str, Assignment] = field(default_factory=dict)
    _by_order: Dict[str, str] = field(default_factory=dict)  # order id -> assignment id
    _orders: Dict[str, Order] = field(default_factory=dict)  # orders accepted from discovery

    # --- Public API ---

    def get(self, assignment_id: str) -> Optional[Assignment]:
        return self._assignments.get(assignment_id)

    def for_order(self, order_id: str) -> Optional[Assignment]:
        assignment_id = self._by_order.get(order_id)
        return self._assignments.get(assignment_id) if assignment_id else None

    def order(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def all(self) -> List[Assignment]:
        return list(self._assignments.values())

    def record(self, assignment: Assignment, order: Optional[Order] = None) -> Assignment:
        """Store the result of a transition the orchestrator already validated."""
        self._assignments[assignment.id] = assignment
        self._by_order[assignment.order_id] = assignment.id
        if order is not None:
            self._orders[order.id] = order
        return assignment

    def merge(self, incoming: Assignment) -> Assignment:
        """
        Fold in an assignment read from the backend. A read that reports an
        earlier status than we already hold is stale and ignored.
        """
        known = self._assignments.get(incoming.id)
        if known is None or incoming.status == known.status or incoming.status in reachable_from(known.status):
            return self.record(incoming)

        logger.info(
            "Ignoring stale read of assignment %s: %s after %s",
            incoming.id, incoming.status.value, known.status.value,
        )
        return known

    def active_car_ids(self) -> Set[str]:
        return {
            assignment.car_id for assignment in self._assignments.values()
            if assignment.car_id and not assignment.is_terminal
        }
