from dataclasses import replace
from datetime import datetime
from typing import Dict, FrozenSet, Set

from api.errors import DropCarsError
from dispatch.models import Assignment, AssignmentStatus

S = AssignmentStatus

# Forward-only. CANCELLED is reachable from ACCEPTED/RESOURCED, never from
# IN_PROGRESS; EXPIRED only from ACCEPTED.
ALLOWED_TRANSITIONS: Dict[AssignmentStatus, FrozenSet[AssignmentStatus]] = {
    S.ACCEPTED: frozenset({S.RESOURCED, S.CANCELLED, S.EXPIRED}),
    S.RESOURCED: frozenset({S.IN_PROGRESS, S.CANCELLED}),
    S.IN_PROGRESS: frozenset({S.COMPLETED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
    S.EXPIRED: frozenset(),
}


class AssignmentStateException(DropCarsError):
    """Raised when an invalid assignment transition is attempted."""
    pass


def can_transition(current: AssignmentStatus, target: AssignmentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def reachable_from(current: AssignmentStatus) -> Set[AssignmentStatus]:
    """Every status a later read may legitimately report after `current`."""
    seen: Set[AssignmentStatus] = set()
    frontier = [current]
    while frontier:
        status = frontier.pop()
        for nxt in ALLOWED_TRANSITIONS[status]:
            if nxt not in seen:
                seen.add(nxt)
                frontier.append(nxt)
    return seen


def require_status(assignment: Assignment, *allowed: AssignmentStatus, action: str) -> None:
    if assignment.status not in allowed:
        expected = "/".join(status.value for status in allowed)
        raise AssignmentStateException(
            f"Cannot {action} assignment {assignment.id}: status is {assignment.status.value}, needs {expected}"
        )


def transition(assignment: Assignment, target: AssignmentStatus, **changes) -> Assignment:
    """
    Returns a new Assignment in `target`. The input is never mutated, so a
    failure anywhere after this call leaves the caller's copy unchanged.
    """
    if not can_transition(assignment.status, target):
        raise AssignmentStateException(
            f"Cannot move assignment {assignment.id} from {assignment.status.value} to {target.value}"
        )
    return replace(assignment, status=target, **changes)


def expire_if_elapsed(assignment: Assignment, now: datetime) -> Assignment:
    """
    Read-time expiry. No background timer runs; an ACCEPTED assignment whose
    `expires_at` has passed is terminal the next time anyone looks at it.
    """
    if not assignment.is_expired(now):
        return assignment
    return transition(assignment, AssignmentStatus.EXPIRED, cancelled_at=assignment.expires_at)
