from .assignment_state import (
    ALLOWED_TRANSITIONS,
    AssignmentStateException,
    can_transition,
    expire_if_elapsed,
    reachable_from,
    require_status,
    transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "AssignmentStateException",
    "can_transition",
    "expire_if_elapsed",
    "reachable_from",
    "require_status",
    "transition",
]
