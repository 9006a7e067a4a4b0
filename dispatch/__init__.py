#Expose the assignment lifecycle pieces:
#Assignment model + state machine (forward-only transitions)
#Trip execution recorder (odometer, evidence, fare)
#Orchestrator (the "one call per action" entry point)

from .models import Assignment, AssignmentStatus, TERMINAL_STATUSES
from .policy import DispatchPolicy, default_dispatch_policy
from .registry import AssignmentRegistry
from .trip import TripEndRecord, TripExecutionRecorder, TripStartRecord, compute_fare
from .gateway import AssignmentApi
from .orchestrator import AssignmentOrchestrator, ResourceNotAssignableError, TripSummary #the main entry point for lifecycle actions
from .state_machines import AssignmentStateException

__all__ = [
    "Assignment",
    "AssignmentStatus",
    "TERMINAL_STATUSES",
    "DispatchPolicy",
    "default_dispatch_policy",
    "AssignmentRegistry",
    "TripStartRecord",
    "TripEndRecord",
    "TripExecutionRecorder",
    "compute_fare",
    "AssignmentApi",
    "AssignmentOrchestrator",
    "ResourceNotAssignableError",
    "TripSummary",
    "AssignmentStateException",
]
