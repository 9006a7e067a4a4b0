#Marks api as a package.
#Re-exports the transport, settings and error taxonomy so the domain packages
#import from api without knowing internal file names.
#No business logic.

from .client import DropCarsClient
from .config import ClientSettings
from .errors import (
    AuthorizationError,
    BusinessRuleError,
    DropCarsError,
    TransientNetworkError,
    UnexpectedError,
    ValidationError,
    translate_error_payload,
)

__all__ = [
    "DropCarsClient",
    "ClientSettings",
    "DropCarsError",
    "ValidationError",
    "AuthorizationError",
    "TransientNetworkError",
    "BusinessRuleError",
    "UnexpectedError",
    "translate_error_payload",
]
