"""
Drivers domain package.

Public API:
- Models: Driver, DriverStatus, Car
- Assignability: filter_assignable_drivers, filter_assignable_cars, is_car_assignable
- Roster access: ResourcePoolService, Result
- Duty toggling: DriverDutyService
"""
from .models import Car, Driver, DriverStatus, UNASSIGNABLE_DRIVER_STATUSES
from .selection import filter_assignable_cars, filter_assignable_drivers, is_car_assignable
from .pool import ResourcePoolService, Result
from .duty import DriverDutyService, DriverStateException

__all__ = [
    "Driver",
    "DriverStatus",
    "Car",
    "UNASSIGNABLE_DRIVER_STATUSES",
    "filter_assignable_drivers",
    "filter_assignable_cars",
    "is_car_assignable",
    "ResourcePoolService",
    "Result",
    "DriverDutyService",
    "DriverStateException",
]
