"""
Purpose: Driver duty toggling (online / offline), driver role.
What it does:
Validates the transition locally, then calls the backend with the driver's
own credential.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from api.errors import DropCarsError
from .models import Driver, DriverStatus

logger = logging.getLogger(__name__)


class DriverStateException(DropCarsError):
    """Raised when an invalid driver duty transition is attempted."""
    pass


def go_online(driver: Driver) -> Driver:
    if driver.status in (DriverStatus.PROCESSING, DriverStatus.BLOCKED):
        raise DriverStateException(f"Driver {driver.id} cannot go online while {driver.status.value}")
    if driver.status == DriverStatus.DRIVING:
        # Already on duty.
        return driver
    return replace(driver, status=DriverStatus.ONLINE)


def go_offline(driver: Driver) -> Driver:
    if driver.status == DriverStatus.DRIVING:
        raise DriverStateException(f"Driver {driver.id} cannot go offline during a trip")
    if driver.status in (DriverStatus.PROCESSING, DriverStatus.BLOCKED):
        return driver
    return replace(driver, status=DriverStatus.OFFLINE)


class DriverDutyService:
    def __init__(self, driver_client):
        self.client = driver_client

    def go_online(self, driver: Driver) -> Driver:
        updated = go_online(driver)
        self.client.put("/api/users/cardriver/online")
        logger.info("Driver %s is online", driver.id)
        return updated

    def go_offline(self, driver: Driver) -> Driver:
        updated = go_offline(driver)
        self.client.put("/api/users/cardriver/offline")
        logger.info("Driver %s is offline", driver.id)
        return updated
