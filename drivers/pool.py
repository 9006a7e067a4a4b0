"""
Purpose: Resource Pool Service.
What it does:
Fetches the owner's full driver and car rosters and applies the
assignability predicate client-side.

Failures are returned, not raised: every call yields a Result, and the
screen decides to render the error branch as an empty list. Offering no
driver is safe; offering a stale one is not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, List, Optional, TypeVar

from api.errors import DropCarsError
from .models import Car, Driver
from .selection import filter_assignable_cars, filter_assignable_drivers

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> Result[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        if not self.ok:
            return Result(error=self.error)
        return Result(value=fn(self.value))

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value

    def value_or(self, default: T) -> T:
        return self.value if self.ok else default


def _rows(payload: Any) -> List[dict]:
    return payload if isinstance(payload, list) else []


def _parse_rows(payload: Any, parse: Callable[[dict], T], kind: str) -> List[T]:
    """Unreadable roster rows are skipped; they are never offered."""
    parsed = []
    for row in _rows(payload):
        try:
            parsed.append(parse(row))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping unreadable %s row: %s", kind, exc)
    return parsed


class ResourcePoolService:
    DRIVERS_PATH = "/api/users/available-drivers"
    CARS_PATH = "/api/users/available-cars"

    def __init__(self, owner_client):
        self.client = owner_client

    def fetch_driver_roster(self) -> Result[List[Driver]]:
        try:
            payload = self.client.get(self.DRIVERS_PATH)
        except DropCarsError as exc:
            logger.warning("Failed to fetch driver roster: %s", exc)
            return Result.failure(exc)
        return Result.success(_parse_rows(payload, Driver.from_payload, "driver"))

    def fetch_car_roster(self) -> Result[List[Car]]:
        try:
            payload = self.client.get(self.CARS_PATH)
        except DropCarsError as exc:
            logger.warning("Failed to fetch car roster: %s", exc)
            return Result.failure(exc)
        return Result.success(_parse_rows(payload, Car.from_payload, "car"))

    def list_assignable_drivers(self) -> Result[List[Driver]]:
        result = self.fetch_driver_roster()
        assignable = result.map(filter_assignable_drivers)
        if result.ok:
            logger.info("Filtered %d drivers to %d assignable", len(result.value), len(assignable.value))
        return assignable

    def list_assignable_cars(self, bound_car_ids: Iterable[str] = ()) -> Result[List[Car]]:
        bound = list(bound_car_ids)
        return self.fetch_car_roster().map(lambda cars: filter_assignable_cars(cars, bound))
