"""
Purpose: The assignability predicate.
What it does:
Pure filters over an already-fetched roster. The same roster feeds the
management views, so filtering never triggers another network call.
"""

import logging
from typing import Iterable, List

from .models import Car, Driver

logger = logging.getLogger(__name__)


def filter_assignable_drivers(drivers: Iterable[Driver]) -> List[Driver]:
    """
    Drops drivers who are PROCESSING (under verification), OFFLINE or BLOCKED.
    """
    eligible = []

    for driver in drivers:
        if not driver.is_assignable:
            logger.info("Excluding driver %s (%s) - status %s", driver.full_name, driver.id, driver.status.value)
            continue

        eligible.append(driver)

    return eligible


def is_car_assignable(car: Car, bound_car_ids: Iterable[str] = ()) -> bool:
    if not car.is_available:
        return False
    if car.current_assignment is not None:
        return False
    return car.id not in set(bound_car_ids)


def filter_assignable_cars(cars: Iterable[Car], bound_car_ids: Iterable[str] = ()) -> List[Car]:
    """
    Keeps available cars that are not already bound to an active assignment,
    whether the backend says so (`current_assignment`) or we know it locally.
    """
    bound = set(bound_car_ids)
    return [car for car in cars if is_car_assignable(car, bound)]
