import pytest

from api.errors import TransientNetworkError
from conftest import FakeClient
from drivers.models import Car, Driver, DriverStatus
from drivers.pool import ResourcePoolService, Result
from drivers.selection import filter_assignable_cars, filter_assignable_drivers

DRIVERS = ("GET", "/api/users/available-drivers")
CARS = ("GET", "/api/users/available-cars")


@pytest.fixture
def roster():
    return [
        {"id": "D1", "full_name": "Ravi", "driver_status": "ONLINE"},
        {"id": "D2", "full_name": "Kumar", "driver_status": "PROCESSING"},
        {"id": "D3", "full_name": "Selvam", "status": "offline"},
        {"id": "D4", "full_name": "Arjun", "driver_status": "BLOCKED"},
        {"id": "D5", "full_name": "Vijay", "driver_status": "DRIVING"},
        {"id": "D6", "full_name": "Mani", "driver_status": "ON_BREAK"},
    ]


def test_driver_status_parse_is_fail_safe():
    assert DriverStatus.parse("online") == DriverStatus.ONLINE
    assert DriverStatus.parse(None) == DriverStatus.OFFLINE
    assert DriverStatus.parse("ON_BREAK") == DriverStatus.OFFLINE


def test_only_online_and_driving_drivers_are_assignable(roster):
    drivers = [Driver.from_payload(row) for row in roster]
    assert [d.id for d in filter_assignable_drivers(drivers)] == ["D1", "D5"]


def test_cars_must_be_available_and_unbound():
    cars = [
        Car("C1", "TN01AB1234", "SEDAN", True),
        Car("C2", "TN01AB1235", "SUV", False),
        Car("C3", "TN01AB1236", "SEDAN", True, current_assignment="A9"),
        Car("C4", "TN01AB1237", "SUV", True),
    ]
    assert [c.id for c in filter_assignable_cars(cars, bound_car_ids={"C4"})] == ["C1"]


def test_list_assignable_drivers(roster):
    pool = ResourcePoolService(FakeClient({DRIVERS: roster}))

    result = pool.list_assignable_drivers()

    assert result.ok
    assert [d.id for d in result.value] == ["D1", "D5"]


def test_roster_errors_come_back_as_failures():
    error = TransientNetworkError("Network error")
    pool = ResourcePoolService(FakeClient({DRIVERS: error, CARS: error}))

    drivers = pool.list_assignable_drivers()
    cars = pool.list_assignable_cars()

    assert not drivers.ok and drivers.error is error
    assert cars.value_or([]) == []
    with pytest.raises(TransientNetworkError):
        cars.unwrap()


def test_list_assignable_cars_parses_payload():
    pool = ResourcePoolService(FakeClient({CARS: [
        {"id": 1, "car_number": "TN01AB1234", "car_type": "SEDAN", "is_available": True},
        {"id": 2, "car_number": "TN01AB1235", "car_type": "SUV"},
    ]}))

    cars = pool.list_assignable_cars().unwrap()

    assert [(c.id, c.car_number) for c in cars] == [("1", "TN01AB1234")]


def test_result_map_passes_failures_through():
    error = ValueError("x")
    assert Result.failure(error).map(len).error is error
    assert Result.success([1, 2]).map(len).value == 2


def test_unreadable_roster_rows_are_skipped(roster):
    roster.append({"full_name": "No Id", "driver_status": "ONLINE"})
    pool = ResourcePoolService(FakeClient({
        DRIVERS: roster,
        CARS: [{"car_number": "TN01AB9999", "is_available": True}, {"id": "C1", "is_available": True}],
    }))

    drivers = pool.list_assignable_drivers()
    cars = pool.list_assignable_cars()

    assert drivers.ok and [d.id for d in drivers.value] == ["D1", "D5"]
    assert cars.ok and [c.id for c in cars.value] == ["C1"]
