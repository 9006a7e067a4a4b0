import pytest

from conftest import FakeClient
from drivers.duty import DriverDutyService, DriverStateException, go_offline, go_online
from drivers.models import Driver, DriverStatus


def driver(status):
    return Driver("D1", "Ravi", "9876543210", status)


def test_go_online_from_offline():
    assert go_online(driver(DriverStatus.OFFLINE)).status == DriverStatus.ONLINE


@pytest.mark.parametrize("status", [DriverStatus.PROCESSING, DriverStatus.BLOCKED])
def test_unverified_or_blocked_cannot_go_online(status):
    with pytest.raises(DriverStateException):
        go_online(driver(status))


def test_cannot_go_offline_mid_trip():
    with pytest.raises(DriverStateException):
        go_offline(driver(DriverStatus.DRIVING))
    assert go_online(driver(DriverStatus.DRIVING)).status == DriverStatus.DRIVING


def test_service_calls_backend_after_local_check():
    client = FakeClient({
        ("PUT", "/api/users/cardriver/online"): {"message": "ok"},
        ("PUT", "/api/users/cardriver/offline"): None,
    })
    service = DriverDutyService(client)

    online = service.go_online(driver(DriverStatus.OFFLINE))
    offline = service.go_offline(online)

    assert offline.status == DriverStatus.OFFLINE
    assert [path for _, path, _ in client.calls] == ["/api/users/cardriver/online", "/api/users/cardriver/offline"]

    with pytest.raises(DriverStateException):
        service.go_offline(driver(DriverStatus.DRIVING))
    assert len(client.calls) == 2
