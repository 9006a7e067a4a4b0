import pytest
import requests

from api.client import DropCarsClient
from api.config import ClientSettings
from api.errors import (
    AuthorizationError,
    BusinessRuleError,
    TransientNetworkError,
    UnexpectedError,
    translate_error_payload,
)
from conftest import FakeResponse, FakeSession
from session.credentials import Credential, Role

SETTINGS = ClientSettings(base_url="https://api.dropcars.test", timeout=5, upload_timeout=60)


@pytest.fixture
def expiries(observer):
    seen = []
    observer.subscribe(seen.append)
    return seen


def make_client(credential_store, observer, *replies, role=Role.OWNER, **kwargs):
    session = FakeSession(*replies)
    return DropCarsClient(role, credential_store, observer, SETTINGS, session=session, **kwargs), session


def test_attaches_bearer_token(credential_store, observer):
    credential_store.save(Credential(Role.OWNER, "owner-token"))
    client, session = make_client(credential_store, observer, FakeResponse(200, [{"id": 1}]))

    assert client.get("/api/orders/vehicle_owner/pending", params={"page": 1}) == [{"id": 1}]

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", "https://api.dropcars.test/api/orders/vehicle_owner/pending")
    assert kwargs["headers"] == {"Authorization": "Bearer owner-token"}
    assert kwargs["timeout"] == 5
    assert session.headers["Accept"] == "application/json"


def test_uploads_use_the_longer_timeout(credential_store, observer):
    credential_store.save(Credential(Role.DRIVER, "driver-token"))
    client, session = make_client(credential_store, observer, FakeResponse(200, {}), role=Role.DRIVER)

    client.post("/api/assignments/driver/start-trip/42", data={"start_km": "1"}, files={"speedometer_img": b"x"})

    assert session.calls[0][2]["timeout"] == 60


def test_missing_token_fails_before_network(credential_store, observer, expiries):
    client, session = make_client(credential_store, observer)

    with pytest.raises(AuthorizationError):
        client.get("/api/wallet/balance")

    assert session.calls == []
    assert len(expiries) == 1


def test_401_clears_only_that_role_and_emits(credential_store, observer, expiries):
    credential_store.save(Credential(Role.OWNER, "owner-token"))
    credential_store.save(Credential(Role.DRIVER, "driver-token"))
    client, _ = make_client(credential_store, observer, FakeResponse(401, {"detail": "expired"}))

    with pytest.raises(AuthorizationError):
        client.get("/api/wallet/balance")

    assert credential_store.token(Role.OWNER) is None
    assert credential_store.token(Role.DRIVER) == "driver-token"
    assert expiries == ["owner session expired"]


def test_unauthenticated_401_is_a_business_error(credential_store, observer, expiries):
    client, _ = make_client(credential_store, observer, FakeResponse(401, {"detail": "Invalid credentials"}))

    with pytest.raises(BusinessRuleError) as exc:
        client.post("/api/users/vehicleowner/login", json={}, authenticated=False)

    assert exc.value.status_code == 401
    assert expiries == []


def test_transport_error_expires_session_by_default(credential_store, observer, expiries):
    credential_store.save(Credential(Role.OWNER, "owner-token"))
    client, _ = make_client(credential_store, observer, requests.ConnectionError("down"))

    with pytest.raises(TransientNetworkError):
        client.get("/api/wallet/balance")

    assert credential_store.token(Role.OWNER) is None
    assert len(expiries) == 1


def test_transport_error_can_keep_session(credential_store, observer, expiries):
    credential_store.save(Credential(Role.OWNER, "owner-token"))
    client, _ = make_client(
        credential_store, observer, requests.Timeout("slow"), expire_on_transport_error=False
    )

    with pytest.raises(TransientNetworkError, match="timeout"):
        client.get("/api/wallet/balance")

    assert credential_store.token(Role.OWNER) == "owner-token"
    assert expiries == []


def test_server_error_is_transient(credential_store, observer):
    credential_store.save(Credential(Role.OWNER, "owner-token"))
    client, _ = make_client(credential_store, observer, FakeResponse(503, "Service Unavailable"))

    with pytest.raises(TransientNetworkError):
        client.get("/api/wallet/balance")
    assert credential_store.token(Role.OWNER) == "owner-token"


def test_4xx_message_is_translated(credential_store, observer):
    credential_store.save(Credential(Role.OWNER, "owner-token"))
    body = {"detail": [{"loc": ["body", "driver_id"], "msg": "Driver is not available"}]}
    client, _ = make_client(credential_store, observer, FakeResponse(422, body))

    with pytest.raises(BusinessRuleError) as exc:
        client.patch("/api/assignments/42/assign-car-driver", json={})

    assert str(exc.value) == "driver_id: Driver is not available"
    assert exc.value.detail == body


def test_empty_and_non_json_success_bodies(credential_store, observer):
    credential_store.save(Credential(Role.OWNER, "owner-token"))
    client, _ = make_client(credential_store, observer, FakeResponse(204), FakeResponse(200, "<html>"))

    assert client.put("/api/assignments/1/status", json={}) is None
    with pytest.raises(UnexpectedError):
        client.get("/api/wallet/balance")


@pytest.mark.parametrize("status,payload,expected", [
    (400, {"detail": "Mobile number already exists"},
     "This mobile number is already registered. Please use a different number or try logging in instead."),
    (400, {"detail": [{"field": "email", "message": "already exists"}]},
     "This email address is already registered. Please use a different email or try logging in instead."),
    (409, {"message": "Order already accepted"}, "Order already accepted"),
    (404, None, "The requested resource was not found."),
    (418, {}, "Request failed with status 418."),
])
def test_translate_error_payload(status, payload, expected):
    assert translate_error_payload(status, payload) == expected


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("DROPCARS_BASE_URL", "https://api.dropcars.test/")
    monkeypatch.setenv("DROPCARS_TIMEOUT", "12")

    settings = ClientSettings.from_env()

    assert settings.base_url == "https://api.dropcars.test"
    assert settings.timeout == 12
    assert settings.url("/api/wallet/balance") == "https://api.dropcars.test/api/wallet/balance"


def test_settings_require_base_url():
    with pytest.raises(ValueError):
        ClientSettings(base_url="").validate()
