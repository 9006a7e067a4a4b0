import logging
import os
import tempfile

from dispatch.gateway import AssignmentApi
from dispatch.orchestrator import AssignmentOrchestrator, ResourceNotAssignableError
from drivers.pool import ResourcePoolService
from orders.discovery import OrderDiscoveryService
from wallet.gateway import WalletApi
from wallet.ledger import WalletLedger


class MockBackend:
    """
    In-memory stand-in for the Drop Cars REST API, enough for one trip.
    Answers the same (method, path) calls DropCarsClient would send.
    """
    def __init__(self):
        self.balance = 500
        self.assignments = {}
        self.routes = {
            ("GET", "/api/orders/vehicle_owner/pending"): lambda **_: [
                {"order_id": 42, "trip_status": "PENDING", "pickup_drop_location": {"0": "Chennai", "1": "Bangalore"},
                 "cost_per_km": 10, "trip_distance": 350, "estimated_price": 3500},
            ],
            ("GET", "/api/users/available-drivers"): lambda **_: [
                {"id": "D1", "full_name": "Ravi", "driver_status": "ONLINE"},
                {"id": "D2", "full_name": "Kumar", "driver_status": "PROCESSING"},
            ],
            ("GET", "/api/users/available-cars"): lambda **_: [
                {"id": "C1", "car_number": "TN01AB1234", "car_type": "SEDAN", "is_available": True},
            ],
            ("POST", "/api/assignments/acceptorder"): self.accept,
            ("PATCH", "/api/assignments/42/assign-car-driver"): lambda **_: {"message": "assigned"},
            ("POST", "/api/assignments/driver/start-trip/42"): lambda **_: {"start_record_id": "S1"},
            ("POST", "/api/assignments/driver/end-trip/42"): lambda **_: {"end_record_id": "E1"},
            ("GET", "/api/wallet/balance"): lambda **_: {"balance": self.balance},
            ("GET", "/api/wallet/transactions"): lambda **_: [],
            ("POST", "/api/wallet/deduct"): self.deduct,
        }

    def accept(self, json=None, **_):
        order_id = json["order_id"]
        self.assignments[order_id] = {"assignment_id": f"A{order_id}", "order_id": order_id, "vehicle_owner_id": "O1"}
        return self.assignments[order_id]

    def deduct(self, json=None, **_):
        self.balance -= int(json["amount"])
        return {"transaction_id": "T1"}

    def request(self, method, path, **kwargs):
        print(f"  -> {method} {path}")
        return self.routes[(method, path)](**kwargs)

    def get(self, path, **kwargs):
        return self.request("GET", path, **kwargs)

    def post(self, path, **kwargs):
        return self.request("POST", path, **kwargs)

    def patch(self, path, **kwargs):
        return self.request("PATCH", path, **kwargs)

    def put(self, path, **kwargs):
        return self.request("PUT", path, **kwargs)


def run_simulation():
    backend = MockBackend()
    ledger = WalletLedger(WalletApi(backend))
    orchestrator = AssignmentOrchestrator(
        AssignmentApi(owner_client=backend, driver_client=backend),
        ResourcePoolService(backend),
        ledger,
        owner_id="O1",
    )

    print("=== ASSIGNMENT SIMULATION ===")
    print(f"Wallet balance: {ledger.sync()}")

    order = OrderDiscoveryService(backend).list_pending()[0]
    print(f"Order #{order.id}: {order.pickup_city} -> {order.drop_city}, Rs.{order.per_km_price}/km")

    assignment = orchestrator.accept(order)
    print(f"[{assignment.status.value}] assignment {assignment.id}")

    try:
        orchestrator.bind_resources(assignment.id, "D2", "C1")
    except ResourceNotAssignableError as exc:
        print(f"[REJECTED] {exc}")

    assignment = orchestrator.bind_resources(assignment.id, "D1", "C1")
    print(f"[{assignment.status.value}] driver {assignment.driver_id}, car {assignment.car_id}")

    with tempfile.TemporaryDirectory() as tmp:
        photo = os.path.join(tmp, "speedometer.jpg")
        with open(photo, "wb") as f:
            f.write(b"jpeg")

        assignment = orchestrator.start_trip(assignment.id, 10230, photo)
        print(f"[{assignment.status.value}] started at 10230 km")

        summary = orchestrator.end_trip(assignment.id, 10380, photo, customer_acknowledged=True)

    print(f"[{summary.assignment.status.value}] {summary.distance_km} km, fare Rs.{summary.fare}")
    print(f"Commission Rs.{summary.commission} debited, wallet balance: {summary.wallet_balance}")
    print("\n=== SIMULATION COMPLETE ===")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    run_simulation()
