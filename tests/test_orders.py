from decimal import Decimal

import pytest

from conftest import FakeClient
from orders.discovery import OrderDiscoveryService
from orders.models import Order, TripStatus, parse_route
from orders.pricing import round_half_up, to_decimal

PENDING = ("GET", "/api/orders/vehicle_owner/pending")


@pytest.mark.parametrize("raw,expected", [
    (["Chennai", "Vellore", "Bangalore"], ["Chennai", "Vellore", "Bangalore"]),
    ({"1": "Bangalore", "0": "Chennai"}, ["Chennai", "Bangalore"]),
    ('{"0": "Madurai", "1": "Trichy"}', ["Madurai", "Trichy"]),
    (None, []),
])
def test_parse_route(raw, expected):
    assert parse_route(raw) == expected


@pytest.mark.parametrize("raw", ["NaN", "Infinity", "-Infinity", "sNaN", Decimal("NaN"), float("inf")])
def test_non_finite_numbers_are_not_amounts(raw):
    assert to_decimal(raw) is None


def test_non_finite_tariff_reads_as_zero():
    assert Order.from_payload({"id": 1, "cost_per_km": "NaN"}).cost_per_km == Decimal(0)


def test_pricing_helpers():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("abc") is None
    assert round_half_up(Decimal("2.5")) == Decimal("3")
    assert round_half_up(Decimal("12.345"), 2) == Decimal("12.35")


def test_vendor_price_overrides_estimate():
    order = Order.from_payload({
        "order_id": 42,
        "pickup_drop_location": {"0": "Chennai", "1": "Bangalore"},
        "estimated_price": 3500,
        "vendor_price": 3000,
        "trip_distance": 350,
        "cost_per_km": 12,
    })

    assert order.id == "42"
    assert (order.pickup_city, order.drop_city) == ("Chennai", "Bangalore")
    assert order.total_amount == Decimal("3000")
    assert order.per_km_price == Decimal("8.57")


def test_per_km_price_falls_back_to_tariff_and_hides_zero():
    assert Order.from_payload({"id": 1, "cost_per_km": 11}).per_km_price == Decimal("11")
    assert Order.from_payload({"id": 2}).per_km_price is None


def test_unknown_trip_status_is_rejected():
    with pytest.raises(ValueError):
        Order.from_payload({"id": 1, "trip_status": "LOST"})


def test_discovery_keeps_pending_orders_only():
    client = FakeClient({PENDING: [
        {"order_id": 1, "trip_status": "PENDING", "cost_per_km": 10},
        {"order_id": 2, "trip_status": "ASSIGNED"},
        {"order_id": 3, "trip_status": "SOMETHING_NEW"},
        {"trip_status": "PENDING"},
        {"order_id": 4},
    ]})

    orders = OrderDiscoveryService(client).list_pending(limit=5, page=2)

    assert [o.id for o in orders] == ["1", "4"]
    assert client.calls[0][2]["params"] == {"limit": 5, "page": 2}
