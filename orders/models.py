"""
Purpose: Domain models for the Orders capability.
What it does:
- Defines the Order as the vendor published it (route, customer, tariff,
  quoted prices) and its trip status.
- Derives what the owner is shown: total amount and per-km price.

Rule: No HTTP calls here. Models only.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .pricing import round_half_up, to_decimal


class TripStatus(Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


def parse_route(raw: Any) -> List[str]:
    """
    The ordered city list. The backend sends either a list, an index-keyed
    mapping ({"0": "Chennai", "1": "Bangalore"}) or a JSON string of those.
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return [raw]
    if isinstance(raw, dict):
        def position(key: str) -> Any:
            return (0, int(key)) if str(key).isdigit() else (1, str(key))
        return [str(raw[key]) for key in sorted(raw, key=position)]
    if isinstance(raw, list):
        return [str(city) for city in raw]
    return [str(raw)]


@dataclass
class Order:
    """
    A dispatch request observed read-only until an owner accepts it.
    """

    id: str
    trip_status: TripStatus = TripStatus.PENDING
    owner_id: Optional[str] = None
    trip_type: str = ""
    car_type: str = ""

    pickup_drop: List[str] = field(default_factory=list)
    customer_name: str = ""
    customer_number: str = ""

    #Tariff
    cost_per_km: Decimal = Decimal(0)
    extra_cost_per_km: Decimal = Decimal(0)
    driver_allowance: Decimal = Decimal(0)
    permit_charges: Decimal = Decimal(0)
    hill_charges: Decimal = Decimal(0)
    toll_charges: Decimal = Decimal(0)

    trip_distance_km: Decimal = Decimal(0)
    trip_time: str = ""

    estimated_price: Optional[Decimal] = None
    vendor_price: Optional[Decimal] = None  # overrides the estimate when present

    @property
    def pickup_city(self) -> str:
        return self.pickup_drop[0] if self.pickup_drop else ""

    @property
    def drop_city(self) -> str:
        return self.pickup_drop[-1] if len(self.pickup_drop) > 1 else ""

    @property
    def total_amount(self) -> Optional[Decimal]:
        return self.vendor_price if self.vendor_price is not None else self.estimated_price

    @property
    def per_km_price(self) -> Optional[Decimal]:
        total = self.total_amount
        if total is not None and self.trip_distance_km > 0:
            price = round_half_up(total / self.trip_distance_km, 2)
        else:
            price = self.cost_per_km
        # A zero price means "unknown" to the owner screens.
        return price if price else None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Order:
        def money(*keys: str) -> Decimal:
            for key in keys:
                value = to_decimal(payload.get(key))
                if value is not None:
                    return value
            return Decimal(0)

        raw_status = str(payload.get("trip_status") or payload.get("status") or "PENDING").upper()
        owner = payload.get("vehicle_owner_id") or payload.get("owner_id")

        return cls(
            id=str(payload.get("order_id") or payload["id"]),
            # Unknown statuses raise ValueError; discovery skips such rows.
            trip_status=TripStatus(raw_status),
            owner_id=str(owner) if owner else None,
            trip_type=payload.get("trip_type") or "",
            car_type=payload.get("car_type") or "",
            pickup_drop=parse_route(payload.get("pickup_drop_location")),
            customer_name=payload.get("customer_name") or "",
            customer_number=payload.get("customer_number") or payload.get("customer_mobile") or "",
            cost_per_km=money("cost_per_km"),
            extra_cost_per_km=money("extra_cost_per_km"),
            driver_allowance=money("driver_allowance"),
            permit_charges=money("permit_charges"),
            hill_charges=money("hill_charges"),
            toll_charges=money("toll_charges"),
            trip_distance_km=money("trip_distance", "distance"),
            trip_time=str(payload.get("trip_time") or ""),
            estimated_price=to_decimal(payload.get("estimated_price")),
            vendor_price=to_decimal(payload.get("vendor_price")),
        )
