"""
Purpose: REST calls behind the assignment lifecycle.
What it does:
Maps each lifecycle action onto its backend endpoint, using the owner's
client for owner actions and the driver's client for trip actions.

    accept          POST  /api/assignments/acceptorder
    bind            PATCH /api/assignments/{order_id}/assign-car-driver
    cancel          PUT   /api/assignments/{id}/status
    start trip      POST  /api/assignments/driver/start-trip/{order_id}   (multipart)
    end trip        POST  /api/assignments/driver/end-trip/{order_id}     (multipart)
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from api.errors import BusinessRuleError

logger = logging.getLogger(__name__)


def _order_ref(order_id: str) -> Union[int, str]:
    # The backend keys orders by integer id.
    return int(order_id) if str(order_id).isdigit() else order_id


class AssignmentApi:
    def __init__(self, owner_client=None, driver_client=None):
        self.owner_client = owner_client
        self.driver_client = driver_client

    def _owner(self):
        if self.owner_client is None:
            raise RuntimeError("This action needs a vehicle owner client")
        return self.owner_client

    def _driver(self):
        if self.driver_client is None:
            raise RuntimeError("This action needs a driver client")
        return self.driver_client

    # --- Owner actions ---

    def accept_order(self, order_id: str) -> Dict[str, Any]:
        return self._owner().post("/api/assignments/acceptorder", json={"order_id": _order_ref(order_id)}) or {}

    def order_assignments(self, order_id: str) -> List[Dict[str, Any]]:
        payload = self._owner().get(f"/api/assignments/order/{order_id}")
        return payload if isinstance(payload, list) else []

    def assign_car_driver(self, order_id: str, driver_id: str, car_id: str) -> Dict[str, Any]:
        return self._owner().patch(
            f"/api/assignments/{order_id}/assign-car-driver",
            json={"driver_id": driver_id, "car_id": car_id},
        ) or {}

    def cancel(self, assignment_id: str, reason: str) -> Dict[str, Any]:
        return self._owner().put(
            f"/api/assignments/{assignment_id}/status",
            json={"status": "CANCELLED", "reason": reason},
        ) or {}

    # --- Driver actions ---

    def driver_assigned_orders(self) -> List[Dict[str, Any]]:
        try:
            payload = self._driver().get("/api/assignments/driver/assigned-orders")
        except BusinessRuleError as exc:
            if exc.status_code == 404:
                logger.info("No assigned orders")
                return []
            raise
        return payload if isinstance(payload, list) else []

    def start_trip(self, order_id: str, start_km: int, evidence: str) -> Dict[str, Any]:
        with open(evidence, "rb") as image:
            return self._driver().post(
                f"/api/assignments/driver/start-trip/{order_id}",
                data={"start_km": str(start_km)},
                files={"speedometer_img": ("speedometer.jpg", image, "image/jpeg")},
            ) or {}

    def end_trip(
        self,
        order_id: str,
        end_km: int,
        evidence: str,
        updated_toll_charges: Optional[Decimal] = None,
    ) -> Dict[str, Any]:
        data = {"end_km": str(end_km)}
        if updated_toll_charges is not None:
            data["toll_charge_update"] = "true"
            data["updated_toll_charges"] = str(updated_toll_charges)
        else:
            data["toll_charge_update"] = "false"

        with open(evidence, "rb") as image:
            return self._driver().post(
                f"/api/assignments/driver/end-trip/{order_id}",
                data=data,
                files={"close_speedometer_img": ("close_speedometer.jpg", image, "image/jpeg")},
            ) or {}
