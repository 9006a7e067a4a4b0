"""
Purpose: Order Discovery Service.
What it does:
Lists the orders an owner may accept: GET /api/orders/vehicle_owner/pending
with the owner's credential, parsed into Order models and restricted to
PENDING ones. Errors propagate to the caller.
"""

from __future__ import annotations

import logging
from typing import List

from .models import Order, TripStatus

logger = logging.getLogger(__name__)


class OrderDiscoveryService:
    PENDING_PATH = "/api/orders/vehicle_owner/pending"

    def __init__(self, owner_client):
        self.client = owner_client

    def list_pending(self, limit: int = 20, page: int = 1) -> List[Order]:
        payload = self.client.get(self.PENDING_PATH, params={"limit": limit, "page": page})
        rows = payload if isinstance(payload, list) else []

        orders: List[Order] = []
        for row in rows:
            try:
                order = Order.from_payload(row)
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping unreadable order row %r: %s", row.get("order_id", row.get("id")), exc)
                continue
            if order.trip_status != TripStatus.PENDING:
                continue
            orders.append(order)

        logger.info("Fetched %d pending orders (page %d)", len(orders), page)
        return orders
