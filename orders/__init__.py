"""
Orders domain package.

Public API:
- Domain models: Order, TripStatus
- Pricing helpers: round_half_up, to_decimal
- Discovery: OrderDiscoveryService
"""
from .models import Order, TripStatus, parse_route
from .pricing import round_half_up, to_decimal
from .discovery import OrderDiscoveryService

__all__ = ["Order",
           "TripStatus",
             "parse_route",
               "round_half_up",
               "to_decimal",
               "OrderDiscoveryService",
               ]
