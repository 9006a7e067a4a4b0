"""
Purpose: Central configuration for assignment, trip settlement and wallet rules.
What it does:

Stores the tunable business knobs:

PLATFORM_COMMISSION = 50          (debited once per completed trip)
OVERDRAFT_PREVENTION = off        (debits may take the balance negative)
MIN_WALLET_BALANCE = 0            (below it the owner should not accept bookings)

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class DispatchPolicy:
    """
    Central configuration for the assignment lifecycle and wallet settlement.
    """

    # --- Settlement ---
    # Fixed platform fee debited from the owner's wallet when a trip ends.
    platform_commission: Decimal = Decimal("50")
    commission_description: str = "Trip commission"

    # --- Acceptance expiry ---
    # Only used when the backend omits `expires_at` on a new assignment.
    # None means such assignments never expire locally.
    acceptance_window_seconds: Optional[int] = None

    # --- Wallet ---
    # Reject (never clamp) debits larger than the balance. Off in production today.
    overdraft_prevention: bool = False
    min_wallet_balance: Decimal = Decimal("0")

    # --- Session ---
    # A transport error on an authenticated call also ends that role's session.
    expire_session_on_transport_error: bool = True

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.platform_commission < 0:
            raise ValueError("platform_commission must be >= 0")

        if self.acceptance_window_seconds is not None and self.acceptance_window_seconds <= 0:
            raise ValueError("acceptance_window_seconds must be > 0 when set")

        if self.min_wallet_balance < 0:
            raise ValueError("min_wallet_balance must be >= 0")


def default_dispatch_policy() -> DispatchPolicy:
    """
    Convenience factory for the default policy.
    """
    p = DispatchPolicy()
    p.validate()
    return p
