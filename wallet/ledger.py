"""
Purpose: Wallet Ledger.
What it does:
- Holds the owner's balance and transaction log as last synced.
- Applies credits and debits optimistically, then confirms with the backend.
  A failed call rolls the delta back and the error propagates.
- sync() overwrites local state with the backend's view (reconcile, not merge).

Rule: The backend balance is the source of truth; local deltas only live
until the next successful sync.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from api.errors import DropCarsError, ValidationError
from dispatch.policy import DispatchPolicy, default_dispatch_policy
from orders.pricing import to_decimal
from .models import TransactionStatus, TransactionType, WalletTransaction

logger = logging.getLogger(__name__)


class InsufficientBalanceError(DropCarsError):
    """Debit rejected because it exceeds the balance (overdraft prevention on)."""
    pass


class WalletLedger:
    def __init__(self, api, policy: Optional[DispatchPolicy] = None):
        self.api = api
        self.policy = policy or default_dispatch_policy()
        self._synced_balance = Decimal(0)
        self._synced: List[WalletTransaction] = []
        self._local: List[WalletTransaction] = []  # posted since the last sync, newest last

    @property
    def balance(self) -> Decimal:
        return self._synced_balance + sum((t.signed_amount for t in self._local), Decimal(0))

    @property
    def transactions(self) -> List[WalletTransaction]:
        """Newest first."""
        return list(reversed(self._local)) + list(self._synced)

    def sync(self) -> Decimal:
        balance = self.api.balance()
        rows = self.api.transactions()

        transactions = []
        for row in rows:
            try:
                transactions.append(WalletTransaction.from_payload(row))
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping unreadable wallet transaction: %s", exc)

        self._synced_balance = balance
        self._synced = transactions
        self._local = []
        logger.info("Wallet synced: balance %s, %d transactions", balance, len(transactions))
        return balance

    def credit(self, amount: Any, description: str, metadata: Optional[Dict[str, Any]] = None) -> Decimal:
        return self._post(TransactionType.CREDIT, amount, description, metadata)

    def debit(self, amount: Any, description: str, metadata: Optional[Dict[str, Any]] = None) -> Decimal:
        return self._post(TransactionType.DEBIT, amount, description, metadata)

    def can_accept_booking(self) -> bool:
        return self.balance >= self.policy.min_wallet_balance

    # ----------------
    # Internal helpers
    # ----------------
    def _post(self, kind: TransactionType, amount: Any, description: str, metadata: Optional[Dict[str, Any]]) -> Decimal:
        value = to_decimal(amount)
        if value is None or value <= 0:
            raise ValidationError("amount", "Amount must be greater than zero")

        if kind == TransactionType.DEBIT and self.policy.overdraft_prevention and value > self.balance:
            raise InsufficientBalanceError(f"Cannot debit {value}: balance is {self.balance}")

        pending = WalletTransaction(
            id=f"local-{uuid.uuid4().hex}",
            type=kind,
            amount=value,
            description=description,
            status=TransactionStatus.COMPLETED,
            created_at=datetime.now(timezone.utc),
            metadata=dict(metadata or {}),
        )
        self._local.append(pending)

        call = self.api.deduct if kind == TransactionType.DEBIT else self.api.add
        try:
            response = call(value, description, pending.metadata)
        except DropCarsError:
            self._local.remove(pending)
            logger.warning("Wallet %s of %s failed; rolled back", kind.value, value)
            raise

        confirmed_id = response.get("transaction_id") or response.get("id")
        if confirmed_id:
            index = self._local.index(pending)
            self._local[index] = replace(pending, id=str(confirmed_id))

        balance = self.balance
        logger.info("Wallet %s of %s posted: balance %s", kind.value, value, balance)
        if balance < self.policy.min_wallet_balance:
            logger.warning(
                "Wallet balance %s is below the minimum %s; add funds to accept bookings",
                balance, self.policy.min_wallet_balance,
            )
        return balance
