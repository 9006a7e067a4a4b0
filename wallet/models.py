"""
Purpose: Domain model for wallet transactions.
What it does:
- WalletTransaction is immutable once written.
- Balance is the running sum over all completed transactions.

Rule: No HTTP calls here. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from dispatch.models import parse_datetime
from orders.pricing import to_decimal


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


@dataclass(frozen=True)
class WalletTransaction:
    id: str
    type: TransactionType
    amount: Decimal
    description: str = ""
    status: TransactionStatus = TransactionStatus.COMPLETED
    created_at: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type == TransactionType.CREDIT else -self.amount

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> WalletTransaction:
        amount = to_decimal(payload.get("amount"))
        if amount is None:
            raise ValueError(f"Transaction {payload.get('id')!r} has no amount")
        raw_type = payload.get("type") or payload.get("transaction_type")
        return cls(
            id=str(payload.get("transaction_id") or payload["id"]),
            type=TransactionType(str(raw_type).lower()),
            amount=amount,
            description=payload.get("description") or "",
            status=TransactionStatus(str(payload.get("status") or "completed").lower()),
            created_at=parse_datetime(payload.get("created_at") or payload.get("createdAt")),
            metadata=dict(payload.get("metadata") or {}),
        )


def compute_balance(transactions: Iterable[WalletTransaction]) -> Decimal:
    """Running sum over completed transactions only."""
    return sum(
        (t.signed_amount for t in transactions if t.status == TransactionStatus.COMPLETED),
        Decimal(0),
    )
