"""
Purpose: REST calls behind the Wallet Ledger (owner credential).

    balance         GET  /api/wallet/balance
    transactions    GET  /api/wallet/transactions
    debit           POST /api/wallet/deduct
    credit          POST /api/wallet/add
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from orders.pricing import to_decimal


class WalletApi:
    def __init__(self, owner_client):
        self.client = owner_client

    def balance(self) -> Decimal:
        payload = self.client.get("/api/wallet/balance")
        if isinstance(payload, dict):
            payload = payload.get("balance")
        balance = to_decimal(payload)
        return balance if balance is not None else Decimal(0)

    def transactions(self) -> List[Dict[str, Any]]:
        payload = self.client.get("/api/wallet/transactions")
        if isinstance(payload, dict):
            payload = payload.get("transactions")
        return payload if isinstance(payload, list) else []

    def deduct(self, amount: Decimal, description: str, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._post("/api/wallet/deduct", amount, description, metadata)

    def add(self, amount: Decimal, description: str, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._post("/api/wallet/add", amount, description, metadata)

    def _post(self, path: str, amount: Decimal, description: str, metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        body = {"amount": str(amount), "description": description, "metadata": metadata or {}}
        return self.client.post(path, json=body) or {}
