"""
Wallet domain package.

Public API:
- Models: WalletTransaction, TransactionType, TransactionStatus, compute_balance
- Gateway: WalletApi
- Ledger: WalletLedger, InsufficientBalanceError
"""
from .models import TransactionStatus, TransactionType, WalletTransaction, compute_balance
from .gateway import WalletApi
from .ledger import InsufficientBalanceError, WalletLedger

__all__ = [
    "WalletTransaction",
    "TransactionType",
    "TransactionStatus",
    "compute_balance",
    "WalletApi",
    "WalletLedger",
    "InsufficientBalanceError",
]
