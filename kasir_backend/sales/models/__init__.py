# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .checkout_journal import CheckoutJournal
from .transaction import Transaction
from .transaction_item import TransactionItem

__all__ = [
    "Transaction",
    "TransactionItem",
    "CheckoutJournal",
]
