# sales/services/exceptions.py

"""
CHECKOUT ERRORS

Local validation (raised before any store call, nothing happened):
- EmptyCart, MissingCustomer, InsufficientPayment

Write path:
- PersistenceError: the transaction insert failed; nothing was committed
- PartialCommit: the transaction row exists but its items do not;
  carries transaction_id for reconciliation

Non-fatal:
- StockUpdateWarning: one product's stock decrement failed after the sale
  was committed (returned, never raised)
"""

from __future__ import annotations

from dataclasses import dataclass


class CheckoutError(Exception):
    """Base checkout exception"""


class EmptyCart(CheckoutError):
    pass


class MissingCustomer(CheckoutError):
    pass


class InsufficientPayment(CheckoutError):
    def __init__(self, *, tendered: int, total: int):
        self.tendered = tendered
        self.total = total
        super().__init__(f"Cash tendered ({tendered}) is less than the total ({total})")


class PersistenceError(CheckoutError):
    pass


class PartialCommit(CheckoutError):
    def __init__(self, message: str, *, transaction_id, journal_id=None):
        self.transaction_id = transaction_id
        self.journal_id = journal_id
        super().__init__(message)


@dataclass(frozen=True)
class StockUpdateWarning:
    product_id: int
    product_name: str
    quantity: int
    reason: str

    def as_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "reason": self.reason,
        }
