# pos/services/cart.py

"""
CART AGGREGATOR (IN-MEMORY)

Purpose:
- Hold the selected line items of ONE counter session.
- Enforce stock / quantity rules against the snapshot taken at add-time.
- Produce an immutable OrderDraft for the checkout orchestrator.

Rules:
- Lines are never persisted; the cart lives only for one checkout session.
- A line's quantity is always >= 1.
- A stock-limited line never exceeds its stock ceiling (stock at add-time).
- Unlimited products (stock == -1) have no ceiling.
- total() is always recomputed from the lines (no cached running total).

Sessions:
- One CartSession per terminal, handed out by CartRegistry.
- Single writer per session; the registry itself is thread-safe.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass, field

from django.db import models

from datastore.base import UNLIMITED_STOCK


class OrderType(models.TextChoices):
    DINE_IN = "Dine In", "Dine In"
    TAKE_AWAY = "Take Away", "Take Away"


class PaymentMethod(models.TextChoices):
    CASH = "Cash", "Cash"
    QRIS = "QRIS", "QRIS"
    TRANSFER = "Transfer", "Bank transfer"
    SHOPEE_PAY = "Shopee Pay", "Shopee Pay"
    DANA = "Dana", "Dana"
    OTHER = "Lainnya", "Other"


class OutOfStock(Exception):
    def __init__(self, *, product_id, product_name: str = "", requested: int = 1, available: int = 0):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        label = product_name or f"Product {product_id}"
        super().__init__(
            f"{label} is out of stock (requested {requested}, available {max(available, 0)})"
        )


def _product_value(product, key: str, default=None):
    if isinstance(product, dict):
        return product.get(key, default)
    return getattr(product, key, default)


# =====================================================
# VALUE OBJECTS
# =====================================================

@dataclass(frozen=True)
class CartLine:
    product_id: int
    name: str
    price: int
    stock_ceiling: int
    quantity: int = 1

    @property
    def is_unlimited(self) -> bool:
        return self.stock_ceiling == UNLIMITED_STOCK

    @property
    def line_total(self) -> int:
        return self.price * self.quantity

    def with_quantity(self, quantity: int) -> "CartLine":
        return CartLine(
            product_id=self.product_id,
            name=self.name,
            price=self.price,
            stock_ceiling=self.stock_ceiling,
            quantity=quantity,
        )


@dataclass(frozen=True)
class OrderDraft:
    """
    Read-only view of a cart at checkout time.

    amount_tendered=None means "paid exactly": tendered defaults to the subtotal.
    """

    lines: tuple[CartLine, ...]
    customer_name: str
    order_type: str
    payment_method: str
    amount_tendered: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "lines", tuple(self.lines))
        if self.amount_tendered is None:
            object.__setattr__(self, "amount_tendered", self.subtotal)

    @property
    def subtotal(self) -> int:
        return sum(line.line_total for line in self.lines)

    @property
    def change(self) -> int:
        return max(0, self.amount_tendered - self.subtotal)

    @property
    def is_empty(self) -> bool:
        return not self.lines


# =====================================================
# CART SESSION
# =====================================================

class CartSession:
    def __init__(self, handle: str = "default"):
        self.handle = handle
        self._lines: "OrderedDict[int, CartLine]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._lines)

    def __repr__(self) -> str:
        return f"<CartSession {self.handle!r} lines={len(self._lines)} total={self.total()}>"

    # -----------------------------
    # MUTATIONS
    # -----------------------------
    def add(self, product) -> CartLine:
        """
        Existing line -> +1 (capped at the ceiling).
        New line -> quantity 1 with a frozen price / stock snapshot.
        """
        product_id = int(_product_value(product, "id"))
        stock = int(_product_value(product, "stock", UNLIMITED_STOCK))

        if stock != UNLIMITED_STOCK and stock <= 0:
            raise OutOfStock(
                product_id=product_id,
                product_name=_product_value(product, "name", "") or "",
                requested=1,
                available=stock,
            )

        existing = self._lines.get(product_id)
        if existing is not None:
            if existing.is_unlimited or existing.quantity < existing.stock_ceiling:
                existing = existing.with_quantity(existing.quantity + 1)
                self._lines[product_id] = existing
            return existing

        line = CartLine(
            product_id=product_id,
            name=str(_product_value(product, "name", "") or ""),
            price=int(_product_value(product, "price", 0) or 0),
            stock_ceiling=stock,
            quantity=1,
        )
        self._lines[product_id] = line
        return line

    def set_quantity(self, product_id: int, delta: int) -> CartLine | None:
        line = self._lines.get(int(product_id))
        if line is None:
            return None

        new_quantity = max(1, line.quantity + int(delta))
        if delta > 0 and not line.is_unlimited and new_quantity > line.stock_ceiling:
            return line

        if new_quantity != line.quantity:
            line = line.with_quantity(new_quantity)
            self._lines[line.product_id] = line
        return line

    def remove(self, product_id: int) -> None:
        self._lines.pop(int(product_id), None)

    def clear(self) -> None:
        self._lines.clear()

    # -----------------------------
    # READS
    # -----------------------------
    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def quantity_of(self, product_id: int) -> int:
        line = self._lines.get(int(product_id))
        return line.quantity if line else 0

    def total(self) -> int:
        return sum(line.line_total for line in self._lines.values())

    def draft(
        self,
        *,
        customer_name: str,
        order_type: str,
        payment_method: str,
        amount_tendered: int | None = None,
    ) -> OrderDraft:
        return OrderDraft(
            lines=self.lines,
            customer_name=customer_name,
            order_type=order_type,
            payment_method=payment_method,
            amount_tendered=amount_tendered,
        )


def fill_cart(cart: CartSession, *, products: dict, quantities: dict) -> CartSession:
    """
    Replay "tap product, then +/-" for a server-side checkout request.

    products: {product_id: product row}
    quantities: {product_id: requested quantity} (insertion order = line order)

    Raises OutOfStock when the ceiling stops a line short of the requested
    quantity; the cart is left as built so far.
    """
    for product_id, requested in quantities.items():
        product = products[product_id]
        cart.add(product)
        if requested > 1:
            cart.set_quantity(product_id, requested - 1)

        got = cart.quantity_of(product_id)
        if got < requested:
            raise OutOfStock(
                product_id=product_id,
                product_name=_product_value(product, "name", "") or "",
                requested=requested,
                available=int(_product_value(product, "stock", 0)),
            )
    return cart


# =====================================================
# SESSION REGISTRY
# =====================================================

@dataclass
class CartRegistry:
    """Explicit per-terminal carts, keyed by a handle (terminal id, tab id)."""

    _sessions: dict = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def get(self, handle: str) -> CartSession:
        with self._lock:
            session = self._sessions.get(handle)
            if session is None:
                session = CartSession(handle)
                self._sessions[handle] = session
            return session

    def discard(self, handle: str) -> None:
        with self._lock:
            self._sessions.pop(handle, None)

    def handles(self) -> list[str]:
        with self._lock:
            return list(self._sessions)


# Process-wide registry behind the /api/pos/carts/<handle>/ endpoints.
cart_registry = CartRegistry()
