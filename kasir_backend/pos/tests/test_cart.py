# pos/tests/test_cart.py

import random

from django.test import SimpleTestCase

from pos.services.cart import (
    CartRegistry,
    CartSession,
    OrderDraft,
    OrderType,
    OutOfStock,
    PaymentMethod,
    fill_cart,
)


def product(pid, *, price=1000, stock=-1, name=None):
    return {"id": pid, "name": name or f"Item {pid}", "price": price, "stock": stock}


class CartSessionTests(SimpleTestCase):
    """
    Cart aggregator tests.

    GUARANTEES:
    - total() always equals sum(price * quantity)
    - Out-of-stock products never enter the cart
    - Quantities stay within [1, stock ceiling]
    """

    def setUp(self):
        self.cart = CartSession("terminal-1")

    def test_add_new_line_snapshots_product(self):
        p = product(1, price=15000, stock=4, name="Seblak")
        line = self.cart.add(p)

        p["price"] = 99999
        p["stock"] = 0

        self.assertEqual(line.quantity, 1)
        self.assertEqual(self.cart.lines[0].price, 15000)
        self.assertEqual(self.cart.lines[0].stock_ceiling, 4)

    def test_add_existing_line_increments(self):
        p = product(1, stock=-1)
        self.cart.add(p)
        self.cart.add(p)
        self.assertEqual(self.cart.quantity_of(1), 2)
        self.assertEqual(len(self.cart), 1)

    def test_add_existing_line_is_capped_at_ceiling(self):
        p = product(1, stock=2)
        for _ in range(5):
            self.cart.add(p)
        self.assertEqual(self.cart.quantity_of(1), 2)

    def test_add_out_of_stock_never_mutates(self):
        self.cart.add(product(1, stock=3))
        before = self.cart.lines

        with self.assertRaises(OutOfStock):
            self.cart.add(product(2, stock=0))

        self.assertEqual(self.cart.lines, before)

    def test_negative_stock_counts_as_out_of_stock(self):
        with self.assertRaises(OutOfStock):
            self.cart.add(product(1, stock=-3))
        self.assertTrue(self.cart.is_empty)

    def test_unlimited_product_is_always_addable(self):
        for _ in range(50):
            self.cart.add(product(9, stock=-1))
        self.assertEqual(self.cart.quantity_of(9), 50)

    def test_set_quantity_never_below_one(self):
        self.cart.add(product(1, stock=5))
        self.cart.set_quantity(1, -10)
        self.assertEqual(self.cart.quantity_of(1), 1)

    def test_set_quantity_rejects_increase_past_ceiling(self):
        self.cart.add(product(1, stock=3))
        self.cart.set_quantity(1, +1)
        self.cart.set_quantity(1, +5)
        self.assertEqual(self.cart.quantity_of(1), 2)

        self.cart.set_quantity(1, +1)
        self.assertEqual(self.cart.quantity_of(1), 3)

    def test_set_quantity_on_absent_line_is_noop(self):
        self.assertIsNone(self.cart.set_quantity(42, +1))
        self.assertTrue(self.cart.is_empty)

    def test_remove_and_clear(self):
        self.cart.add(product(1))
        self.cart.add(product(2))
        self.cart.remove(1)
        self.cart.remove(1)
        self.assertEqual([line.product_id for line in self.cart.lines], [2])

        self.cart.clear()
        self.assertTrue(self.cart.is_empty)
        self.assertEqual(self.cart.total(), 0)

    def test_total_never_drifts(self):
        rng = random.Random(7)
        catalog = [
            product(1, price=15000, stock=-1),
            product(2, price=2000, stock=5),
            product(3, price=3000, stock=1),
            product(4, price=5000, stock=10),
        ]

        for _ in range(500):
            p = rng.choice(catalog)
            op = rng.choice(("add", "remove", "set"))
            if op == "add":
                self.cart.add(p)
            elif op == "remove":
                self.cart.remove(p["id"])
            else:
                self.cart.set_quantity(p["id"], rng.randint(-3, 3))

            expected = sum(line.price * line.quantity for line in self.cart.lines)
            self.assertEqual(self.cart.total(), expected)
            for line in self.cart.lines:
                self.assertGreaterEqual(line.quantity, 1)
                if not line.is_unlimited:
                    self.assertLessEqual(line.quantity, line.stock_ceiling)

    def test_item_count(self):
        self.cart.add(product(1))
        self.cart.add(product(1))
        self.cart.add(product(2))
        self.assertEqual(self.cart.item_count, 3)


class OrderDraftTests(SimpleTestCase):
    def _cart(self):
        cart = CartSession()
        cart.add(product(1, price=10000))
        cart.set_quantity(1, +1)
        cart.add(product(2, price=5000))
        return cart

    def test_subtotal_and_change(self):
        draft = self._cart().draft(
            customer_name="Budi",
            order_type=OrderType.DINE_IN,
            payment_method=PaymentMethod.CASH,
            amount_tendered=30000,
        )
        self.assertEqual(draft.subtotal, 25000)
        self.assertEqual(draft.change, 5000)

    def test_tendered_defaults_to_subtotal(self):
        draft = self._cart().draft(
            customer_name="Budi",
            order_type=OrderType.TAKE_AWAY,
            payment_method=PaymentMethod.QRIS,
        )
        self.assertEqual(draft.amount_tendered, 25000)
        self.assertEqual(draft.change, 0)

    def test_change_is_never_negative(self):
        draft = OrderDraft(
            lines=self._cart().lines,
            customer_name="Budi",
            order_type=OrderType.DINE_IN,
            payment_method=PaymentMethod.TRANSFER,
            amount_tendered=1000,
        )
        self.assertEqual(draft.change, 0)

    def test_draft_is_detached_from_cart(self):
        cart = self._cart()
        draft = cart.draft(
            customer_name="Budi",
            order_type=OrderType.DINE_IN,
            payment_method=PaymentMethod.CASH,
        )
        cart.clear()
        self.assertEqual(len(draft.lines), 2)


class FillCartTests(SimpleTestCase):
    def test_fills_requested_quantities(self):
        products = {1: product(1, stock=5), 2: product(2, stock=-1)}
        cart = fill_cart(CartSession(), products=products, quantities={1: 3, 2: 7})

        self.assertEqual(cart.quantity_of(1), 3)
        self.assertEqual(cart.quantity_of(2), 7)

    def test_quantity_above_stock_is_out_of_stock(self):
        products = {1: product(1, stock=2, name="Kerupuk")}

        with self.assertRaises(OutOfStock) as ctx:
            fill_cart(CartSession(), products=products, quantities={1: 3})

        self.assertEqual(ctx.exception.product_id, 1)
        self.assertEqual(ctx.exception.requested, 3)
        self.assertEqual(ctx.exception.available, 2)


class CartRegistryTests(SimpleTestCase):
    def test_sessions_are_independent_per_handle(self):
        registry = CartRegistry()
        registry.get("a").add(product(1))

        self.assertIs(registry.get("a"), registry.get("a"))
        self.assertTrue(registry.get("b").is_empty)
        self.assertEqual(sorted(registry.handles()), ["a", "b"])

    def test_discard(self):
        registry = CartRegistry()
        registry.get("a").add(product(1))
        registry.discard("a")

        self.assertTrue(registry.get("a").is_empty)
