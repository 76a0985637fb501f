# Overview: Pytest coverage for cart composition and totals.

"""
Cart and totals tests.

The cart is plain in-process state, so these tests need no app or database.
"""

import random
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from billcraft.services.cart_service import Cart, CartLine, compute_totals, get_cart
from billcraft.validation import NotFoundError, ValidationError


def _product(pid: int, price: str, name: str | None = None) -> dict:
    return {
        "id": pid,
        "name": name or f"Product {pid}",
        "sku": f"SKU-{pid}",
        "price": Decimal(price),
        "stock": 10,
    }


class TestTotals:
    def test_single_line_at_18_percent(self):
        cart = Cart()
        cart.add_product(_product(1, "100.00", "Widget"), 2)

        totals = cart.totals(18)

        assert totals.subtotal == Decimal("200.00")
        assert totals.tax_amount == Decimal("36.00")
        assert totals.total == Decimal("236.00")

    def test_mixed_lines_at_18_percent(self):
        cart = Cart()
        cart.add_product(_product(1, "50.00"), 1)
        cart.add_product(_product(2, "25.50"), 3)

        totals = cart.totals(Decimal("18"))

        assert totals.subtotal == Decimal("126.50")
        assert totals.tax_amount == Decimal("22.77")
        assert totals.total == Decimal("149.27")

    def test_empty_cart_is_all_zero(self):
        totals = Cart().totals(18)
        assert totals.subtotal == 0
        assert totals.tax_amount == 0
        assert totals.total == 0

    def test_override_price_used_in_subtotal(self):
        cart = Cart()
        cart.add_product(_product(1, "100.00"), 2)
        cart.set_override_price(1, "80.00")

        assert cart.totals(0).subtotal == Decimal("160.00")

    def test_subtotal_matches_line_sum_for_random_carts(self):
        rng = random.Random(1234)
        for _ in range(200):
            cart = Cart()
            expected = Decimal("0")
            for pid in range(1, rng.randint(1, 8) + 1):
                price = Decimal(rng.randint(0, 99_999_999)) / 100
                qty = rng.randint(1, 50)
                cart.add_product(_product(pid, str(price)), qty)
                if rng.random() < 0.3:
                    override = Decimal(rng.randint(0, 99_999_999)) / 100
                    cart.set_override_price(pid, override)
                    price = override
                expected += price * qty

            assert cart.totals(18).subtotal == expected

    def test_total_is_subtotal_plus_rate_share(self):
        rng = random.Random(99)
        for _ in range(200):
            lines = [
                CartLine(product=_product(i, str(Decimal(rng.randint(0, 500_000)) / 100)), quantity=rng.randint(1, 9))
                for i in range(rng.randint(0, 5))
            ]
            rate = Decimal(rng.randint(0, 10_000)) / 100

            totals = compute_totals(lines, rate)

            assert totals.total == totals.subtotal + totals.subtotal * rate / 100

    @pytest.mark.parametrize("rate", [-1, "100.01", "abc", None, True])
    def test_rejects_bad_rate(self, rate):
        with pytest.raises(ValidationError):
            compute_totals([], rate)


class TestQuantity:
    def test_decrement_never_goes_below_one(self):
        cart = Cart()
        cart.add_product(_product(1, "10.00"))

        for _ in range(5):
            line = cart.decrement(1)

        assert line.quantity == 1

    def test_increment_is_unbounded(self):
        cart = Cart()
        cart.add_product(_product(1, "10.00"))

        for _ in range(1000):
            line = cart.increment(1)

        assert line.quantity == 1001

    def test_adding_product_twice_keeps_single_line(self):
        cart = Cart()
        cart.add_product(_product(1, "10.00"), 3)
        cart.add_product(_product(1, "10.00"), 1)

        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 3

    @pytest.mark.parametrize("quantity", [0, -2, 1.5, "2", True])
    def test_add_rejects_bad_quantity(self, quantity):
        with pytest.raises(ValidationError):
            Cart().add_product(_product(1, "10.00"), quantity)

    def test_unknown_line_raises(self):
        with pytest.raises(NotFoundError):
            Cart().increment(42)

    def test_remove_line(self):
        cart = Cart()
        cart.add_product(_product(1, "10.00"))
        assert cart.remove_line(1) is True
        assert cart.remove_line(1) is False
        assert cart.is_empty


class TestOverridePrice:
    @pytest.mark.parametrize("value", [-1, 1000000, "NaN", float("nan"), float("inf"), "Infinity", "", "ten", True])
    def test_rejected_values_keep_prior_price(self, value):
        cart = Cart()
        cart.add_product(_product(1, "10.00"))
        cart.set_override_price(1, "7.50")

        with pytest.raises(ValidationError):
            cart.set_override_price(1, value)

        assert cart.lines[0].override_price == Decimal("7.50")
        assert cart.lines[0].effective_price == Decimal("7.50")

    @pytest.mark.parametrize("value,expected", [
        (0, Decimal("0.00")),
        ("999999.99", Decimal("999999.99")),
        (12.5, Decimal("12.50")),
    ])
    def test_accepted_boundaries(self, value, expected):
        cart = Cart()
        cart.add_product(_product(1, "10.00"))

        line = cart.set_override_price(1, value)

        assert line.override_price == expected
        assert line.effective_price == expected

    def test_clear_override_restores_catalog_price(self):
        cart = Cart()
        cart.add_product(_product(1, "10.00"))
        cart.set_override_price(1, "5")
        cart.clear_override_price(1)

        assert cart.lines[0].effective_price == Decimal("10.00")


class TestCustomerDetails:
    def test_update_strips_and_rejects_unknown_fields(self):
        cart = Cart()
        cart.customer.update({"name": "  Asha  ", "email": "asha@example.com"})
        assert cart.customer.name == "Asha"

        with pytest.raises(ValidationError):
            cart.customer.update({"gst": "x"})

    def test_clear_resets_lines_and_customer(self):
        cart = Cart()
        cart.add_product(_product(1, "10.00"))
        cart.customer.update({"name": "Asha", "phone": "123"})

        cart.clear()

        assert cart.is_empty
        assert cart.customer.to_dict() == {"name": "", "email": "", "phone": "", "address": ""}


class TestCartRegistry:
    def test_one_cart_per_account(self, app, db_session):
        assert get_cart(1) is get_cart(1)
        assert get_cart(1) is not get_cart(2)

    def test_concurrent_first_use_shares_one_cart(self, app, db_session):
        def fetch(_):
            with app.app_context():
                return get_cart(42)

        with ThreadPoolExecutor(max_workers=8) as pool:
            carts = list(pool.map(fetch, range(32)))

        assert all(cart is carts[0] for cart in carts)
