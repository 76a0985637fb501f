# Overview: Invoice composition: cart lines, override prices and totals.

"""
Cart Service - transient invoice composition

A Cart is the "Composing" state of invoice creation: lines can be added,
removed, re-quantified and re-priced freely, all synchronously and without
touching storage. Nothing here is persisted; checkout (invoice_service)
turns a cart into a frozen invoice record.

TOTALS:
- subtotal = sum(effective_price * quantity) over lines
- tax_amount = subtotal * rate / 100
- total = subtotal + tax_amount
All arithmetic is exact Decimal. Rounding to cents happens only when values
are presented (money formatting, PDF, the persisted snapshot).
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from decimal import Decimal

from flask import current_app

from ..validation import NotFoundError, ValidationError, parse_price, parse_rate, to_decimal

ZERO = Decimal("0")

CARTS_EXTENSION_KEY = "billcraft_carts"
_CARTS_LOCK = threading.Lock()


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "total": self.total,
        }


@dataclass
class CartLine:
    """
    One product on the invoice being composed.

    `product` is the catalog record as it was when the line was added.
    """
    product: dict
    quantity: int = 1
    override_price: Decimal | None = None

    @property
    def product_id(self):
        return self.product["id"]

    @property
    def unit_price(self) -> Decimal:
        return to_decimal(self.product.get("price") or 0, "price")

    @property
    def effective_price(self) -> Decimal:
        if self.override_price is not None:
            return self.override_price
        return self.unit_price

    @property
    def amount(self) -> Decimal:
        return self.effective_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.product.get("name"),
            "sku": self.product.get("sku"),
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "override_price": self.override_price,
            "effective_price": self.effective_price,
            "amount": self.amount,
        }


@dataclass
class CustomerDetails:
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""

    FIELDS = ("name", "email", "phone", "address")

    def update(self, payload: dict) -> None:
        for key, value in payload.items():
            if key not in self.FIELDS:
                raise ValidationError(f"Field not allowed: {key}")
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{key} must be a string")
            setattr(self, key, (value or "").strip())

    def reset(self) -> None:
        for key in self.FIELDS:
            setattr(self, key, "")

    def to_dict(self) -> dict:
        return {key: getattr(self, key) for key in self.FIELDS}


def compute_totals(lines: list[CartLine], rate) -> Totals:
    """Exact totals for the given lines at `rate` percent (0-100)."""
    rate = parse_rate(rate, "tax_rate")
    subtotal = sum((line.amount for line in lines), ZERO)
    tax_amount = subtotal * rate / Decimal(100)
    return Totals(
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
    )


@dataclass
class Cart:
    lines: list[CartLine] = field(default_factory=list)
    customer: CustomerDetails = field(default_factory=CustomerDetails)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find_line(self, product_id) -> CartLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def _require_line(self, product_id) -> CartLine:
        line = self.find_line(product_id)
        if line is None:
            raise NotFoundError("Product is not in the cart")
        return line

    def add_product(self, product: dict, quantity: int = 1) -> CartLine:
        """
        Add a catalog product. A product already in the cart keeps its
        existing line unchanged.
        """
        existing = self.find_line(product["id"])
        if existing is not None:
            return existing
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError("quantity must be a positive integer")
        line = CartLine(product=dict(product), quantity=quantity)
        self.lines.append(line)
        return line

    def remove_line(self, product_id) -> bool:
        line = self.find_line(product_id)
        if line is None:
            return False
        self.lines.remove(line)
        return True

    def change_quantity(self, product_id, delta: int) -> CartLine:
        """Adjust quantity by delta, never going below 1."""
        line = self._require_line(product_id)
        line.quantity = max(1, line.quantity + delta)
        return line

    def increment(self, product_id) -> CartLine:
        return self.change_quantity(product_id, 1)

    def decrement(self, product_id) -> CartLine:
        return self.change_quantity(product_id, -1)

    def set_override_price(self, product_id, value) -> CartLine:
        """
        Set a custom unit price for one line.

        Raises ValidationError for negative, > 999,999.99 or non-finite
        values; the previous price is kept in that case.
        """
        line = self._require_line(product_id)
        price = parse_price(value, "custom_price")
        line.override_price = price
        return line

    def clear_override_price(self, product_id) -> CartLine:
        line = self._require_line(product_id)
        line.override_price = None
        return line

    def totals(self, rate) -> Totals:
        return compute_totals(self.lines, rate)

    def clear(self) -> None:
        """Finalize: drop all lines and reset customer details."""
        self.lines.clear()
        self.customer.reset()

    def to_dict(self, rate=None) -> dict:
        data = {
            "lines": [line.to_dict() for line in self.lines],
            "customer": self.customer.to_dict(),
            "count": len(self.lines),
        }
        if rate is not None:
            data["totals"] = self.totals(rate).to_dict()
        return data


def get_cart(account_id: int) -> Cart:
    """
    The account's cart, created on first use.

    Creation is locked so concurrent first requests share one cart. Edits to
    a cart are not: one account composes one invoice at a time.
    """
    with _CARTS_LOCK:
        carts = current_app.extensions.setdefault(CARTS_EXTENSION_KEY, {})
        cart = carts.get(account_id)
        if cart is None:
            cart = Cart()
            carts[account_id] = cart
    return cart
