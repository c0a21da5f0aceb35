"""
Shopping cart. Plain in-process data; one per shopper (see sessions.py).
"""

import logging

from ..models import CartLine, Product

logger = logging.getLogger(__name__)


class CartError(ValueError):
    pass


class Cart:
    def __init__(self):
        self._lines: list[CartLine] = []

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines)

    @property
    def total(self) -> int:
        return sum(line.subtotal for line in self._lines)

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def _find(self, product_id: str) -> int:
        for i, line in enumerate(self._lines):
            if line.product.id == product_id:
                return i
        return -1

    def add(self, product: Product) -> CartLine:
        """Add one unit. Adding an item already in the cart bumps its quantity."""
        if product.is_sold_out:
            raise CartError("This item is sold out.")
        i = self._find(product.id)
        quantity = self._lines[i].quantity + 1 if i >= 0 else 1
        if quantity > product.stock:
            raise CartError("Cannot exceed available stock.")
        line = CartLine(product=product, quantity=quantity)
        if i >= 0:
            self._lines[i] = line
        else:
            self._lines.append(line)
        return line

    def update_quantity(self, product: Product, quantity: int) -> bool:
        """Set a line's quantity. Below 1 is ignored (returns False)."""
        if quantity < 1:
            return False
        i = self._find(product.id)
        if i < 0:
            raise CartError(f"Product {product.id} is not in the cart.")
        if quantity > product.stock:
            raise CartError("Cannot exceed available stock.")
        self._lines[i] = CartLine(product=product, quantity=quantity)
        return True

    def remove(self, product_id: str) -> None:
        self._lines = [line for line in self._lines if line.product.id != product_id]

    def clear(self) -> None:
        self._lines = []

    def validate(self, current: dict[str, Product]) -> None:
        """
        Check every line against current stock and refresh product snapshots.
        Raises CartError naming the first offending line.
        """
        if not self._lines:
            raise CartError("Your cart is empty.")
        refreshed = []
        for line in self._lines:
            product = current.get(line.product.id)
            if product is None:
                raise CartError(f"'{line.product.title}' is no longer available.")
            if line.quantity > product.stock:
                raise CartError(
                    f"Only {product.stock} of '{product.title}' left in stock."
                )
            refreshed.append(CartLine(product=product, quantity=line.quantity))
        self._lines = refreshed
