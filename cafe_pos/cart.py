"""Cart assembly and checkout quotes."""

from collections.abc import Iterable, Sequence
from typing import Optional

from .errors import ValidationError
from .loyalty import (
    EARN_RATE_PERCENT,
    REDEMPTION_RATE_CENTS,
    clamp_redemption,
    discount_for,
    max_redeemable_points,
    points_earned,
)
from .models import CartItem, CheckoutQuote, Customer, Product
from .validation import require_int


def subtotal_of(items: Iterable[CartItem]) -> int:
    """Sum of price x quantity over the lines, in cents."""
    return sum(item.line_total_cents for item in items)


def build_quote(
    items: Sequence[CartItem],
    customer: Optional[Customer],
    requested_points: int = 0,
    redemption_rate_cents: int = REDEMPTION_RATE_CENTS,
    earn_rate_percent: int = EARN_RATE_PERCENT,
) -> CheckoutQuote:
    """Compute checkout totals, clamping the requested redemption."""
    subtotal = subtotal_of(items)
    maximum = max_redeemable_points(customer, subtotal, redemption_rate_cents)
    points = clamp_redemption(requested_points, maximum)
    discount = discount_for(points, redemption_rate_cents)
    final_amount = subtotal - discount
    return CheckoutQuote(
        subtotal_cents=subtotal,
        points_redeemed=points,
        discount_cents=discount,
        final_amount_cents=final_amount,
        points_to_earn=points_earned(final_amount, earn_rate_percent),
        max_redeemable=maximum,
        items=list(items),
    )


class Cart:
    """Ordered cart lines, one per product, capped at the stock seen when added.

    The cap only reflects the product snapshot passed in; the order engine
    re-checks live stock when the order is committed.
    """

    def __init__(self) -> None:
        self._items: list[CartItem] = []
        self._stock: dict[str, int] = {}

    @property
    def items(self) -> list[CartItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def _index(self, product_id: str) -> int:
        for i, item in enumerate(self._items):
            if item.product_id == product_id:
                return i
        return -1

    def add_product(self, product: Product) -> bool:
        """Add one unit. Returns False when the stock limit is already reached."""
        self._stock[product.id] = product.stock
        i = self._index(product.id)
        if i == -1:
            if product.stock < 1:
                return False
            self._items.append(CartItem.from_product(product, 1))
            return True
        current = self._items[i]
        if current.quantity >= product.stock:
            return False
        self._items[i] = current.with_quantity(current.quantity + 1)
        return True

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """Set a line's quantity; 0 removes it and values above stock are capped."""
        i = self._index(product_id)
        if i == -1:
            return
        require_int(quantity, "Quantity must be a whole number")
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative")
        if quantity == 0:
            del self._items[i]
            return
        quantity = min(quantity, self._stock.get(product_id, quantity))
        self._items[i] = self._items[i].with_quantity(quantity)

    def remove(self, product_id: str) -> None:
        self.update_quantity(product_id, 0)

    def clear(self) -> None:
        self._items.clear()
        self._stock.clear()

    @property
    def subtotal_cents(self) -> int:
        return subtotal_of(self._items)

    def quote(
        self,
        customer: Optional[Customer] = None,
        requested_points: int = 0,
        redemption_rate_cents: int = REDEMPTION_RATE_CENTS,
        earn_rate_percent: int = EARN_RATE_PERCENT,
    ) -> CheckoutQuote:
        return build_quote(
            self._items, customer, requested_points, redemption_rate_cents, earn_rate_percent
        )
