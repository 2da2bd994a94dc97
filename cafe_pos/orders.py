"""Order engine: validates a cart and commits stock, points and the order.

The three effects of a sale (stock decrement, customer points, order record)
are staged in memory and flushed with a single ``Store.commit``. Every check
runs before the commit, so a rejected order leaves the store untouched.
"""

from collections.abc import Sequence
from dataclasses import replace
from typing import Optional

import structlog

from .cart import build_quote, subtotal_of
from .connectivity import Connectivity
from .errors import InsufficientPointsError, ReferentialIntegrityError, ValidationError
from .helpers import new_id, now_iso
from .loyalty import EARN_RATE_PERCENT, REDEMPTION_RATE_CENTS, discount_for, points_earned
from .models import CartItem, Customer, Order, Product, User
from .store import CUSTOMERS, OFFLINE_ORDERS, ORDERS, PRODUCTS, Store
from .validation import (
    require_equal,
    require_int,
    require_non_negative,
    require_not_empty,
    require_positive,
)

logger = structlog.get_logger()


def requested_quantities(items: Sequence[CartItem]) -> dict[str, int]:
    """Total quantity per product; repeated lines for one product are summed."""
    totals: dict[str, int] = {}
    for item in items:
        totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity
    return totals


def decrement_stock(products: list[Product], items: Sequence[CartItem]) -> list[Product]:
    """Return the product list with the cart's quantities taken out of stock.

    Raises ReferentialIntegrityError if a product is gone and ValidationError
    if any line asks for more than is on hand. Nothing is modified on failure.
    """
    by_id = {p.id: p for p in products}
    wanted = requested_quantities(items)

    for product_id in wanted:
        if product_id not in by_id:
            raise ReferentialIntegrityError("product", product_id)

    for product_id, quantity in wanted.items():
        product = by_id[product_id]
        if quantity > product.stock:
            raise ValidationError(
                f"Insufficient stock for {product.name}: available {product.stock}, requested {quantity}"
            )

    return [
        replace(p, stock=p.stock - wanted[p.id]) if p.id in wanted else p
        for p in products
    ]


def find_customer(customers: list[Customer], customer_id: str) -> Customer:
    for customer in customers:
        if customer.id == customer_id:
            return customer
    raise ReferentialIntegrityError("customer", customer_id)


def pending_delta(queue: list[dict], customer_id: str) -> int:
    """Net points still owed to a customer by orders waiting in the offline queue."""
    return sum(
        record["points_earned"] - record["points_redeemed"]
        for record in queue
        if record.get("customer_id") == customer_id
    )


class OrderEngine:
    """Creates orders against an injected store.

    Checkouts are serialized on ``store.lock`` so two sales can never
    interleave their stock read-modify-write cycles.
    """

    def __init__(
        self,
        store: Store,
        redemption_rate_cents: int = REDEMPTION_RATE_CENTS,
        earn_rate_percent: int = EARN_RATE_PERCENT,
    ):
        self._store = store
        self.redemption_rate_cents = redemption_rate_cents
        self.earn_rate_percent = earn_rate_percent
        self._log = logger.bind(component="order_engine")

    def _validate_request(
        self,
        items: Sequence[CartItem],
        subtotal_cents: int,
        final_amount_cents: int,
        points_redeemed: int,
        user: User,
        customer_id: Optional[str],
    ) -> None:
        require_not_empty(items, "Cart is empty")
        for item in items:
            require_int(item.quantity, f"Quantity for {item.name} must be a whole number")
            require_positive(item.quantity, f"Quantity for {item.name} must be at least 1")
            require_non_negative(item.price_cents, f"Price for {item.name} cannot be negative")
        require_int(points_redeemed, "Redeemed points must be a whole number")
        require_non_negative(points_redeemed, "Redeemed points cannot be negative")
        if points_redeemed and not customer_id:
            raise ValidationError("Redeeming points requires a customer")
        if not user.id:
            raise ValidationError("Order must be served by a user")

        require_equal(subtotal_cents, subtotal_of(items), "Subtotal does not match cart")
        discount = discount_for(points_redeemed, self.redemption_rate_cents)
        if discount > subtotal_cents:
            raise ValidationError("Points discount cannot exceed the subtotal")
        require_equal(
            final_amount_cents, subtotal_cents - discount, "Final amount does not match discount"
        )

    async def create_order(
        self,
        cart: Sequence[CartItem],
        subtotal_cents: int,
        final_amount_cents: int,
        points_redeemed: int,
        user: User,
        connectivity: Connectivity,
        customer_id: Optional[str] = None,
    ) -> Order:
        """Validate and commit a sale.

        Online, the customer's balance moves by ``earned - redeemed`` and the
        order joins the synced collection. Offline, the order is queued as-is
        and its point effects wait for the reconciler. Stock is taken in both
        cases.

        Returns:
            The created order, so a receipt can be shown immediately.
        """
        items = tuple(cart)
        self._validate_request(
            items, subtotal_cents, final_amount_cents, points_redeemed, user, customer_id
        )
        log = self._log.bind(
            served_by=user.id, customer_id=customer_id, connectivity=connectivity.value
        )

        async with self._store.lock:
            products = await self._store.load(PRODUCTS, Product.from_record)
            updated_products = decrement_stock(products, items)

            order = Order(
                id=new_id("order"),
                items=items,
                subtotal_cents=subtotal_cents,
                points_redeemed=points_redeemed,
                final_amount_cents=final_amount_cents,
                customer_id=customer_id,
                points_earned=points_earned(final_amount_cents, self.earn_rate_percent),
                date=now_iso(),
                served_by=user.id,
            )
            changes = {PRODUCTS: [p.to_record() for p in updated_products]}

            customers: list[Customer] = []
            customer: Optional[Customer] = None
            if customer_id:
                customers = await self._store.load(CUSTOMERS, Customer.from_record)
                customer = find_customer(customers, customer_id)

            if connectivity == Connectivity.ONLINE:
                if customer is not None:
                    new_balance = customer.loyalty_points + order.points_delta()
                    if new_balance < 0:
                        raise InsufficientPointsError(
                            customer.id, customer.loyalty_points, order.points_delta()
                        )
                    changes[CUSTOMERS] = [
                        (replace(c, loyalty_points=new_balance) if c.id == customer.id else c).to_record()
                        for c in customers
                    ]
                orders = await self._store.get(ORDERS)
                changes[ORDERS] = orders + [order.to_record()]
            else:
                queue = await self._store.get(OFFLINE_ORDERS)
                if customer is not None:
                    projected = customer.loyalty_points + pending_delta(queue, customer.id)
                    if projected + order.points_delta() < 0:
                        raise InsufficientPointsError(customer.id, projected, order.points_delta())
                changes[OFFLINE_ORDERS] = queue + [order.to_record()]

            await self._store.commit(changes)

        for product_id, quantity in requested_quantities(items).items():
            log.debug("stock_decremented", product_id=product_id, quantity=quantity)
        if connectivity == Connectivity.ONLINE:
            log.info(
                "order_created",
                order_id=order.id,
                final_amount_cents=order.final_amount_cents,
                points_earned=order.points_earned,
                points_redeemed=order.points_redeemed,
            )
        else:
            log.info("order_queued_offline", order_id=order.id)
        return order

    async def checkout(
        self,
        cart: Sequence[CartItem],
        user: User,
        connectivity: Connectivity,
        customer_id: Optional[str] = None,
        requested_points: int = 0,
    ) -> Order:
        """Quote the cart against the live customer balance and create the order.

        Offline, the balance used for the quote already includes the points
        owed to or spent by orders still waiting in the queue.
        """
        customer = None
        if customer_id:
            customers = await self._store.load(CUSTOMERS, Customer.from_record)
            customer = find_customer(customers, customer_id)
            if connectivity == Connectivity.OFFLINE:
                queue = await self._store.get(OFFLINE_ORDERS)
                projected = customer.loyalty_points + pending_delta(queue, customer.id)
                customer = replace(customer, loyalty_points=max(0, projected))
        quote = build_quote(
            list(cart),
            customer,
            requested_points,
            self.redemption_rate_cents,
            self.earn_rate_percent,
        )
        return await self.create_order(
            cart,
            quote.subtotal_cents,
            quote.final_amount_cents,
            quote.points_redeemed,
            user,
            connectivity,
            customer_id,
        )
