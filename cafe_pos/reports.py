"""Read-side views over the synced order history."""

from dataclasses import dataclass, field

from .helpers import parse_timestamp
from .models import Order, Product
from .store import OFFLINE_ORDERS, ORDERS, PRODUCTS, Store

TOP_PRODUCTS = 5


def _sort_key(order: Order) -> tuple[int, int]:
    ts = parse_timestamp(order.date)
    return ts.seconds, ts.nanos


def total_revenue_cents(orders: list[Order]) -> int:
    return sum(order.final_amount_cents for order in orders)


def units_sold(orders: list[Order]) -> dict[str, int]:
    """Units sold per product name across all order lines."""
    sales: dict[str, int] = {}
    for order in orders:
        for item in order.items:
            sales[item.name] = sales.get(item.name, 0) + item.quantity
    return sales


def top_products(orders: list[Order], limit: int = TOP_PRODUCTS) -> list[tuple[str, int]]:
    """Best sellers by units, ties broken by name."""
    ranked = sorted(units_sold(orders).items(), key=lambda kv: (-kv[1], kv[0]))
    return ranked[:limit]


@dataclass
class DashboardSummary:
    total_revenue_cents: int
    order_count: int
    product_count: int
    pending_count: int
    top_products: list[tuple[str, int]] = field(default_factory=list)


class SalesReport:
    """Order history and dashboard statistics for a store."""

    def __init__(self, store: Store, top_limit: int = TOP_PRODUCTS):
        self._store = store
        self._top_limit = top_limit

    async def orders(self) -> list[Order]:
        return await self._store.load(ORDERS, Order.from_record)

    async def order_history(self) -> list[Order]:
        """Synced orders, newest first."""
        return sorted(await self.orders(), key=_sort_key, reverse=True)

    async def dashboard_summary(self) -> DashboardSummary:
        orders = await self.orders()
        products = await self._store.load(PRODUCTS, Product.from_record)
        pending = await self._store.get(OFFLINE_ORDERS)
        return DashboardSummary(
            total_revenue_cents=total_revenue_cents(orders),
            order_count=len(orders),
            product_count=len(products),
            pending_count=len(pending),
            top_products=top_products(orders, self._top_limit),
        )
