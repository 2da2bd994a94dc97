"""Cucumber BDD tests for checkout and offline sync using pytest-bdd."""

import asyncio

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from cafe_pos.config import Settings
from cafe_pos.errors import PosError
from cafe_pos.models import CartItem, Customer, Order, Product
from cafe_pos.store import CATEGORIES, CUSTOMERS, OFFLINE_ORDERS, ORDERS, PRODUCTS, MemoryStore
from cafe_pos.terminal import Terminal

from ..fixtures import ADMIN, COFFEE, WORKER, points_of, stock_of

# Load scenarios from feature file
scenarios("checkout.feature")


class CheckoutTestContext:
    """Test context for checkout BDD scenarios."""

    def __init__(self):
        self.products = []
        self.customers = []
        self.online = True
        self._terminal = None
        self.order = None
        self.error = None
        self.results = []

    @property
    def terminal(self) -> Terminal:
        if self._terminal is None:
            store = MemoryStore(
                {
                    CATEGORIES: [COFFEE.to_record()],
                    PRODUCTS: [p.to_record() for p in self.products],
                    CUSTOMERS: [c.to_record() for c in self.customers],
                },
                latency=0.001,
            )
            self._terminal = Terminal(Settings(seed=False), store=store, online=self.online)
        return self._terminal

    def product_named(self, name: str) -> Product:
        for product in asyncio.run(self.terminal.products.all()):
            if product.name == name:
                return product
        raise KeyError(name)

    def sell(self, product, quantity, customer_id=None, points=0, user=WORKER):
        cart = [CartItem.from_product(product, quantity)]
        terminal = self.terminal
        return terminal.orders.checkout(
            cart, user, terminal.monitor.connectivity, customer_id, points
        )


@pytest.fixture
def ctx():
    """Fixture providing fresh test context for each scenario."""
    return CheckoutTestContext()


# --- Given steps ---

@given(parsers.parse('a product "{name}" priced {price:d} cents with {stock:d} in stock'))
def a_product(ctx, name, price, stock):
    ctx.products.append(
        Product(id=f"prod-{name.lower()}", name=name, price_cents=price, stock=stock, category_id=COFFEE.id)
    )


@given(parsers.parse('a customer "{customer_id}" with {points:d} points'))
def a_customer(ctx, customer_id, points):
    ctx.customers.append(
        Customer(id=customer_id, name=customer_id, phone="555-0000", loyalty_points=points)
    )


@given("the terminal is online")
def terminal_online(ctx):
    ctx.online = True


@given("the terminal is offline")
def terminal_offline(ctx):
    ctx.online = False


# --- When steps ---

@when(parsers.parse('I sell {quantity:d} "{name}"'))
def i_sell(ctx, quantity, name):
    ctx.order, ctx.error = None, None
    try:
        ctx.order = asyncio.run(ctx.sell(ctx.product_named(name), quantity))
    except PosError as e:
        ctx.error = e


@when(parsers.parse('customer "{customer_id}" buys {quantity:d} "{name}" redeeming {points:d} points'))
def customer_buys(ctx, customer_id, quantity, name, points):
    ctx.order = asyncio.run(ctx.sell(ctx.product_named(name), quantity, customer_id, points))


@when("connectivity returns")
def connectivity_returns(ctx):
    asyncio.run(ctx.terminal.monitor.set_online(True))


@when(parsers.parse('two tills sell the last "{name}" at the same time'))
def two_tills(ctx, name):
    product = ctx.product_named(name)

    async def race():
        return await asyncio.gather(
            ctx.sell(product, 1, user=WORKER),
            ctx.sell(product, 1, user=ADMIN),
            return_exceptions=True,
        )

    ctx.results = asyncio.run(race())


# --- Then steps ---

@then(parsers.parse('"{name}" has {stock:d} in stock'))
def has_stock(ctx, name, stock):
    product_id = ctx.product_named(name).id
    assert asyncio.run(stock_of(ctx.terminal.store, product_id)) == stock


@then(parsers.parse('the sale is refused with "{message}"'))
def sale_refused(ctx, message):
    assert ctx.order is None
    assert ctx.error is not None
    assert message in str(ctx.error)


@then(parsers.parse('customer "{customer_id}" has {points:d} points'))
def customer_points(ctx, customer_id, points):
    assert asyncio.run(points_of(ctx.terminal.store, customer_id)) == points


@then(parsers.parse("{count:d} orders are pending"))
def orders_pending(ctx, count):
    assert len(asyncio.run(ctx.terminal.store.get(OFFLINE_ORDERS))) == count


@then(parsers.parse("{count:d} orders are synced"))
def orders_synced(ctx, count):
    assert len(asyncio.run(ctx.terminal.store.get(ORDERS))) == count


@then(parsers.parse("exactly {count:d} sale succeeds"))
def sales_succeed(ctx, count):
    orders = [r for r in ctx.results if isinstance(r, Order)]
    failures = [r for r in ctx.results if isinstance(r, PosError)]
    assert len(orders) == count
    assert len(failures) == len(ctx.results) - count


@then(parsers.parse("the order total is {cents:d} cents"))
def order_total(ctx, cents):
    assert ctx.order.final_amount_cents == cents
