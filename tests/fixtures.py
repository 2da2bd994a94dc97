"""Shared builders for consistent POS data across all tests.

Catalog:
- prod-espresso: 10.00 DH, stock 5, category cat-coffee
- prod-latte: 15.50 DH, stock 20, category cat-coffee
- prod-last: 8.00 DH, stock 1, category cat-pastry
Customers:
- cust-x: 100 points
- cust-empty: 0 points
"""

import asyncio

from cafe_pos.connectivity import ConnectivityMonitor
from cafe_pos.errors import PersistenceError
from cafe_pos.models import CartItem, Category, Customer, Product, User, UserRole
from cafe_pos.orders import OrderEngine
from cafe_pos.store import CATEGORIES, CUSTOMERS, PRODUCTS, USERS, MemoryStore
from cafe_pos.sync import SyncReconciler

ADMIN = User(id="user-admin", name="Admin", role=UserRole.ADMIN, access_code="111111")
WORKER = User(id="user-worker", name="Jessica", role=UserRole.WORKER, access_code="2222")

COFFEE = Category(id="cat-coffee", name="Coffee")
PASTRY = Category(id="cat-pastry", name="Pastries")
TEA = Category(id="cat-tea", name="Tea")

ESPRESSO = Product(id="prod-espresso", name="Espresso", price_cents=1000, stock=5, category_id="cat-coffee")
LATTE = Product(id="prod-latte", name="Latte", price_cents=1550, stock=20, category_id="cat-coffee")
LAST_CROISSANT = Product(id="prod-last", name="Croissant", price_cents=800, stock=1, category_id="cat-pastry")

CUSTOMER_X = Customer(id="cust-x", name="John Doe", phone="555-1234", loyalty_points=100)
CUSTOMER_EMPTY = Customer(id="cust-empty", name="Jane Smith", phone="555-5678", loyalty_points=0)


def run(coro):
    """Drive a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


def catalog_data(**overrides) -> dict:
    """Records for the shared catalog, with optional collection overrides."""
    data = {
        USERS: [ADMIN.to_record(), WORKER.to_record()],
        CATEGORIES: [COFFEE.to_record(), PASTRY.to_record(), TEA.to_record()],
        PRODUCTS: [ESPRESSO.to_record(), LATTE.to_record(), LAST_CROISSANT.to_record()],
        CUSTOMERS: [CUSTOMER_X.to_record(), CUSTOMER_EMPTY.to_record()],
    }
    data.update(overrides)
    return data


def make_store(latency: float = 0.0, **overrides) -> MemoryStore:
    return MemoryStore(catalog_data(**overrides), latency=latency)


def line(product: Product, quantity: int) -> CartItem:
    return CartItem.from_product(product, quantity)


def make_engine(store=None) -> OrderEngine:
    return OrderEngine(store or make_store())


def make_reconciler(store, online: bool = True) -> tuple[SyncReconciler, ConnectivityMonitor]:
    monitor = ConnectivityMonitor(online=online)
    return SyncReconciler(store, monitor), monitor


async def stock_of(store, product_id: str) -> int:
    for record in await store.get(PRODUCTS):
        if record["id"] == product_id:
            return record["stock"]
    raise KeyError(product_id)


async def points_of(store, customer_id: str) -> int:
    for record in await store.get(CUSTOMERS):
        if record["id"] == customer_id:
            return record["loyalty_points"]
    raise KeyError(customer_id)


class FailingCommitStore(MemoryStore):
    """Memory store whose ``commit`` raises until ``failures`` is exhausted."""

    def __init__(self, initial=None, failures: int = 1):
        super().__init__(initial)
        self.failures = failures

    async def commit(self, changes):
        if self.failures > 0:
            self.failures -= 1
            raise PersistenceError("commit", OSError("disk full"))
        await super().commit(changes)
