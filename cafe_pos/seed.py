"""One-time initial data for a fresh store."""

import structlog

from .models import Category, Customer, Product, User, UserRole
from .store import CATEGORIES, CUSTOMERS, OFFLINE_ORDERS, ORDERS, PRODUCTS, SEEDED, USERS, Store

logger = structlog.get_logger()


def _picsum(image_id: int) -> str:
    return f"https://picsum.photos/id/{image_id}/400/400"


def initial_data() -> dict[str, list]:
    users = [
        User(id="user-1", name="Admin", role=UserRole.ADMIN, access_code="111111"),
        User(id="user-2", name="Jessica", role=UserRole.WORKER, access_code="222222"),
    ]
    categories = [
        Category(id="cat-1", name="Coffee", image_url=_picsum(431)),
        Category(id="cat-2", name="Tea", image_url=_picsum(42)),
        Category(id="cat-3", name="Pastries", image_url=_picsum(368)),
        Category(id="cat-4", name="Sandwiches", image_url=_picsum(1080)),
    ]
    products = [
        Product(*row, image_url=_picsum(image_id))
        for *row, image_id in (
            ("prod-1", "Espresso", 1000, 100, "cat-1", "Strong and bold coffee shot.", 225),
            ("prod-2", "Latte", 1550, 80, "cat-1", "Espresso with steamed milk.", 305),
            ("prod-3", "Croissant", 875, 50, "cat-3", "Buttery and flaky pastry.", 368),
            ("prod-4", "Green Tea", 950, 120, "cat-2", "Healthy and refreshing green tea.", 42),
            ("prod-5", "Turkey Club", 2550, 30, "cat-4", "Classic turkey club sandwich.", 1080),
            ("prod-6", "Cappuccino", 1550, 75, "cat-1", "Espresso, steamed milk, and foam.", 326),
            ("prod-7", "Muffin", 1225, 60, "cat-3", "Blueberry muffin.", 1071),
            ("prod-8", "Black Tea", 950, 110, "cat-2", "Classic English breakfast tea.", 24),
        )
    ]
    customers = [
        Customer(id="cust-1", name="John Doe", phone="555-1234", loyalty_points=150),
        Customer(id="cust-2", name="Jane Smith", phone="555-5678", loyalty_points=75),
    ]
    return {
        USERS: users,
        CATEGORIES: categories,
        PRODUCTS: products,
        CUSTOMERS: customers,
    }


async def is_seeded(store: Store) -> bool:
    return bool(await store.get(SEEDED))


async def seed_store(store: Store) -> bool:
    """Write the initial data unless the store carries the seeded marker.

    Returns True if data was written.
    """
    async with store.lock:
        if await is_seeded(store):
            return False
        changes = {
            name: [item.to_record() for item in items]
            for name, items in initial_data().items()
        }
        changes[ORDERS] = await store.get(ORDERS)
        changes[OFFLINE_ORDERS] = await store.get(OFFLINE_ORDERS)
        changes[SEEDED] = [{"seeded": True}]
        await store.commit(changes)
    logger.info("store_seeded", collections=sorted(changes))
    return True
