"""Management services for products, categories, customers and users.

Each service owns one collection. Writes validate the typed update before it
is merged and run under ``store.lock`` so they cannot interleave with a
checkout's stock or points update.
"""

from dataclasses import replace
from typing import Optional

import structlog

from .errors import ReferentialIntegrityError, ValidationError
from .helpers import new_id
from .models import (
    Category,
    CategoryUpdate,
    Customer,
    CustomerUpdate,
    Product,
    ProductUpdate,
    User,
    UserRole,
    UserUpdate,
    apply_update,
)
from .store import CATEGORIES, CUSTOMERS, PRODUCTS, USERS, Store
from .validation import (
    require_access_code,
    require_int,
    require_non_negative,
    require_not_blank,
)

logger = structlog.get_logger()

PLACEHOLDER_IMAGE = "https://placehold.co/400x400/e2e8f0/e2e8f0"


def _find(items: list, entity_id: str, kind: str):
    for item in items:
        if item.id == entity_id:
            return item
    raise ReferentialIntegrityError(kind, entity_id)


def _replace(items: list, updated) -> list:
    return [updated if item.id == updated.id else item for item in items]


def _validate_product(product: Product) -> None:
    require_not_blank(product.name, "Product name cannot be empty")
    require_int(product.price_cents, "Price must be a whole number of cents")
    require_non_negative(product.price_cents, "Price cannot be negative")
    require_int(product.stock, "Stock must be a whole number")
    require_non_negative(product.stock, "Stock cannot be negative")


class ProductCatalog:
    def __init__(self, store: Store):
        self._store = store
        self._log = logger.bind(component="catalog", collection=PRODUCTS)

    async def all(self) -> list[Product]:
        return await self._store.load(PRODUCTS, Product.from_record)

    async def get(self, product_id: str) -> Product:
        return _find(await self.all(), product_id, "product")

    async def by_category(self, category_id: str) -> list[Product]:
        return [p for p in await self.all() if p.category_id == category_id]

    async def _require_category(self, category_id: str) -> None:
        categories = await self._store.load(CATEGORIES, Category.from_record)
        _find(categories, category_id, "category")

    async def add(
        self,
        name: str,
        price_cents: int,
        category_id: str,
        stock: int = 0,
        description: str = "",
        image_url: str = PLACEHOLDER_IMAGE,
    ) -> Product:
        product = Product(
            id=new_id("prod"),
            name=name,
            description=description,
            price_cents=price_cents,
            stock=stock,
            category_id=category_id,
            image_url=image_url,
        )
        _validate_product(product)
        async with self._store.lock:
            await self._require_category(category_id)
            products = await self.all()
            await self._store.save(PRODUCTS, products + [product])
        self._log.info("product_added", product_id=product.id, name=name)
        return product

    async def update(self, product_id: str, update: ProductUpdate) -> Product:
        async with self._store.lock:
            products = await self.all()
            updated = apply_update(_find(products, product_id, "product"), update)
            _validate_product(updated)
            if update.category_id is not None:
                await self._require_category(update.category_id)
            await self._store.save(PRODUCTS, _replace(products, updated))
        self._log.info("product_updated", product_id=product_id)
        return updated

    async def set_stock(self, product_id: str, stock: int) -> Product:
        """Direct stock edit from management."""
        return await self.update(product_id, ProductUpdate(stock=stock))

    async def delete(self, product_id: str) -> None:
        async with self._store.lock:
            products = await self.all()
            _find(products, product_id, "product")
            await self._store.save(PRODUCTS, [p for p in products if p.id != product_id])
        self._log.info("product_deleted", product_id=product_id)


class CategoryCatalog:
    def __init__(self, store: Store):
        self._store = store
        self._log = logger.bind(component="catalog", collection=CATEGORIES)

    async def all(self) -> list[Category]:
        return await self._store.load(CATEGORIES, Category.from_record)

    async def product_counts(self) -> dict[str, int]:
        """Number of products referencing each category."""
        counts = {c.id: 0 for c in await self.all()}
        for product in await self._store.load(PRODUCTS, Product.from_record):
            if product.category_id in counts:
                counts[product.category_id] += 1
        return counts

    async def add(self, name: str, image_url: str = PLACEHOLDER_IMAGE) -> Category:
        require_not_blank(name, "Category name cannot be empty")
        category = Category(id=new_id("cat"), name=name, image_url=image_url)
        async with self._store.lock:
            await self._store.save(CATEGORIES, await self.all() + [category])
        self._log.info("category_added", category_id=category.id, name=name)
        return category

    async def update(self, category_id: str, update: CategoryUpdate) -> Category:
        async with self._store.lock:
            categories = await self.all()
            updated = apply_update(_find(categories, category_id, "category"), update)
            require_not_blank(updated.name, "Category name cannot be empty")
            await self._store.save(CATEGORIES, _replace(categories, updated))
        return updated

    async def delete(self, category_id: str) -> None:
        """Delete a category, refusing while any product still references it."""
        async with self._store.lock:
            categories = await self.all()
            _find(categories, category_id, "category")
            products = await self._store.load(PRODUCTS, Product.from_record)
            in_use = sum(1 for p in products if p.category_id == category_id)
            if in_use:
                raise ReferentialIntegrityError(
                    "category",
                    category_id,
                    f"category {category_id} is used by {in_use} product(s)",
                )
            await self._store.save(CATEGORIES, [c for c in categories if c.id != category_id])
        self._log.info("category_deleted", category_id=category_id)


class CustomerDirectory:
    def __init__(self, store: Store):
        self._store = store
        self._log = logger.bind(component="catalog", collection=CUSTOMERS)

    async def all(self) -> list[Customer]:
        return await self._store.load(CUSTOMERS, Customer.from_record)

    async def get(self, customer_id: str) -> Customer:
        return _find(await self.all(), customer_id, "customer")

    async def search(self, query: str) -> list[Customer]:
        """Case-insensitive match on name or phone; an empty query returns everyone."""
        customers = await self.all()
        needle = query.strip().lower()
        if not needle:
            return customers
        return [c for c in customers if needle in c.name.lower() or needle in c.phone.lower()]

    async def add(self, name: str, phone: str) -> Customer:
        """Register a customer with an empty points balance."""
        require_not_blank(name, "Customer name cannot be empty")
        require_not_blank(phone, "Customer phone cannot be empty")
        customer = Customer(id=new_id("cust"), name=name.strip(), phone=phone.strip())
        async with self._store.lock:
            await self._store.save(CUSTOMERS, await self.all() + [customer])
        self._log.info("customer_added", customer_id=customer.id)
        return customer

    async def update(self, customer_id: str, update: CustomerUpdate) -> Customer:
        async with self._store.lock:
            customers = await self.all()
            updated = apply_update(_find(customers, customer_id, "customer"), update)
            require_not_blank(updated.name, "Customer name cannot be empty")
            require_int(updated.loyalty_points, "Loyalty points must be a whole number")
            require_non_negative(updated.loyalty_points, "Loyalty points cannot be negative")
            await self._store.save(CUSTOMERS, _replace(customers, updated))
        return updated

    async def delete(self, customer_id: str) -> None:
        async with self._store.lock:
            customers = await self.all()
            _find(customers, customer_id, "customer")
            await self._store.save(CUSTOMERS, [c for c in customers if c.id != customer_id])
        self._log.info("customer_deleted", customer_id=customer_id)


class UserDirectory:
    """Staff accounts and PIN login.

    At least one admin always remains: deleting or demoting the last admin is
    rejected.
    """

    def __init__(self, store: Store):
        self._store = store
        self._log = logger.bind(component="catalog", collection=USERS)

    async def all(self) -> list[User]:
        return await self._store.load(USERS, User.from_record)

    async def login(self, access_code: str) -> Optional[User]:
        """Return the user owning ``access_code``, or None."""
        for user in await self.all():
            if user.access_code == access_code:
                self._log.info("user_logged_in", user_id=user.id)
                return user
        self._log.info("login_rejected")
        return None

    async def add(self, name: str, access_code: str, role: UserRole = UserRole.WORKER) -> User:
        require_not_blank(name, "User name cannot be empty")
        require_access_code(access_code)
        user = User(id=new_id("user"), name=name, role=UserRole(role), access_code=access_code)
        async with self._store.lock:
            await self._store.save(USERS, await self.all() + [user])
        self._log.info("user_added", user_id=user.id, role=user.role.value)
        return user

    async def update(self, user_id: str, update: UserUpdate) -> User:
        async with self._store.lock:
            users = await self.all()
            current = _find(users, user_id, "user")
            updated = apply_update(current, update)
            updated = replace(updated, role=UserRole(updated.role))
            require_not_blank(updated.name, "User name cannot be empty")
            require_access_code(updated.access_code)
            if current.is_admin() and not updated.is_admin():
                self._require_other_admin(users, user_id)
            await self._store.save(USERS, _replace(users, updated))
        return updated

    async def delete(self, user_id: str) -> None:
        async with self._store.lock:
            users = await self.all()
            user = _find(users, user_id, "user")
            if user.is_admin():
                self._require_other_admin(users, user_id)
            await self._store.save(USERS, [u for u in users if u.id != user_id])
        self._log.info("user_deleted", user_id=user_id)

    @staticmethod
    def _require_other_admin(users: list[User], user_id: str) -> None:
        if not any(u.is_admin() for u in users if u.id != user_id):
            raise ValidationError("At least one admin must remain")
