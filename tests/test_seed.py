"""Tests for initial data seeding."""

from cafe_pos.models import Product
from cafe_pos.seed import initial_data, is_seeded, seed_store
from cafe_pos.store import CATEGORIES, CUSTOMERS, OFFLINE_ORDERS, ORDERS, PRODUCTS, USERS, MemoryStore

from .fixtures import run


class TestInitialData:
    """Tests for the seed data set."""

    def test_has_an_admin(self) -> None:
        assert any(user.is_admin() for user in initial_data()[USERS])

    def test_products_reference_categories(self) -> None:
        data = initial_data()
        category_ids = {c.id for c in data[CATEGORIES]}
        assert all(p.category_id in category_ids for p in data[PRODUCTS])

    def test_products_have_images(self) -> None:
        images = {p.name: p.image_url for p in initial_data()[PRODUCTS]}
        assert images["Espresso"] == "https://picsum.photos/id/225/400/400"
        assert len(set(images.values())) == len(images)

    def test_prices_in_cents(self) -> None:
        prices = {p.name: p.price_cents for p in initial_data()[PRODUCTS]}
        assert prices["Espresso"] == 1000
        assert prices["Croissant"] == 875


class TestSeedStore:
    """Tests for seed_store."""

    def test_seeds_empty_store(self) -> None:
        store = MemoryStore()
        assert run(seed_store(store)) is True
        assert run(is_seeded(store))
        assert len(run(store.get(USERS))) == 2
        assert len(run(store.get(PRODUCTS))) == 8
        assert len(run(store.get(CUSTOMERS))) == 2
        assert run(store.get(ORDERS)) == []

    def test_seeds_only_once(self) -> None:
        """A second start keeps whatever the terminal changed since the first."""
        store = MemoryStore()
        run(seed_store(store))
        products = run(store.load(PRODUCTS, Product.from_record))
        run(store.save(PRODUCTS, products[:1]))

        assert run(seed_store(store)) is False
        assert len(run(store.get(PRODUCTS))) == 1

    def test_keeps_queued_orders(self) -> None:
        store = MemoryStore({OFFLINE_ORDERS: [{"id": "order-a"}]})
        run(seed_store(store))
        assert run(store.get(OFFLINE_ORDERS)) == [{"id": "order-a"}]

    def test_keeps_existing_orders(self) -> None:
        store = MemoryStore({ORDERS: [{"id": "order-a"}]})
        run(seed_store(store))
        assert run(store.get(ORDERS)) == [{"id": "order-a"}]
