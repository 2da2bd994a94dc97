"""Café point-of-sale core: checkout, loyalty points and offline order sync."""

from .errors import (
    PosError,
    ValidationError,
    ReferentialIntegrityError,
    InsufficientPointsError,
    PersistenceError,
)
from .models import (
    UserRole,
    User,
    Category,
    Product,
    Customer,
    CartItem,
    Order,
    CheckoutQuote,
    ProductUpdate,
    CategoryUpdate,
    CustomerUpdate,
    UserUpdate,
)
from .loyalty import (
    REDEMPTION_RATE_CENTS,
    EARN_RATE_PERCENT,
    max_redeemable_points,
    discount_for,
    points_earned,
    clamp_redemption,
)
from .store import (
    Store,
    MemoryStore,
    JsonFileStore,
    USERS,
    PRODUCTS,
    CATEGORIES,
    CUSTOMERS,
    ORDERS,
    OFFLINE_ORDERS,
    SEEDED,
)
from .connectivity import Connectivity, ConnectivityMonitor
from .cart import Cart, build_quote
from .orders import OrderEngine
from .sync import SyncReconciler
from .catalog import ProductCatalog, CategoryCatalog, CustomerDirectory, UserDirectory
from .reports import SalesReport, DashboardSummary
from .receipt import format_receipt
from .seed import seed_store
from .config import Settings
from .terminal import Terminal, configure_logging

__all__ = [
    # Errors
    "PosError",
    "ValidationError",
    "ReferentialIntegrityError",
    "InsufficientPointsError",
    "PersistenceError",
    # Models
    "UserRole",
    "User",
    "Category",
    "Product",
    "Customer",
    "CartItem",
    "Order",
    "CheckoutQuote",
    "ProductUpdate",
    "CategoryUpdate",
    "CustomerUpdate",
    "UserUpdate",
    # Loyalty
    "REDEMPTION_RATE_CENTS",
    "EARN_RATE_PERCENT",
    "max_redeemable_points",
    "discount_for",
    "points_earned",
    "clamp_redemption",
    # Store
    "Store",
    "MemoryStore",
    "JsonFileStore",
    "USERS",
    "PRODUCTS",
    "CATEGORIES",
    "CUSTOMERS",
    "ORDERS",
    "OFFLINE_ORDERS",
    "SEEDED",
    # Connectivity
    "Connectivity",
    "ConnectivityMonitor",
    # Checkout
    "Cart",
    "build_quote",
    "OrderEngine",
    "SyncReconciler",
    # Management
    "ProductCatalog",
    "CategoryCatalog",
    "CustomerDirectory",
    "UserDirectory",
    # Reporting
    "SalesReport",
    "DashboardSummary",
    "format_receipt",
    # Terminal
    "seed_store",
    "Settings",
    "Terminal",
    "configure_logging",
]
