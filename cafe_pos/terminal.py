"""Terminal wiring: builds the store, services and sync loop from settings."""

from typing import Optional

import structlog

from .catalog import CategoryCatalog, CustomerDirectory, ProductCatalog, UserDirectory
from .config import Settings
from .connectivity import ConnectivityMonitor
from .errors import PosError
from .orders import OrderEngine
from .reports import SalesReport
from .seed import seed_store
from .store import JsonFileStore, MemoryStore, Store
from .sync import SyncReconciler


def configure_logging(level: int = 0) -> None:
    """Configure structlog with JSON rendering and ISO timestamps."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def create_store(settings: Settings) -> Store:
    """JSON file store when a path is configured, memory store otherwise."""
    if settings.store_path:
        return JsonFileStore(settings.store_path)
    return MemoryStore()


class Terminal:
    """One POS terminal: a single store shared by every service."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[Store] = None,
        online: bool = True,
    ):
        self.settings = settings or Settings()
        self.store = store or create_store(self.settings)
        self.monitor = ConnectivityMonitor(online=online)
        self.orders = OrderEngine(
            self.store,
            redemption_rate_cents=self.settings.redemption_rate_cents,
            earn_rate_percent=self.settings.earn_rate_percent,
        )
        self.sync = SyncReconciler(self.store, self.monitor)
        self.products = ProductCatalog(self.store)
        self.categories = CategoryCatalog(self.store)
        self.customers = CustomerDirectory(self.store)
        self.users = UserDirectory(self.store)
        self.reports = SalesReport(self.store, top_limit=self.settings.top_products)
        self._unsubscribe = self.sync.attach()
        self._log = structlog.get_logger().bind(component="terminal")

    @classmethod
    def from_env(cls, online: bool = True) -> "Terminal":
        return cls(Settings.from_env(), online=online)

    async def start(self) -> int:
        """Seed if configured, then drain any orders queued before the last shutdown.

        Returns the number of orders synced.
        """
        if self.settings.seed:
            await seed_store(self.store)
        synced = 0
        if self.monitor.is_online:
            try:
                synced = await self.sync.sync_pending_orders()
            except PosError as e:
                self._log.error("sync_failed", error=str(e))
        self._log.info(
            "terminal_started",
            store=type(self.store).__name__,
            online=self.monitor.is_online,
            synced=synced,
        )
        return synced

    def close(self) -> None:
        self._unsubscribe()
