"""Offline sync reconciler.

Drains the pending-order queue once connectivity returns: replays each
order's point adjustment, appends it to the synced collection and clears the
queue, all in one commit. If the commit fails the queue is kept for the next
attempt (at-least-once); order ids already present in the synced collection
are skipped so a retried pass never double-applies an order.
"""

from dataclasses import replace

import structlog

from .connectivity import Connectivity, ConnectivityMonitor
from .errors import PosError
from .models import Customer, Order
from .store import CUSTOMERS, OFFLINE_ORDERS, ORDERS, Store

logger = structlog.get_logger()


class SyncReconciler:
    """Merges pending orders into the synced collection exactly once."""

    def __init__(self, store: Store, monitor: ConnectivityMonitor):
        self._store = store
        self._monitor = monitor
        self._running = False
        self._log = logger.bind(component="sync")

    @property
    def running(self) -> bool:
        return self._running

    async def pending_count(self) -> int:
        """Number of orders waiting in the offline queue."""
        return len(await self._store.get(OFFLINE_ORDERS))

    async def sync_pending_orders(self) -> int:
        """Run one sync pass.

        Returns:
            The number of orders merged into the synced collection. 0 when
            offline, when the queue is empty, or when another pass is already
            running.

        Raises:
            PersistenceError: the merge could not be written; the queue is
                left intact.
            ValidationError: a queued record is malformed; nothing is merged.
        """
        if not self._monitor.is_online:
            return 0
        if self._running:
            self._log.info("sync_already_running")
            return 0

        self._running = True
        try:
            async with self._store.lock:
                return await self._merge()
        finally:
            self._running = False

    async def _merge(self) -> int:
        queue = await self._store.load(OFFLINE_ORDERS, Order.from_record)
        if not queue:
            return 0

        synced = await self._store.get(ORDERS)
        customers = {c.id: c for c in await self._store.load(CUSTOMERS, Customer.from_record)}
        seen = {record["id"] for record in synced}
        merged = 0

        for order in queue:
            if order.id in seen:
                self._log.warning("sync_duplicate_skipped", order_id=order.id)
                continue
            customer = customers.get(order.customer_id) if order.customer_id else None
            if customer is not None:
                balance = customer.loyalty_points + order.points_delta()
                if balance < 0:
                    self._log.warning(
                        "sync_balance_clamped",
                        order_id=order.id,
                        customer_id=customer.id,
                        balance=balance,
                    )
                    balance = 0
                customers[customer.id] = replace(customer, loyalty_points=balance)
            elif order.customer_id:
                self._log.warning(
                    "sync_customer_missing", order_id=order.id, customer_id=order.customer_id
                )
            synced.append(order.to_record())
            seen.add(order.id)
            merged += 1

        await self._store.commit(
            {
                CUSTOMERS: [c.to_record() for c in customers.values()],
                ORDERS: synced,
                OFFLINE_ORDERS: [],
            }
        )
        self._log.info("sync_completed", synced=merged, drained=len(queue))
        return merged

    async def on_connectivity_change(self, state: Connectivity) -> None:
        """Transition handler: sync when coming back online, never raising sync errors."""
        if state != Connectivity.ONLINE:
            return
        try:
            await self.sync_pending_orders()
        except PosError as e:
            self._log.error("sync_failed", error=str(e))

    def attach(self, monitor: ConnectivityMonitor | None = None):
        """Subscribe to connectivity transitions. Returns the unsubscribe function."""
        return (monitor or self._monitor).subscribe(self.on_connectivity_change)
