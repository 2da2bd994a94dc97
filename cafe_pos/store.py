"""Persistent store over named collections.

A store maps collection names to ordered sequences of dict records. Reading a
collection that was never written yields an empty list. ``commit`` writes
several collections as one unit: either every collection in the batch becomes
visible or none does.

Callers that read, modify and write back hold ``store.lock`` for the whole
cycle; the store itself only guarantees per-call atomicity.
"""

import asyncio
import copy
import json
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

import structlog

from .errors import PersistenceError

USERS = "users"
PRODUCTS = "products"
CATEGORIES = "categories"
CUSTOMERS = "customers"
ORDERS = "orders"
OFFLINE_ORDERS = "offline_orders"
SEEDED = "seeded"

COLLECTIONS = (USERS, PRODUCTS, CATEGORIES, CUSTOMERS, ORDERS, OFFLINE_ORDERS, SEEDED)

Records = list[dict[str, Any]]
T = TypeVar("T")

logger = structlog.get_logger()


class Store(ABC):
    """Async data-access contract shared by every backend."""

    def __init__(self) -> None:
        self.lock = asyncio.Lock()

    @abstractmethod
    async def get(self, collection: str) -> Records:
        """Return a copy of every record in ``collection``."""

    @abstractmethod
    async def set(self, collection: str, records: Records) -> None:
        """Replace the contents of ``collection``."""

    @abstractmethod
    async def commit(self, changes: Mapping[str, Records]) -> None:
        """Replace several collections atomically."""

    async def load(self, collection: str, factory: Callable[[dict], T]) -> list[T]:
        """Read ``collection`` and build a model from each record."""
        return [factory(record) for record in await self.get(collection)]

    async def save(self, collection: str, items: Iterable[Any]) -> None:
        """Write models back through their ``to_record``."""
        await self.set(collection, [item.to_record() for item in items])


class MemoryStore(Store):
    """In-process store, used by tests and by terminals with no disk path.

    ``latency`` adds an awaited delay to every call so tests can exercise
    interleaving at the I/O boundary.
    """

    def __init__(self, initial: Mapping[str, Records] | None = None, latency: float = 0.0):
        super().__init__()
        self._data: dict[str, Records] = copy.deepcopy(dict(initial or {}))
        self._latency = latency

    async def get(self, collection: str) -> Records:
        await asyncio.sleep(self._latency)
        return copy.deepcopy(self._data.get(collection, []))

    async def set(self, collection: str, records: Records) -> None:
        await asyncio.sleep(self._latency)
        self._data[collection] = copy.deepcopy(list(records))

    async def commit(self, changes: Mapping[str, Records]) -> None:
        await asyncio.sleep(self._latency)
        staged = {name: copy.deepcopy(list(records)) for name, records in changes.items()}
        self._data.update(staged)


class JsonFileStore(Store):
    """Store backed by a single JSON document on disk.

    Every write replaces the whole file through a temporary sibling and
    ``os.replace``, so a crash mid-write leaves the previous document intact.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self._log = logger.bind(component="store", path=path)

    def _read_document(self) -> dict[str, Records]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as fh:
                document = json.load(fh)
        except (OSError, ValueError) as e:
            raise PersistenceError("read", e) from e
        if not isinstance(document, dict):
            raise PersistenceError("read", ValueError("store document is not an object"))
        return document

    def _write_document(self, document: dict[str, Records]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".pos-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError("write", e) from e

    def _update(self, changes: Mapping[str, Records]) -> None:
        document = self._read_document()
        for name, records in changes.items():
            document[name] = list(records)
        self._write_document(document)
        self._log.debug("store_written", collections=sorted(changes))

    async def get(self, collection: str) -> Records:
        document = await asyncio.to_thread(self._read_document)
        return list(document.get(collection, []))

    async def set(self, collection: str, records: Records) -> None:
        await asyncio.to_thread(self._update, {collection: records})

    async def commit(self, changes: Mapping[str, Records]) -> None:
        await asyncio.to_thread(self._update, dict(changes))
