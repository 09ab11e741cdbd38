"""
Key-value storage for the booking app

Every collection lives under one string key as a JSON blob, the same way a
browser's localStorage holds it. Accessors go through a Repository, which
decodes the blob, hands it out for in-place changes and writes it back whole.
"""

import asyncio
import json
import logging
import os
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

T = TypeVar("T")

CREDENTIALS = "credentials"
CURRENT_USER = "currentUser"
BOOKINGS = "bookings.json"
PAYMENT_METHODS = "paymentMethods.json"
RECENT_SEARCHES = "recentSearches.json"

# Shape returned for a key that was never written
EMPTY_SHAPES: Dict[str, Any] = {
    CREDENTIALS: [],
    CURRENT_USER: None,
    BOOKINGS: [],
    PAYMENT_METHODS: [],
    RECENT_SEARCHES: {},
}

# Base delays in seconds, scaled by LatencyPolicy.scale
DEFAULT_DELAYS: Dict[str, float] = {
    "register": 1.0,
    "sign_in": 1.0,
    "get_current_user": 0.2,
    "sign_out": 0.2,
    "get_user_bookings": 1.0,
    "create_booking": 1.5,
    "cancel_booking": 1.0,
    "get_booking": 0.5,
    "add_payment_method": 1.0,
    "get_user_payment_methods": 0.5,
    "get_payment_method": 0.3,
    "update_payment_method": 0.8,
    "remove_payment_method": 0.8,
    "set_default_payment_method": 0.5,
    "get_search_history": 0.5,
    "save_search_history": 0.0,
}


# --------- Stores ---------
class KeyValueStore:
    """Synchronous string-keyed store holding JSON text."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class FileStore(KeyValueStore):
    """All keys in a single JSON file, replaced atomically on every write."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._io_lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _dump(self, data: Dict[str, str]) -> None:
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        os.replace(tmp, self.path)

    def get(self, key: str) -> Optional[str]:
        with self._io_lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._io_lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def delete(self, key: str) -> None:
        with self._io_lock:
            data = self._load()
            if data.pop(key, None) is not None:
                self._dump(data)


class MongoStore(KeyValueStore):
    """One document per key: {"_id": key, "value": json_text}."""

    collection_name = "kv_store"

    def __init__(self, database) -> None:
        self.collection = database[self.collection_name]

    def get(self, key: str) -> Optional[str]:
        doc = self.collection.find_one({"_id": key})
        return doc["value"] if doc else None

    def set(self, key: str, value: str) -> None:
        self.collection.replace_one({"_id": key}, {"_id": key, "value": value}, upsert=True)

    def delete(self, key: str) -> None:
        self.collection.delete_one({"_id": key})


# --------- Latency ---------
class LatencyPolicy:
    """Artificial delay per operation, standing in for a network round trip."""

    def __init__(self, scale: float = 1.0, delays: Optional[Dict[str, float]] = None) -> None:
        self.scale = scale
        self.delays = dict(DEFAULT_DELAYS)
        if delays:
            self.delays.update(delays)

    def seconds(self, operation: str) -> float:
        return self.delays.get(operation, 0.0) * self.scale

    async def pause(self, operation: str) -> None:
        seconds = self.seconds(operation)
        if seconds > 0:
            await asyncio.sleep(seconds)


# --------- Repository ---------
class Repository:
    def __init__(
        self,
        store: Optional[KeyValueStore],
        latency: Optional[LatencyPolicy] = None,
        seed_demo_bookings: bool = True,
    ) -> None:
        self.store = store
        self.latency = latency or LatencyPolicy()
        self.seed_demo_bookings = seed_demo_bookings
        self._locks: Dict[str, threading.RLock] = {key: threading.RLock() for key in EMPTY_SHAPES}

    @property
    def available(self) -> bool:
        return self.store is not None

    def _empty(self, key: str) -> Any:
        shape = EMPTY_SHAPES.get(key, [])
        return type(shape)() if shape is not None else None

    def read(self, key: str) -> Any:
        if self.store is None:
            return self._empty(key)
        raw = self.store.get(key)
        if raw is None:
            return self._empty(key)
        return json.loads(raw)

    def write(self, key: str, value: Any) -> None:
        if self.store is None:
            return
        self.store.set(key, json.dumps(value))

    def remove(self, key: str) -> None:
        if self.store is None:
            return
        self.store.delete(key)

    @contextmanager
    def collection(self, key: str) -> Iterator[Any]:
        """Read a collection, yield it for changes, write it back on clean exit."""
        lock = self._locks.setdefault(key, threading.RLock())
        with lock:
            value = self.read(key)
            yield value
            self.write(key, value)

    async def pause(self, operation: str) -> None:
        await self.latency.pause(operation)

    async def run(self, func: Callable[..., T], *args: Any) -> T:
        """Run blocking store work in a worker thread, off the event loop."""
        return await asyncio.to_thread(func, *args)


def build_store(backend: Optional[str] = None) -> Optional[KeyValueStore]:
    backend = (backend or os.getenv("STORAGE_BACKEND", "file")).lower()
    if backend == "none":
        return None
    if backend == "memory":
        return MemoryStore()
    if backend == "mongo":
        from pymongo import MongoClient

        url = os.getenv("DATABASE_URL")
        name = os.getenv("DATABASE_NAME")
        if not url or not name:
            raise RuntimeError("DATABASE_URL and DATABASE_NAME must be set for the mongo backend")
        client = MongoClient(url)
        return MongoStore(client[name])
    if backend == "file":
        return FileStore(os.getenv("STORAGE_PATH", "storage.json"))
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")


def build_repository() -> Repository:
    store = build_store()
    latency = LatencyPolicy(scale=float(os.getenv("SIMULATED_LATENCY", "1")))
    seed = os.getenv("SEED_DEMO_BOOKINGS", "1") not in ("0", "false", "False")
    if store is None:
        logger.warning("Storage backend disabled; reads return empty results and writes are refused")
    else:
        logger.info("Using %s storage", type(store).__name__)
    return Repository(store, latency, seed_demo_bookings=seed)
