"""Cache layer: TTL get-or-compute over a key-value store with stale-serve."""
from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, Generic, Optional, Protocol, Tuple, TypeVar

from .errors import CacheBackendError, UpstreamError
from .health import DEFAULT_NAMESPACE, HealthRegistry


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_STALE_TTL = 24 * 3600


class KeyValueStore(Protocol):
    """Backend consumed by :class:`CacheLayer`."""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        ...


class MemoryStore:
    """A lightweight TTL store emulating Redis behaviour for tests and local runs."""

    def __init__(self, time_func: Callable[[], float] = time.monotonic) -> None:
        self._time_func = time_func
        self._storage: Dict[str, Tuple[float, bytes]] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            item = self._storage.get(key)
            if not item:
                return None
            expires_at, value = item
            if expires_at <= self._time_func():
                self._storage.pop(key, None)
                return None
            return value

    def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        with self._lock:
            self._storage[key] = (self._time_func() + ttl_seconds, value)

    def clear(self) -> None:
        with self._lock:
            self._storage.clear()


class DjangoCacheStore:
    """Adapter over a Django cache backend (LocMem, Redis, Memcached...)."""

    def __init__(self, cache: Any) -> None:
        self._cache = cache

    def get(self, key: str) -> Optional[bytes]:
        try:
            return self._cache.get(key)
        except Exception as exc:  # noqa: BLE001 - any backend failure means unreachable
            raise CacheBackendError(f"cache get failed: {exc}") from exc

    def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        try:
            self._cache.set(key, value, timeout=ttl_seconds)
        except Exception as exc:  # noqa: BLE001 - any backend failure means unreachable
            raise CacheBackendError(f"cache set failed: {exc}") from exc


class CacheStatus(str, Enum):
    HIT = "hit"
    MISS = "miss"
    STALE = "stale"


@dataclass(frozen=True)
class CacheEntry:
    """Stored value plus the bookkeeping needed to judge its freshness."""

    key: str
    payload: Dict[str, Any]
    stored_at: float
    ttl_seconds: int

    def expires_at(self) -> float:
        return self.stored_at + self.ttl_seconds

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at()

    def to_bytes(self) -> bytes:
        return json.dumps(asdict(self), separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_bytes(cls, raw: bytes) -> "CacheEntry":
        data = json.loads(raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw)
        return cls(
            key=str(data["key"]),
            payload=dict(data["payload"]),
            stored_at=float(data["stored_at"]),
            ttl_seconds=int(data["ttl_seconds"]),
        )


@dataclass(frozen=True)
class CacheResult(Generic[T]):
    value: T
    status: CacheStatus
    stored_at: Optional[float] = None
    error: Optional[UpstreamError] = None

    @property
    def is_stale(self) -> bool:
        return self.status == CacheStatus.STALE


class CacheLayer:
    """Get-or-compute with TTL and stale-serve on upstream failure.

    Entries are written to the store with ``ttl + stale_ttl`` so that an
    expired entry stays readable for fallback; freshness is judged from the
    entry's own ``stored_at``/``ttl_seconds``. A failing store degrades to
    computing without caching.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        stale_ttl: int = DEFAULT_STALE_TTL,
        time_func: Callable[[], float] = time.time,
        health: Optional[HealthRegistry] = None,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self._store = store
        self.namespace = namespace
        self._stale_ttl = stale_ttl
        self._time_func = time_func
        self._health = health

    def get_or_compute(
        self,
        key: str,
        ttl_seconds: int,
        compute: Callable[[], T],
        *,
        encode: Callable[[T], Dict[str, Any]],
        decode: Callable[[Dict[str, Any]], T],
        force_refresh: bool = False,
    ) -> CacheResult[T]:
        entry: Optional[CacheEntry] = None
        if not force_refresh:
            entry = self._read(key)
            if entry is not None and entry.is_fresh(self._time_func()):
                value = self._decode(entry, decode)
                if value is not None:
                    self._record(CacheStatus.HIT)
                    return CacheResult(value, CacheStatus.HIT, stored_at=entry.stored_at)

        try:
            value = compute()
        except UpstreamError as exc:
            if entry is None:
                entry = self._read(key)
            stale = self._decode(entry, decode) if entry is not None else None
            if stale is None:
                raise
            logger.warning("Serving stale %s after %s: %s", key, exc.kind, exc)
            self._record(CacheStatus.STALE)
            return CacheResult(stale, CacheStatus.STALE, stored_at=entry.stored_at, error=exc)

        self._write(key, encode(value), ttl_seconds)
        self._record(CacheStatus.MISS)
        return CacheResult(value, CacheStatus.MISS, stored_at=self._time_func())

    def peek(self, key: str, decode: Callable[[Dict[str, Any]], T]) -> Optional[T]:
        """Return a fresh cached value without computing anything."""
        entry = self._read(key)
        if entry is None or not entry.is_fresh(self._time_func()):
            return None
        value = self._decode(entry, decode)
        if value is not None:
            self._record(CacheStatus.HIT)
        return value

    # Helpers ------------------------------------------------------------
    def _read(self, key: str) -> Optional[CacheEntry]:
        try:
            raw = self._store.get(key)
        except CacheBackendError as exc:
            logger.warning("Cache backend unavailable on read of %s: %s", key, exc)
            self._record_backend_error()
            return None
        if raw is None:
            return None
        try:
            entry = CacheEntry.from_bytes(raw)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
            return None
        if entry.key != key:
            return None
        return entry

    def _write(self, key: str, payload: Dict[str, Any], ttl_seconds: int) -> None:
        entry = CacheEntry(key=key, payload=payload, stored_at=self._time_func(), ttl_seconds=ttl_seconds)
        try:
            self._store.put(key, entry.to_bytes(), ttl_seconds + self._stale_ttl)
        except CacheBackendError as exc:
            logger.warning("Cache backend unavailable on write of %s: %s", key, exc)
            self._record_backend_error()

    def _decode(self, entry: CacheEntry, decode: Callable[[Dict[str, Any]], T]) -> Optional[T]:
        try:
            return decode(entry.payload)
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding cache entry %s with unexpected payload: %s", entry.key, exc)
            return None

    def _record(self, status: CacheStatus) -> None:
        if self._health is not None:
            self._health.record_cache(status.value, self.namespace)

    def _record_backend_error(self) -> None:
        if self._health is not None:
            self._health.record_cache_backend_error(self.namespace)


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "DjangoCacheStore",
    "CacheStatus",
    "CacheEntry",
    "CacheResult",
    "CacheLayer",
]
