"""In-memory health registry exposed by the health endpoint.

Counters live in process memory and reset on restart; they describe how the
running worker has been served by its providers and its cache.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Optional

DEFAULT_NAMESPACE = "weather"


@dataclass(frozen=True)
class CacheStats:
    """Simple container for cache related counters."""

    hits: int = 0
    misses: int = 0
    stale: int = 0
    backend_errors: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "stale": self.stale,
            "backendErrors": self.backend_errors,
        }


class HealthRegistry:
    """Stores provider error counters and cache stats per cache namespace."""

    def __init__(self) -> None:
        self._provider_errors: Dict[str, Dict[str, int]] = {}
        self._provider_last_success: Dict[str, str] = {}
        self._cache: Dict[str, Dict[str, int]] = {}
        self._lock = Lock()

    # -- Providers ----------------------------------------------------------
    def record_provider_error(self, provider: str, kind: str) -> None:
        if not provider:
            raise ValueError("provider must be provided")
        with self._lock:
            counters = self._provider_errors.setdefault(provider, {})
            counters[kind] = counters.get(kind, 0) + 1

    def record_provider_success(self, provider: str, when: Optional[datetime] = None) -> None:
        when = when or datetime.now(timezone.utc)
        with self._lock:
            self._provider_last_success[provider] = self._format_datetime(when)

    # -- Cache stats --------------------------------------------------------
    def record_cache(self, status: str, namespace: str = DEFAULT_NAMESPACE) -> None:
        field = {"hit": "hits", "miss": "misses", "stale": "stale"}.get(status)
        if field is None:
            raise ValueError(f"unknown cache status {status!r}")
        self._bump(namespace, field)

    def record_cache_backend_error(self, namespace: str = DEFAULT_NAMESPACE) -> None:
        self._bump(namespace, "backend_errors")

    def cache_stats(self, namespace: str = DEFAULT_NAMESPACE) -> CacheStats:
        with self._lock:
            return CacheStats(**self._cache.get(namespace, {}))

    def _bump(self, namespace: str, field: str) -> None:
        with self._lock:
            counters = self._cache.setdefault(namespace, {})
            counters[field] = counters.get(field, 0) + 1

    # -- Snapshot -----------------------------------------------------------
    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            providers = {name: dict(counters) for name, counters in self._provider_errors.items()}
            last_success = dict(self._provider_last_success)
            cache = {name: CacheStats(**counters).as_dict() for name, counters in sorted(self._cache.items())}
        return {"providers": providers, "lastSuccess": last_success, "cache": cache}

    def reset(self) -> None:
        with self._lock:
            self._provider_errors.clear()
            self._provider_last_success.clear()
            self._cache.clear()

    @staticmethod
    def _format_datetime(value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()


__all__ = ["CacheStats", "HealthRegistry", "DEFAULT_NAMESPACE"]
