"""Request coordinator: validate, cache, fetch, normalize, respond."""
from __future__ import annotations

import logging
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..cache import CacheLayer, CacheResult, CacheStatus
from ..config import ServiceConfig
from ..entities import GeocodeResult, RequestParams, WeatherSnapshot
from ..errors import (
    InvalidParams,
    UpstreamError,
    UpstreamMalformed,
    UpstreamRateLimited,
    UpstreamUnavailable,
)
from ..geocode import GeocodeResolver
from ..health import HealthRegistry
from ..keys import weather_key
from ..normalizer import normalize
from ..params import build_params, parse_location, parse_flag
from ..providers.base import WeatherProvider


logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    InvalidParams.kind: 400,
    UpstreamRateLimited.kind: 503,
    UpstreamUnavailable.kind: 502,
    UpstreamMalformed.kind: 502,
}


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _iso_epoch(value: Optional[float]) -> Optional[str]:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ResponseMeta:
    processed_ms: int
    timestamp: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    units: Optional[str] = None
    provider: Optional[str] = None
    cache_status: Optional[str] = None
    stored_at: Optional[str] = None
    degraded_reason: Optional[str] = None
    location: Optional[GeocodeResult] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"processedMs": self.processed_ms, "timestamp": self.timestamp}
        if self.latitude is not None and self.longitude is not None:
            payload["coordinates"] = {"lat": self.latitude, "lon": self.longitude}
        optional = {
            "timezone": self.timezone,
            "units": self.units,
            "provider": self.provider,
            "cacheStatus": self.cache_status,
            "storedAt": self.stored_at,
            "degradedReason": self.degraded_reason,
        }
        payload.update({name: value for name, value in optional.items() if value is not None})
        if self.cache_status is not None:
            payload["stale"] = self.cache_status == CacheStatus.STALE.value
        if self.location is not None:
            payload["location"] = self.location.to_dict()
        return payload


@dataclass(frozen=True)
class WeatherResponse:
    snapshot: WeatherSnapshot
    meta: ResponseMeta
    status_code: int = 200

    def to_dict(self) -> Dict[str, Any]:
        payload = self.snapshot.to_dict()
        payload["meta"] = self.meta.to_dict()
        return payload


@dataclass(frozen=True)
class LocationResponse:
    location: GeocodeResult
    meta: ResponseMeta
    status_code: int = 200

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = self.location.to_dict()
        payload["meta"] = self.meta.to_dict()
        return payload


@dataclass(frozen=True)
class ErrorResponse:
    error: str
    kind: str
    status_code: int
    meta: ResponseMeta
    location: GeocodeResult = field(default_factory=GeocodeResult)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error,
            "kind": self.kind,
            "meta": self.meta.to_dict(),
            "city": self.location.city,
            "country": self.location.country,
        }


CoordinatorResult = Union[WeatherResponse, ErrorResponse]


class RequestCoordinator:
    """Entry point for weather and location requests.

    The weather fetch runs in the calling thread. A fresh cached location
    label is used directly; otherwise the reverse geocode is submitted to
    ``executor`` and awaited for at most ``geocode_wait`` seconds, or not at
    all when the weather itself was a cache hit.
    """

    def __init__(
        self,
        *,
        providers: Mapping[str, WeatherProvider],
        cache: CacheLayer,
        geocoder: Optional[GeocodeResolver] = None,
        config: Optional[ServiceConfig] = None,
        health: Optional[HealthRegistry] = None,
        executor: Optional[Executor] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.config = config or ServiceConfig()
        if self.config.default_provider not in providers:
            raise ValueError(f"default provider {self.config.default_provider!r} is not configured")
        self._providers = dict(providers)
        self._cache = cache
        self._geocoder = geocoder
        self._health = health
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="wx-geocode"
        )
        self._clock = clock
        self._key_policy = self.config.key_policy()

    @property
    def provider_names(self):
        return tuple(self._providers)

    # Public API ---------------------------------------------------------
    def parse(self, query: Mapping[str, Any]) -> RequestParams:
        return build_params(query, self.config, self._providers)

    def handle_query(self, query: Mapping[str, Any]) -> CoordinatorResult:
        started = self._clock()
        try:
            params = self.parse(query)
        except InvalidParams as exc:
            return self._error(exc, started)
        return self.handle(params, started=started)

    def handle(self, params: RequestParams, *, started: Optional[float] = None) -> CoordinatorResult:
        """Return a normalized snapshot or a structured error; never raises."""
        started = self._clock() if started is None else started
        location = self._cached_location(params)
        location_future = self._submit_geocode(params) if location is None else None
        try:
            result = self._fetch_snapshot(params)
        except UpstreamError as exc:
            self._record_error(exc)
            location = location or self._await_location(location_future, params, required=True)
            logger.error("No weather for %s via %s: %s", weather_key(params, self._key_policy), params.provider, exc)
            return self._error(exc, started, params=params, location=location)
        except Exception:  # noqa: BLE001 - the boundary must not raise
            logger.exception("Unexpected failure handling %s", params)
            return ErrorResponse(
                error="internal error",
                kind="internal_error",
                status_code=500,
                meta=self._meta(started, params=params),
                location=location or self._await_location(location_future, params, required=True),
            )

        if result.error is not None:
            self._record_error(result.error)
        if location is None:
            # A hit must not wait on Nominatim; the worker still fills the cache.
            wait = 0.0 if result.status == CacheStatus.HIT else None
            location = self._await_location(location_future, params, timeout=wait)
        meta = self._meta(
            started,
            params=params,
            cache_status=result.status.value,
            stored_at=_iso_epoch(result.stored_at),
            degraded_reason=result.error.kind if result.error is not None else None,
            location=location,
        )
        return WeatherResponse(snapshot=result.value, meta=meta)

    def locate(self, query: Mapping[str, Any]) -> Union[LocationResponse, ErrorResponse]:
        started = self._clock()
        try:
            latitude, longitude = parse_location(query)
        except InvalidParams as exc:
            return self._error(exc, started)
        lookup = None
        if self._geocoder is not None:
            lookup = self._geocoder.lookup(latitude, longitude, force_refresh=parse_flag(query, "noCache", "forceRefresh"))
        meta = self._meta(
            started,
            latitude=latitude,
            longitude=longitude,
            cache_status=lookup.status.value if lookup is not None else None,
        )
        return LocationResponse(location=lookup.value if lookup is not None else GeocodeResult(), meta=meta)

    # Helpers ------------------------------------------------------------
    def _fetch_snapshot(self, params: RequestParams) -> CacheResult[WeatherSnapshot]:
        provider = self._providers[params.provider]

        def compute() -> WeatherSnapshot:
            raw = provider.fetch_forecast(
                params.latitude, params.longitude, params.timezone, self.config.forecast_days
            )
            try:
                snapshot = normalize(
                    raw,
                    params.units,
                    params.timezone,
                    hours=self.config.hourly_limit,
                    days=self.config.daily_limit,
                )
            except (ValueError, TypeError, KeyError, IndexError, AttributeError) as exc:
                logger.error("Malformed %s data could not be normalized: %s", provider.name, exc)
                raise UpstreamMalformed(f"could not normalize {provider.name} data", provider=provider.name) from exc
            if self._health is not None:
                self._health.record_provider_success(provider.name)
            return snapshot

        return self._cache.get_or_compute(
            weather_key(params, self._key_policy),
            self.config.weather_ttl,
            compute,
            encode=WeatherSnapshot.to_dict,
            decode=WeatherSnapshot.from_dict,
            force_refresh=params.force_refresh,
        )

    def _cached_location(self, params: RequestParams) -> Optional[GeocodeResult]:
        if self._geocoder is None or not self.config.resolve_location:
            return None
        return self._geocoder.cached(params.latitude, params.longitude)

    def _submit_geocode(self, params: RequestParams) -> Optional[Future]:
        if self._geocoder is None or not self.config.resolve_location:
            return None
        return self._executor.submit(self._geocoder.resolve, params.latitude, params.longitude)

    def _await_location(
        self,
        future: Optional[Future],
        params: RequestParams,
        *,
        required: bool = False,
        timeout: Optional[float] = None,
    ) -> Optional[GeocodeResult]:
        if future is None:
            return GeocodeResult() if required else None
        wait = self.config.geocode_wait if timeout is None else timeout
        try:
            return future.result(timeout=wait)
        except FutureTimeout:
            if wait:
                logger.warning("Reverse geocoding for %s,%s timed out", params.latitude, params.longitude)
            return GeocodeResult()

    def _record_error(self, exc: UpstreamError) -> None:
        if self._health is not None:
            self._health.record_provider_error(exc.provider, exc.kind)

    def _meta(
        self,
        started: float,
        *,
        params: Optional[RequestParams] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        **extra: Any,
    ) -> ResponseMeta:
        if params is not None:
            extra.update(
                latitude=params.latitude,
                longitude=params.longitude,
                timezone=params.timezone,
                units=params.units.value,
                provider=params.provider,
            )
        else:
            extra.update(latitude=latitude, longitude=longitude)
        elapsed = int(round((self._clock() - started) * 1000))
        return ResponseMeta(processed_ms=max(elapsed, 0), timestamp=_iso_now(), **extra)

    def _error(
        self,
        exc: Exception,
        started: float,
        *,
        params: Optional[RequestParams] = None,
        location: Optional[GeocodeResult] = None,
    ) -> ErrorResponse:
        kind = getattr(exc, "kind", "error")
        if params is not None:
            meta = self._meta(started, params=params, cache_status=CacheStatus.MISS.value)
        else:
            meta = self._meta(started)
        return ErrorResponse(
            error=str(exc),
            kind=kind,
            status_code=STATUS_BY_KIND.get(kind, 503),
            meta=meta,
            location=location or GeocodeResult(),
        )


__all__ = [
    "RequestCoordinator",
    "ResponseMeta",
    "WeatherResponse",
    "LocationResponse",
    "ErrorResponse",
    "CoordinatorResult",
    "STATUS_BY_KIND",
]
