"""Reverse geocoding with its own cache key and an "Unknown" fallback."""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel

from .cache import CacheLayer, CacheResult
from .entities import UNKNOWN, GeocodeResult
from .keys import KeyPolicy, geocode_key
from .providers.base import UpstreamClient


logger = logging.getLogger(__name__)

DEFAULT_GEOCODE_TTL = 3600


class _Address(BaseModel):
    city: Optional[str] = None
    town: Optional[str] = None
    village: Optional[str] = None
    county: Optional[str] = None
    country: Optional[str] = None


class NominatimReverse(BaseModel):
    address: Optional[_Address] = None


class NominatimClient(UpstreamClient):
    """OpenStreetMap Nominatim ``/reverse`` lookup."""

    name = "nominatim"
    base_url = "https://nominatim.openstreetmap.org/reverse"

    def reverse(self, latitude: float, longitude: float) -> GeocodeResult:
        params = {
            "format": "json",
            "lat": latitude,
            "lon": longitude,
            "zoom": 10,
            "addressdetails": 1,
        }
        response = self._request("GET", self.base_url, params=params)
        payload = self._parse(NominatimReverse, self._json(response))
        address = payload.address
        if address is None:
            return GeocodeResult()
        city = address.city or address.town or address.village or address.county or UNKNOWN
        return GeocodeResult(city=city, country=address.country or UNKNOWN)


class GeocodeResolver:
    """Resolve coordinates to a city/country label; never raises."""

    def __init__(
        self,
        client: NominatimClient,
        cache: CacheLayer,
        *,
        ttl: int = DEFAULT_GEOCODE_TTL,
        key_policy: KeyPolicy = KeyPolicy(),
    ) -> None:
        self._client = client
        self._cache = cache
        self._ttl = ttl
        self._key_policy = key_policy

    def lookup(self, latitude: float, longitude: float, *, force_refresh: bool = False) -> Optional[CacheResult[GeocodeResult]]:
        """Return the cached or freshly fetched label, or ``None`` on failure."""
        key = geocode_key(latitude, longitude, self._key_policy)
        try:
            return self._cache.get_or_compute(
                key,
                self._ttl,
                lambda: self._client.reverse(latitude, longitude),
                encode=GeocodeResult.to_dict,
                decode=GeocodeResult.from_dict,
                force_refresh=force_refresh,
            )
        except Exception as exc:  # noqa: BLE001 - location labels are cosmetic
            logger.warning("Reverse geocoding failed for %s: %s", key, exc)
            return None

    def cached(self, latitude: float, longitude: float) -> Optional[GeocodeResult]:
        """Fresh cached label, without contacting Nominatim."""
        key = geocode_key(latitude, longitude, self._key_policy)
        try:
            return self._cache.peek(key, GeocodeResult.from_dict)
        except Exception as exc:  # noqa: BLE001 - location labels are cosmetic
            logger.warning("Cached geocode read failed for %s: %s", key, exc)
            return None

    def resolve(self, latitude: float, longitude: float, *, force_refresh: bool = False) -> GeocodeResult:
        result = self.lookup(latitude, longitude, force_refresh=force_refresh)
        return result.value if result is not None else GeocodeResult()


__all__ = ["NominatimClient", "GeocodeResolver", "NominatimReverse", "DEFAULT_GEOCODE_TTL"]
