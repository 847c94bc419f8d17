"""REST API views for weather, location, summary and health information."""
from __future__ import annotations

from functools import lru_cache

from django.conf import settings
from django.core.cache import caches
from django.http import HttpResponse
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from wxcore.cache import CacheLayer, DjangoCacheStore
from wxcore.config import ServiceConfig
from wxcore.geocode import GeocodeResolver, NominatimClient
from wxcore.health import HealthRegistry
from wxcore.providers import build_providers
from wxcore.services.coordinator import ErrorResponse, RequestCoordinator
from wxcore.summary import summarize

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
}


@lru_cache(maxsize=1)
def get_health_registry() -> HealthRegistry:
    return HealthRegistry()


@lru_cache(maxsize=1)
def get_coordinator() -> RequestCoordinator:
    config = ServiceConfig.from_settings(settings)
    health = get_health_registry()
    store = DjangoCacheStore(caches[settings.WEATHER_CACHE_ALIAS])
    cache = CacheLayer(store, stale_ttl=config.stale_ttl, health=health, namespace="weather")
    geocode_cache = CacheLayer(store, stale_ttl=config.stale_ttl, health=health, namespace="geocode")
    request_config = config.request_config()
    geocoder = GeocodeResolver(
        NominatimClient(request_config=request_config),
        geocode_cache,
        ttl=config.geocode_ttl,
        key_policy=config.key_policy(),
    )
    return RequestCoordinator(
        providers=build_providers(request_config),
        cache=cache,
        geocoder=geocoder,
        config=config,
        health=health,
    )


def _json(result) -> Response:
    return Response(result.to_dict(), status=result.status_code, headers=NO_STORE_HEADERS)


class WeatherView(APIView):
    """Normalized weather snapshot for the requested coordinates."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):  # noqa: D401
        return _json(get_coordinator().handle_query(request.query_params))


class LocationView(APIView):
    """City/country label for the requested coordinates."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):  # noqa: D401
        return _json(get_coordinator().locate(request.query_params))


class SummaryView(APIView):
    """Plain-text summary of the current conditions."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):  # noqa: D401
        result = get_coordinator().handle_query(request.query_params)
        if isinstance(result, ErrorResponse):
            return _json(result)
        response = HttpResponse(summarize(result.snapshot), content_type="text/plain; charset=utf-8")
        for name, value in NO_STORE_HEADERS.items():
            response[name] = value
        return response


class HealthView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):  # noqa: D401
        payload = get_health_registry().snapshot()
        payload["configuredProviders"] = list(get_coordinator().provider_names)
        return Response(payload, headers=NO_STORE_HEADERS)
