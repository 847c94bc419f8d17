"""Provider adapters keyed by their public name."""
from __future__ import annotations

from typing import Dict, Optional, Type

import requests

from .base import ProviderRawResponse, RequestConfig, WeatherProvider
from .metno import MetNoProvider
from .openmeteo import OpenMeteoProvider

PROVIDERS: Dict[str, Type[WeatherProvider]] = {
    MetNoProvider.name: MetNoProvider,
    OpenMeteoProvider.name: OpenMeteoProvider,
}


def build_providers(
    request_config: Optional[RequestConfig] = None,
    session: Optional[requests.Session] = None,
) -> Dict[str, WeatherProvider]:
    return {name: cls(session=session, request_config=request_config) for name, cls in PROVIDERS.items()}


__all__ = [
    "PROVIDERS",
    "build_providers",
    "ProviderRawResponse",
    "RequestConfig",
    "WeatherProvider",
    "MetNoProvider",
    "OpenMeteoProvider",
]
