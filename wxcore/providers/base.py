from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import UpstreamMalformed, UpstreamRateLimited, UpstreamUnavailable
from ..units import WindUnit


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass
class RequestConfig:
    timeout: float = 5.0
    retries: int = 1
    backoff_factor: float = 0.3
    # never 429
    status_forcelist: Iterable[int] = (500, 502, 503, 504)
    user_agent: str = "wxgate/1.0"


# Canonical intermediate shape -------------------------------------------------
@dataclass(frozen=True)
class RawCurrent:
    time: Optional[datetime] = None
    temperature: Optional[float] = None
    apparent_temperature: Optional[float] = None
    humidity: Optional[float] = None
    precipitation: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None


@dataclass(frozen=True)
class RawHourly:
    """Parallel arrays sharing one time index; shorter arrays mean missing values."""

    time: List[datetime] = field(default_factory=list)
    temperature: List[Optional[float]] = field(default_factory=list)
    precipitation: List[Optional[float]] = field(default_factory=list)
    precipitation_probability: List[Optional[float]] = field(default_factory=list)
    wind_speed: List[Optional[float]] = field(default_factory=list)
    wind_direction: List[Optional[float]] = field(default_factory=list)


@dataclass(frozen=True)
class RawDaily:
    date: List[date] = field(default_factory=list)
    temperature_max: List[Optional[float]] = field(default_factory=list)
    temperature_min: List[Optional[float]] = field(default_factory=list)
    precipitation_sum: List[Optional[float]] = field(default_factory=list)
    precipitation_probability_max: List[Optional[float]] = field(default_factory=list)
    wind_speed_max: List[Optional[float]] = field(default_factory=list)
    sunrise: List[Optional[datetime]] = field(default_factory=list)
    sunset: List[Optional[datetime]] = field(default_factory=list)


@dataclass(frozen=True)
class SunTimes:
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None


@dataclass(frozen=True)
class ProviderRawResponse:
    """Provider output after adaptation.

    Temperatures are Celsius, precipitation millimetres, wind speed in
    ``wind_unit``. ``daily`` is ``None`` when the provider only exposes
    sub-daily data; ``sun`` then carries sunrise/sunset per local date.
    """

    provider: str
    wind_unit: WindUnit
    current: RawCurrent
    hourly: RawHourly
    daily: Optional[RawDaily] = None
    sun: Dict[date, SunTimes] = field(default_factory=dict)


class UpstreamClient:
    """Base class that adds retry/timeouts and error mapping for HTTP upstreams."""

    name = "upstream"
    base_url = ""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
        base_url: Optional[str] = None,
    ) -> None:
        self.request_config = request_config or RequestConfig()
        self.session = session or self._build_session(self.request_config)
        self.base_url = base_url or self.base_url
        self._log = logging.getLogger(self.__class__.__name__)

    def _build_session(self, config: RequestConfig) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=config.retries,
            backoff_factor=config.backoff_factor,
            status_forcelist=tuple(config.status_forcelist),
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        session.headers["User-Agent"] = config.user_agent
        return session

    def _handle_response(self, response: Response) -> Response:
        if response.status_code == 429:
            self._log.warning("Rate limited by %s: %s", self.name, response.text[:200])
            raise UpstreamRateLimited("rate limited", provider=self.name, status_code=429)
        if response.status_code >= 400:
            self._log.error("Provider %s returned %s: %s", self.name, response.status_code, response.text[:200])
            raise UpstreamUnavailable(
                f"HTTP {response.status_code}", provider=self.name, status_code=response.status_code
            )
        return response

    def _request(self, method: str, url: str, **kwargs: Any) -> Response:
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.request_config.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            self._log.error("Request to %s timed out", self.name, exc_info=exc)
            raise UpstreamUnavailable("timeout", provider=self.name) from exc
        except requests.RequestException as exc:
            self._log.error("Request to %s failed", self.name, exc_info=exc)
            raise UpstreamUnavailable("request failed", provider=self.name) from exc
        return self._handle_response(response)

    def _json(self, response: Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            self._log.error("Malformed JSON from %s", self.name, exc_info=exc)
            raise UpstreamMalformed("invalid json", provider=self.name) from exc

    def _parse(self, model: Type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            self._log.error("Malformed %s payload: %s", self.name, exc)
            raise UpstreamMalformed(f"unexpected {self.name} schema", provider=self.name) from exc


class WeatherProvider(UpstreamClient):
    """Adapter for one upstream weather source."""

    name = "base"

    def fetch_forecast(
        self, latitude: float, longitude: float, timezone_name: str, horizon_days: int
    ) -> ProviderRawResponse:
        """Return the forecast adapted to :class:`ProviderRawResponse`.

        Raises :class:`~wxcore.errors.UpstreamError` subclasses on failure.
        """
        raise NotImplementedError


__all__ = [
    "RequestConfig",
    "RawCurrent",
    "RawHourly",
    "RawDaily",
    "SunTimes",
    "ProviderRawResponse",
    "UpstreamClient",
    "WeatherProvider",
]
