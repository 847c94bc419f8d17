from __future__ import annotations

import pytest
from django.core.cache import caches
from django.test import Client

from wxapi.api.views import get_coordinator, get_health_registry

METNO_URL = "https://api.met.no/weatherapi/locationforecast/2.0/compact"
SUN_URL = "https://api.met.no/weatherapi/sunrise/3.0/sun"
NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"


def metno_payload(hours: int = 30) -> dict:
    return {
        "properties": {
            "timeseries": [
                {
                    "time": f"2024-01-0{1 + hour // 24}T{hour % 24:02d}:00:00Z",
                    "data": {
                        "instant": {
                            "details": {
                                "air_temperature": 27.0,
                                "relative_humidity": 60.0,
                                "wind_speed": 2.0,
                                "wind_from_direction": 90.0,
                            }
                        },
                        "next_1_hours": {"details": {"precipitation_amount": 0.0}},
                    },
                }
                for hour in range(hours)
            ]
        }
    }


@pytest.fixture(autouse=True)
def fresh_state():
    caches["default"].clear()
    get_coordinator.cache_clear()
    get_health_registry.cache_clear()
    yield
    get_coordinator.cache_clear()
    get_health_registry.cache_clear()


@pytest.fixture
def upstream(requests_mock):
    requests_mock.get(METNO_URL, json=metno_payload())
    requests_mock.get(
        SUN_URL,
        json={"properties": {"sunrise": {"time": "2024-01-01T08:06+00:00"}, "sunset": {"time": "2024-01-01T16:02+00:00"}}},
    )
    requests_mock.get(NOMINATIM_URL, json={"address": {"city": "London", "country": "United Kingdom"}})
    return requests_mock


def forecast_calls(mock) -> int:
    return sum(1 for request in mock.request_history if request.url.startswith(METNO_URL))


def test_weather_endpoint_returns_snapshot(upstream) -> None:
    client = Client()
    response = client.get("/api/weather", {"lat": "51.5", "lon": "-0.12", "tz": "Europe/London"})

    assert response.status_code == 200
    assert "no-store" in response["Cache-Control"]
    payload = response.json()
    assert payload["provider"] == "metno"
    assert len(payload["hourly"]) == 24
    assert payload["current"]["windSpeed"] == 7.2
    assert payload["current"]["sunrise"] == "08:06"
    assert payload["meta"]["cacheStatus"] == "miss"
    assert payload["meta"]["location"] == {"city": "London", "country": "United Kingdom"}


def test_weather_endpoint_caches_between_requests(upstream) -> None:
    client = Client()
    client.get("/api/weather", {"lat": "51.5", "lon": "-0.12"})
    response = client.get("/api/weather", {"lat": "51.5", "lon": "-0.12"})

    assert response.json()["meta"]["cacheStatus"] == "hit"
    assert forecast_calls(upstream) == 1


def test_weather_endpoint_serves_stale_on_outage(upstream) -> None:
    client = Client()
    client.get("/api/weather", {"lat": "51.5", "lon": "-0.12"})
    upstream.get(METNO_URL, status_code=503)

    response = client.get("/api/weather", {"lat": "51.5", "lon": "-0.12", "noCache": "1"})

    assert response.status_code == 200
    assert response.json()["meta"]["stale"] is True
    assert response.json()["meta"]["degradedReason"] == "upstream_unavailable"


def test_weather_endpoint_reports_upstream_failure(upstream) -> None:
    upstream.get(METNO_URL, status_code=429)
    client = Client()

    response = client.get("/api/weather", {"lat": "51.5", "lon": "-0.12"})

    assert response.status_code == 503
    payload = response.json()
    assert payload["kind"] == "upstream_rate_limited"
    assert payload["city"] == "London"


def test_weather_endpoint_validates_params(upstream) -> None:
    client = Client()
    response = client.get("/api/weather", {"lat": "abc", "lon": "xyz"})

    assert response.status_code == 400
    assert "error" in response.json()
    assert upstream.call_count == 0


def test_location_endpoint_and_alias(upstream) -> None:
    client = Client()

    for url in ("/api/location", "/api/c2l"):
        response = client.get(url, {"lat": "51.5", "lon": "-0.12"})
        assert response.status_code == 200
        assert response.json()["city"] == "London"

    assert client.get("/api/location").status_code == 400


def test_location_endpoint_defaults_to_unknown(requests_mock) -> None:
    requests_mock.get(NOMINATIM_URL, status_code=500)

    response = Client().get("/api/location", {"lat": "10", "lon": "10"})

    assert response.status_code == 200
    assert response.json()["city"] == "Unknown"
    assert response.json()["country"] == "Unknown"


def test_summary_endpoint_is_plain_text(upstream) -> None:
    response = Client().get("/api/summary", {"lat": "51.5", "lon": "-0.12"})

    assert response.status_code == 200
    assert response["Content-Type"].startswith("text/plain")
    assert response.content.decode() == (
        "Currently, the weather is warm. No precipitation is expected right now. "
        "Overall, expect a day that feels energetic."
    )


def test_health_endpoint_counts_activity(upstream) -> None:
    client = Client()
    client.get("/api/weather", {"lat": "51.5", "lon": "-0.12"})
    client.get("/api/weather", {"lat": "51.5", "lon": "-0.12"})

    payload = client.get("/api/health").json()

    assert payload["cache"]["weather"] == {"hits": 1, "misses": 1, "stale": 0, "backendErrors": 0}
    assert payload["cache"]["geocode"]["misses"] == 1
    assert payload["cache"]["geocode"]["hits"] == 1
    assert "metno" in payload["lastSuccess"]
    assert payload["configuredProviders"] == ["metno", "openmeteo"]
