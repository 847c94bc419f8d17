"""API URL configuration."""
from __future__ import annotations

from django.urls import path

from wxapi.api.views import HealthView, LocationView, SummaryView, WeatherView

urlpatterns = [
    path("weather", WeatherView.as_view(), name="weather"),
    path("location", LocationView.as_view(), name="location"),
    path("c2l", LocationView.as_view(), name="c2l"),
    path("summary", SummaryView.as_view(), name="summary"),
    path("health", HealthView.as_view(), name="health"),
]
