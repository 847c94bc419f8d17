from __future__ import annotations

import os

import django


os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret")
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "wxapi.settings")
os.environ.setdefault("WEATHER_HTTP_RETRIES", "0")

django.setup()
