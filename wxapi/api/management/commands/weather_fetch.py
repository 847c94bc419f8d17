"""Management command to fetch weather using the same stack as the API."""
from __future__ import annotations

import json
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from wxapi.api.views import get_coordinator
from wxcore.services.coordinator import ErrorResponse


class Command(BaseCommand):
    help = "Fetch the normalized weather snapshot for the provided coordinates"

    def add_arguments(self, parser) -> None:  # noqa: D401
        parser.add_argument("--lat", type=str, help="Latitude")
        parser.add_argument("--lon", type=str, help="Longitude")
        parser.add_argument("--tz", type=str, help="IANA timezone or offset such as +02:00")
        parser.add_argument("--units", type=str, choices=["metric", "imperial"])
        parser.add_argument("--provider", type=str, help="Provider name, e.g. metno or openmeteo")
        parser.add_argument("--no-cache", action="store_true", help="Bypass fresh cache entries")

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        query = {
            name: options[name]
            for name in ("lat", "lon", "tz", "units", "provider")
            if options.get(name) is not None
        }
        if options.get("no_cache"):
            query["noCache"] = "true"

        result = get_coordinator().handle_query(query)
        if isinstance(result, ErrorResponse):
            raise CommandError(f"{result.kind}: {result.error}")
        self.stdout.write(json.dumps(result.to_dict(), ensure_ascii=False))
