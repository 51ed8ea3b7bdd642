"""Route handlers for health checks."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from converter.schemas import HealthRatesSchema, HealthStatusSchema
from converter.services.context import get_context
from converter.utils.datetime import utc_now

from . import blp


@blp.route("")
class HealthStatus(MethodView):
    @blp.response(200, HealthStatusSchema())
    def get(self):
        return {
            "status": "ok",
            "app": current_app.config.get("APP_NAME", "currency-converter"),
        }


@blp.route("/rates")
class HealthRates(MethodView):
    @blp.response(200, HealthRatesSchema())
    def get(self):
        record = get_context().rates.get_snapshot_info()

        if record is None:
            return {
                "status": "uninitialized",
                "source": None,
                "base_currency": None,
                "last_updated": None,
                "stale": None,
                "expired": None,
            }

        table = record.table
        max_age = int(current_app.config.get("RATES_MAX_AGE_SECONDS", 3600))
        return {
            "status": "ok",
            "source": table.source,
            "base_currency": table.base_currency,
            "last_updated": table.fetched_at.isoformat(),
            "stale": record.stale,
            "expired": table.age(utc_now()).total_seconds() > max_age,
        }
