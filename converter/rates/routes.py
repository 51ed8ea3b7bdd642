"""Routes exposing the held rate table and its manual refresh."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from flask import current_app, jsonify
from flask.views import MethodView

from converter.errors import provider_error
from converter.providers import ProviderError, RateTable
from converter.schemas import RateTableSchema
from converter.services.context import get_context

from . import blp
from .schemas import RefreshQuerySchema, RefreshSuccessSchema, RefreshThrottleSchema

DEFAULT_THROTTLE_SECONDS = 60
REFRESH_STATE_KEY = "rate_refresh_state"


def ensure_refresh_state(app) -> dict[str, Any]:
    state = app.extensions.setdefault(REFRESH_STATE_KEY, {})
    if not isinstance(state, dict):
        state = {}
        app.extensions[REFRESH_STATE_KEY] = state
    return state


def serialize_table(table: RateTable, *, stale: bool) -> dict[str, Any]:
    return {
        "base_currency": table.base_currency,
        "source": table.source,
        "fetched_at": table.fetched_at,
        "published_at": table.published_at,
        "rates": table.rates,
        "currencies": table.currencies,
        "stale": stale,
    }


@blp.route("")
class RatesView(MethodView):
    @blp.response(200, RateTableSchema())
    def get(self):
        context = get_context()
        try:
            table = context.ensure_table()
        except ProviderError as exc:
            raise provider_error(exc) from exc

        record = context.rates.get_snapshot_info()
        return serialize_table(table, stale=bool(record and record.stale))


@blp.route("/refresh")
class RatesRefresh(MethodView):
    @blp.arguments(RefreshQuerySchema, location="query")
    @blp.response(202, RefreshSuccessSchema())
    @blp.alt_response(429, schema=RefreshThrottleSchema())
    def post(self, query_args):
        """Trigger a refresh of the rate table, throttled per application."""

        app = current_app
        state = ensure_refresh_state(app)
        now = datetime.now(UTC)

        throttle_seconds = max(
            int(app.config.get("REFRESH_THROTTLE_SECONDS", DEFAULT_THROTTLE_SECONDS)), 0
        )
        last_success = state.get("last_success")
        if throttle_seconds > 0 and isinstance(last_success, datetime):
            next_allowed_at = last_success + timedelta(seconds=throttle_seconds)
            if next_allowed_at > now:
                state["throttle_until"] = next_allowed_at
                retry_after = max(int((next_allowed_at - now).total_seconds()), 1)
                payload = {
                    "message": "Refresh throttled. Try again later.",
                    "retry_after": retry_after,
                }
                return jsonify(payload), 429
        state.pop("throttle_until", None)

        context = get_context()
        try:
            table = context.refresh_rates(query_args.get("base"))
        except ProviderError as exc:
            state["last_failure"] = now
            raise provider_error(exc) from exc

        state["last_success"] = now
        state["last_failure"] = None

        return {
            "message": "Rates refreshed.",
            "source": table.source,
            "base_currency": table.base_currency,
            "as_of": table.fetched_at.isoformat(),
            "currencies": len(table.currencies),
        }
