"""Routes for pair rates and conversions against the held table."""

from __future__ import annotations

import logging

from flask.views import MethodView

from converter.errors import APIError, PersistenceFailure, RateUnavailableError, provider_error
from converter.providers import ProviderError
from converter.schemas import ErrorMessageSchema
from converter.services.context import ConverterContext, get_context
from converter.services.fx_conversion import EMPTY_TABLE, RateUnavailable

from . import blp
from .schemas import (
    ConversionParamsSchema,
    ConversionParamsUpdateSchema,
    ConversionRequestSchema,
    ConversionResponseSchema,
    PairRateQuerySchema,
    PairRateSchema,
)

logger = logging.getLogger(__name__)


def _rate_unavailable(
    outcome: RateUnavailable, fetch_error: ProviderError | None = None
) -> APIError:
    if outcome.reason == EMPTY_TABLE and fetch_error is not None:
        return provider_error(fetch_error)
    return RateUnavailableError(
        outcome.message,
        payload={
            "from": outcome.from_currency,
            "to": outcome.to_currency,
            "reason": outcome.reason,
        },
    )


def _prime_table(context: ConverterContext) -> ProviderError | None:
    """Fetch a table when none is held and return the fetch error, if any.

    Identity conversions need no table, so the error is only raised once a
    conversion actually comes back without rates.
    """

    if context.current_table() is not None:
        return None
    try:
        context.ensure_table()
    except ProviderError as exc:
        logger.warning("Initial rate fetch failed: %s", exc)
        return exc
    return None


@blp.route("")
class Conversions(MethodView):
    @blp.arguments(ConversionRequestSchema)
    @blp.response(200, ConversionResponseSchema())
    @blp.alt_response(503, schema=ErrorMessageSchema())
    def post(self, payload):
        """Convert using the request merged over the current parameters."""

        context = get_context()
        params = context.update_params(
            from_currency=payload.get("from_currency"),
            to_currency=payload.get("to_currency"),
            amount=payload.get("amount"),
        )
        fetch_error = _prime_table(context)

        outcome = context.convert(params, record=False)
        if isinstance(outcome, RateUnavailable):
            raise _rate_unavailable(outcome, fetch_error)

        persisted = False
        warning = None
        if payload.get("save", True):
            try:
                context.ledger.append(outcome)
                persisted = True
            except PersistenceFailure as exc:
                warning = exc.message

        return {
            "record": outcome,
            "rate": context.rate(params.from_currency, params.to_currency),
            "persisted": persisted,
            "warning": warning,
        }


@blp.route("/rate")
class PairRate(MethodView):
    @blp.arguments(PairRateQuerySchema, location="query")
    @blp.response(200, PairRateSchema())
    @blp.alt_response(503, schema=ErrorMessageSchema())
    def get(self, query_args):
        context = get_context()
        fetch_error = _prime_table(context)

        source = query_args["from_currency"]
        target = query_args["to_currency"]
        rate = context.rate(source, target)
        if isinstance(rate, RateUnavailable):
            raise _rate_unavailable(rate, fetch_error)

        table = context.current_table()
        return {
            "from_currency": source,
            "to_currency": target,
            "rate": rate,
            "base": table.base_currency if table is not None else None,
        }


@blp.route("/params")
class ConversionParamsView(MethodView):
    @blp.response(200, ConversionParamsSchema())
    def get(self):
        return get_context().params

    @blp.arguments(ConversionParamsUpdateSchema)
    @blp.response(200, ConversionParamsSchema())
    def patch(self, payload):
        return get_context().update_params(
            from_currency=payload.get("from_currency"),
            to_currency=payload.get("to_currency"),
            amount=payload.get("amount"),
        )
