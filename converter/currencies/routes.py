"""Routes for the available currency list."""

from __future__ import annotations

from flask.views import MethodView

from converter.errors import provider_error
from converter.providers import ProviderError
from converter.schemas import CurrencyListSchema
from converter.services.context import get_context

from . import blp


@blp.route("")
class CurrencyList(MethodView):
    @blp.response(200, CurrencyListSchema())
    def get(self):
        try:
            table = get_context().ensure_table()
        except ProviderError as exc:
            raise provider_error(exc) from exc
        return {"base": table.base_currency, "currencies": table.currencies}
