"""Routes for the conversion history."""

from __future__ import annotations

from flask.views import MethodView

from converter.errors import ValidationError
from converter.schemas import ConversionRecordSchema, ErrorMessageSchema
from converter.services.context import get_context
from converter.services.fx_conversion import ConversionRecord
from converter.services.ledger import HISTORY
from converter.utils.datetime import utc_now

from . import blp
from .schemas import HistoryCreateSchema, HistoryListSchema


@blp.route("")
class HistoryCollection(MethodView):
    @blp.response(200, HistoryListSchema())
    def get(self):
        ledger = get_context().ledger
        return {
            "items": ledger.list(),
            "limit": ledger.history_limit,
            "unsynced": HISTORY in ledger.unsynced,
        }

    @blp.arguments(HistoryCreateSchema)
    @blp.response(201, ConversionRecordSchema())
    @blp.alt_response(503, schema=ErrorMessageSchema())
    def post(self, payload):
        """Append a conversion computed elsewhere, newest first."""

        try:
            record = ConversionRecord(
                from_currency=payload["from_currency"],
                to_currency=payload["to_currency"],
                amount=payload["amount"],
                result=payload["result"],
                timestamp=payload.get("timestamp") or utc_now(),
            )
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        return get_context().ledger.append(record)
