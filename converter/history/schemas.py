"""Schemas for the conversion history endpoints."""

from __future__ import annotations

from datetime import UTC

from marshmallow import Schema, fields

from converter.schemas import Amount, ConversionRecordSchema, CurrencyCode


class HistoryCreateSchema(Schema):
    from_currency = CurrencyCode(required=True, data_key="from")
    to_currency = CurrencyCode(required=True, data_key="to")
    amount = Amount(required=True)
    result = Amount(required=True)
    timestamp = fields.AwareDateTime(load_default=None, default_timezone=UTC)


class HistoryListSchema(Schema):
    items = fields.List(fields.Nested(ConversionRecordSchema), required=True)
    limit = fields.Integer(allow_none=True)
    unsynced = fields.Boolean(required=True)
