"""Marshmallow schemas for conversion endpoints."""

from __future__ import annotations

from marshmallow import Schema, fields

from converter.schemas import Amount, ConversionRecordSchema, CurrencyCode


class ConversionParamsSchema(Schema):
    from_currency = fields.String(required=True, data_key="from")
    to_currency = fields.String(required=True, data_key="to")
    amount = fields.Decimal(required=True, as_string=True)


class ConversionParamsUpdateSchema(Schema):
    """Partial parameters; omitted fields keep their current value."""

    from_currency = CurrencyCode(data_key="from", load_default=None)
    to_currency = CurrencyCode(data_key="to", load_default=None)
    amount = Amount(load_default=None)


class ConversionRequestSchema(ConversionParamsUpdateSchema):
    save = fields.Boolean(load_default=True)


class ConversionResponseSchema(Schema):
    record = fields.Nested(ConversionRecordSchema, required=True)
    rate = fields.Decimal(required=True, as_string=True)
    persisted = fields.Boolean(required=True)
    warning = fields.String(allow_none=True)


class PairRateQuerySchema(Schema):
    from_currency = CurrencyCode(required=True, data_key="from")
    to_currency = CurrencyCode(required=True, data_key="to")


class PairRateSchema(Schema):
    from_currency = fields.String(required=True, data_key="from")
    to_currency = fields.String(required=True, data_key="to")
    rate = fields.Decimal(required=True, as_string=True)
    base = fields.String(allow_none=True)
