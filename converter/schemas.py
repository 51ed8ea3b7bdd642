"""Marshmallow schemas shared across blueprints."""

from __future__ import annotations

import re

from marshmallow import Schema, ValidationError, fields

from converter.services.fx_conversion import normalize_amount

CURRENCY_CODE_RE = re.compile(r"^[A-Z]{3}$")


class CurrencyCode(fields.String):
    """ISO 4217 style code; input is stripped and upper-cased."""

    def _deserialize(self, value, attr, data, **kwargs):
        code = super()._deserialize(value, attr, data, **kwargs).strip().upper()
        if not CURRENCY_CODE_RE.match(code):
            raise ValidationError("Must be a three-letter currency code.")
        return code


class Amount(fields.Decimal):
    """Non-negative finite amount, rounded to the conversion precision."""

    def _deserialize(self, value, attr, data, **kwargs):
        amount = super()._deserialize(value, attr, data, **kwargs)
        try:
            return normalize_amount(amount)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc


class HealthStatusSchema(Schema):
    status = fields.String(required=True)
    app = fields.String()


class HealthRatesSchema(Schema):
    status = fields.String(required=True)
    source = fields.String(allow_none=True)
    base_currency = fields.String(allow_none=True)
    last_updated = fields.String(allow_none=True)
    stale = fields.Boolean(allow_none=True)
    expired = fields.Boolean(allow_none=True)


class RateTableSchema(Schema):
    base = fields.String(required=True, attribute="base_currency")
    source = fields.String(required=True)
    fetched_at = fields.DateTime(required=True)
    published_at = fields.DateTime(allow_none=True)
    rates = fields.Dict(keys=fields.String(), values=fields.Decimal(as_string=True))
    currencies = fields.List(fields.String())
    stale = fields.Boolean()


class CurrencyListSchema(Schema):
    base = fields.String(required=True)
    currencies = fields.List(fields.String(), required=True)


class ConversionRecordSchema(Schema):
    from_currency = fields.String(required=True, data_key="from")
    to_currency = fields.String(required=True, data_key="to")
    amount = fields.Decimal(required=True, as_string=True)
    result = fields.Decimal(required=True, as_string=True)
    timestamp = fields.DateTime(required=True)


class FavoriteSchema(Schema):
    id = fields.String(required=True)
    from_currency = fields.String(required=True, data_key="from")
    to_currency = fields.String(required=True, data_key="to")


class ErrorMessageSchema(Schema):
    message = fields.String(required=True)
