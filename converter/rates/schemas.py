"""Schemas for the rates endpoints."""

from __future__ import annotations

from marshmallow import Schema, fields

from converter.schemas import CurrencyCode


class RefreshQuerySchema(Schema):
    base = CurrencyCode(load_default=None)


class RefreshSuccessSchema(Schema):
    message = fields.String(required=True)
    source = fields.String(required=True)
    base_currency = fields.String(required=True)
    as_of = fields.String(required=True)
    currencies = fields.Integer(required=True)


class RefreshThrottleSchema(Schema):
    message = fields.String(required=True)
    retry_after = fields.Integer(required=True)
