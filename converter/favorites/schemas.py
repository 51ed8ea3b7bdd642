"""Schemas for favorite currency pairs."""

from __future__ import annotations

from marshmallow import Schema

from converter.schemas import CurrencyCode


class FavoriteCreateSchema(Schema):
    from_currency = CurrencyCode(required=True, data_key="from")
    to_currency = CurrencyCode(required=True, data_key="to")
