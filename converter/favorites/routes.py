"""Routes for favorite currency pairs."""

from __future__ import annotations

from flask.views import MethodView

from converter.schemas import ErrorMessageSchema, FavoriteSchema
from converter.services.context import get_context

from . import blp
from .schemas import FavoriteCreateSchema


@blp.route("")
class FavoriteCollection(MethodView):
    @blp.response(200, FavoriteSchema(many=True))
    def get(self):
        return get_context().ledger.favorites()

    @blp.arguments(FavoriteCreateSchema)
    @blp.response(201, FavoriteSchema())
    @blp.alt_response(409, schema=ErrorMessageSchema())
    @blp.alt_response(503, schema=ErrorMessageSchema())
    def post(self, payload):
        return get_context().ledger.add_favorite(
            payload["from_currency"], payload["to_currency"]
        )


@blp.route("/<string:favorite_id>")
class FavoriteItem(MethodView):
    @blp.response(204)
    @blp.alt_response(404, schema=ErrorMessageSchema())
    def delete(self, favorite_id: str):
        get_context().ledger.remove_favorite(favorite_id)
