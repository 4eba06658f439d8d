# backend/polimarket/routes/inventory.py
"""
Inventory routes.

- POST movements: register INBOUND / OUTBOUND / ADJUSTMENT
- GET availability: current available quantity of a product
- GET movements: audit trail of a product, newest first
"""
from flask import Blueprint, request

from ..decorators import handle_api_errors
from ..errors import InvalidInput
from ..services import inventory_service
from ..validation import optional_text, parse_int

inventory_bp = Blueprint("inventory", __name__, url_prefix="/v1/inventory")

MAX_HISTORY = 1000


@inventory_bp.post("/movements")
@handle_api_errors("register movement")
def register_movement_route():
    """
    Register a stock movement.

    Body: product_id, party_id, kind, quantity, note?
    """
    payload = request.get_json(silent=True) or {}

    if payload.get("quantity") is None:
        raise InvalidInput("quantity is required")

    receipt = inventory_service.register_movement(
        payload.get("product_id"),
        payload.get("party_id"),
        payload.get("kind"),
        parse_int(payload.get("quantity"), "quantity"),
        note=optional_text(payload.get("note"), "note", 1000),
    )
    return {"id": str(receipt.id), "message": receipt.message}, 201


@inventory_bp.get("/availability/<product_id>")
@handle_api_errors("get availability")
def availability_route(product_id: str):
    return inventory_service.get_availability(product_id), 200


@inventory_bp.get("/movements/<product_id>")
@handle_api_errors("list movements")
def movements_route(product_id: str):
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, MAX_HISTORY))
    items = inventory_service.get_movement_history(product_id, limit=limit)
    return {"items": items, "count": len(items)}, 200
