# Overview: Flask API routes for sales; parses input and returns JSON responses.

# backend/polimarket/routes/sales.py

from flask import Blueprint, request

from ..decorators import handle_api_errors
from ..errors import InvalidInput
from ..money import format_money
from ..services import sales_service
from ..validation import parse_int

sales_bp = Blueprint("sales", __name__, url_prefix="/v1/sales")


def _parse_lines(raw) -> list[tuple]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise InvalidInput("lines must be a list")

    lines = []
    for item in raw:
        if not isinstance(item, dict):
            raise InvalidInput("each line must be an object with product_id and quantity")
        if item.get("quantity") is None:
            raise InvalidInput("quantity is required on every line")
        lines.append((item.get("product_id"), parse_int(item.get("quantity"), "quantity")))
    return lines


@sales_bp.post("")
@handle_api_errors("create sale")
def create_sale_route():
    """
    Create a sale and debit inventory for every line.

    Body: customer_id, branch?, lines: [{product_id, quantity}, ...]
    """
    payload = request.get_json(silent=True) or {}

    receipt = sales_service.process_sale(
        payload.get("customer_id"),
        payload.get("branch"),
        _parse_lines(payload.get("lines")),
    )
    return {
        "id": str(receipt.id),
        "total": format_money(receipt.total),
        "message": receipt.message,
    }, 201


@sales_bp.get("")
@handle_api_errors("list sales")
def list_sales_route():
    """
    List sales with optional filters.

    Query params:
    - customer_id: customer party id
    - branch: exact branch label
    - date_from / date_to: ISO-8601, inclusive
    """
    sales = sales_service.list_sales(
        customer_id=request.args.get("customer_id"),
        branch=request.args.get("branch"),
        date_from=request.args.get("date_from"),
        date_to=request.args.get("date_to"),
    )
    return {"items": [s.to_dict() for s in sales], "count": len(sales)}, 200


@sales_bp.get("/<sale_id>")
@handle_api_errors("get sale")
def get_sale_route(sale_id: str):
    """Get a sale with its lines."""
    sale = sales_service.get_sale(sale_id)
    return sale.to_dict(), 200
