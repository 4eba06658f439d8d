# Overview: Flask API routes for products; parses input and returns JSON responses.

# backend/polimarket/routes/products.py
"""
Product routes.

Creating a product also provisions its stock level and records the
initial INBOUND movement in the same transaction.
"""
from flask import Blueprint, request

from ..decorators import handle_api_errors
from ..errors import ProductNotFound
from ..services import products_service

products_bp = Blueprint("products", __name__, url_prefix="/v1/products")


@products_bp.post("")
@handle_api_errors("create product")
def create_product_route():
    """
    Create a new product with its initial stock.

    Body: name, sale_unit, unit_price (decimal string or number),
    initial_quantity (integer >= 0, defaults to 0)
    """
    payload = request.get_json(silent=True) or {}

    receipt = products_service.create_product(
        name=payload.get("name"),
        sale_unit=payload.get("sale_unit"),
        unit_price=payload.get("unit_price"),
        initial_quantity=payload.get("initial_quantity", 0),
    )
    return {"id": str(receipt.id), "message": receipt.message}, 201


@products_bp.get("")
@handle_api_errors("list products")
def list_products_route():
    """List active products ordered by name, each with its available quantity."""
    return products_service.list_products()


@products_bp.get("/<product_id>")
@handle_api_errors("get product")
def get_product_route(product_id: str):
    return products_service.get_product(product_id), 200


@products_bp.delete("/<product_id>")
@handle_api_errors("delete product")
def delete_product_route(product_id: str):
    """Soft-delete a product; its stock level is deactivated with it."""
    if not products_service.deactivate_product(product_id):
        raise ProductNotFound()
    return {"ok": True}, 200
