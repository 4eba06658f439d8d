# backend/polimarket/services/products_service.py
"""
Products Service with initial-stock provisioning.

A product never exists without its StockLevel row: create_product inserts
the product and opens its stock level (plus the initial INBOUND movement)
in one unit of work. The acting party for that movement comes from an
injected resolver, resolved before the transaction opens.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from flask import current_app

from ..errors import BusinessRuleViolation, InvalidInput, ProductNotFound
from ..extensions import db
from ..models import Party, Product, StockLevel
from ..validation import parse_id, parse_int, parse_price, require_text
from . import ledger_service
from .concurrency import run_with_retry, unit_of_work
from .party_service import first_active_seller

ActorResolver = Callable[[], Optional[Party]]


@dataclass(frozen=True)
class ProductReceipt:
    id: uuid.UUID
    message: str


def find_active_product(product_id: uuid.UUID) -> Product:
    product = (
        db.session.query(Product)
        .filter(Product.id == product_id, Product.is_active.is_(True))
        .first()
    )
    if product is None:
        raise ProductNotFound()
    return product


def product_exists_active(product_id: uuid.UUID) -> bool:
    count = (
        db.session.query(Product.id)
        .filter(Product.id == product_id, Product.is_active.is_(True))
        .count()
    )
    return count > 0


def list_active_products() -> list[Product]:
    return (
        db.session.query(Product)
        .filter(Product.is_active.is_(True))
        .order_by(Product.name.asc(), Product.id.asc())
        .all()
    )


def _with_stock(product: Product) -> dict:
    data = product.to_dict()
    data["available_quantity"] = ledger_service.get_available(product.id)
    return data


def get_product(raw_id) -> dict:
    """Product with its current available quantity."""
    product = find_active_product(parse_id(raw_id, "product"))
    return _with_stock(product)


def list_products() -> dict:
    products = list_active_products()
    items = [_with_stock(p) for p in products]
    return {"items": items, "count": len(items)}


def create_product(
    *,
    name,
    sale_unit,
    unit_price,
    initial_quantity,
    resolve_actor: ActorResolver = first_active_seller,
) -> ProductReceipt:
    """
    Create a product together with its initial stock.

    Raises:
        InvalidInput: blank name/unit, negative quantity, non-positive price
        BusinessRuleViolation: no actor (active seller) to attribute the
            initial movement to; checked before any transaction opens
    """
    name = require_text(name, "name", 255)
    sale_unit = require_text(sale_unit, "sale_unit", 50)
    initial_quantity = parse_int(initial_quantity, "initial_quantity")
    if initial_quantity < 0:
        raise InvalidInput("initial_quantity cannot be negative")
    unit_price = parse_price(unit_price)
    if unit_price <= 0:
        raise InvalidInput("unit_price must be greater than 0")

    actor = resolve_actor()
    if actor is None:
        raise BusinessRuleViolation(
            "No sellers are registered. Create at least one seller first"
        )
    actor_id = actor.id

    def _op():
        with unit_of_work():
            product = Product(
                name=name,
                sale_unit=sale_unit,
                unit_price=unit_price,
                is_active=True,
            )
            db.session.add(product)
            db.session.flush()  # ensure product.id exists before the stock level

            ledger_service.provision_initial(product.id, actor_id, initial_quantity)
            product_id = product.id
        return product_id

    product_id = run_with_retry(_op)
    current_app.logger.info(
        "Created product %s with initial stock %d", product_id, initial_quantity
    )
    return ProductReceipt(
        id=product_id,
        message=f"Product created successfully with initial stock of {initial_quantity} units",
    )


def deactivate_product(raw_id) -> bool:
    """
    Soft-delete a product and its stock level.

    Returns False if no active product has that id.
    """
    product_id = parse_id(raw_id, "product")

    def _op():
        with unit_of_work():
            product = (
                db.session.query(Product)
                .filter(Product.id == product_id, Product.is_active.is_(True))
                .first()
            )
            if product is None:
                return False
            product.is_active = False
            db.session.query(StockLevel).filter(
                StockLevel.product_id == product_id
            ).update({StockLevel.is_active: False})
        return True

    deactivated = run_with_retry(_op)
    if deactivated:
        current_app.logger.info("Deactivated product %s", product_id)
    return deactivated
