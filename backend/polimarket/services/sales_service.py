"""
Sales Service - multi-line sale processing with automatic stock debit

WHY: A sale and its stock effect are one fact. The header, every line and
every OUTBOUND ledger movement commit together or not at all, so a late
stock failure can never leave a partial sale or a half-debited cart.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal

from flask import current_app
from sqlalchemy.orm import selectinload

from ..errors import BusinessRuleViolation, InvalidInput, NotFound
from ..extensions import db
from ..models import MovementKind, Sale, SaleLine
from ..money import MAX_PRICE, format_money, to_money
from ..time_utils import utcnow
from ..validation import MAX_QUANTITY, optional_text, parse_id, parse_optional_datetime
from . import ledger_service
from .concurrency import run_with_retry, unit_of_work
from .party_service import find_active_party
from .products_service import find_active_product


@dataclass(frozen=True)
class SaleReceipt:
    id: uuid.UUID
    total: Decimal
    message: str


@dataclass(frozen=True)
class _PricedLine:
    product_id: uuid.UUID
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


def _price_lines(lines) -> list[_PricedLine]:
    """
    Validate each requested line in input order and price it.

    The stock check here is advisory: it produces a product-named error
    before a write transaction is opened. apply_delta re-checks under lock.
    """
    priced: list[_PricedLine] = []
    for raw_product_id, quantity in lines:
        product_id = parse_id(raw_product_id, "product")
        product = find_active_product(product_id)

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidInput("Quantity must be greater than 0")
        if quantity > MAX_QUANTITY:
            raise InvalidInput(f"Quantity must not exceed {MAX_QUANTITY}")

        available = ledger_service.get_available(product_id)
        if available < quantity:
            raise BusinessRuleViolation(
                f"Insufficient stock for product '{product.name}'. "
                f"Available: {available}, Requested: {quantity}",
                details={
                    "product_id": str(product_id),
                    "available_quantity": available,
                    "requested_quantity": quantity,
                },
            )

        unit_price = Decimal(product.unit_price)
        priced.append(_PricedLine(
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
            subtotal=unit_price * quantity,
        ))
    return priced


def process_sale(customer_id, branch, lines) -> SaleReceipt:
    """
    Create a sale and debit stock for every line.

    Args:
        customer_id: customer party id (raw string or UUID)
        branch: optional branch label
        lines: sequence of (product_id, quantity) pairs, debited in order

    Raises:
        InvalidInput, NotFound, InactiveClient, ProductNotFound,
        BusinessRuleViolation (advisory stock check),
        InsufficientStock (authoritative check lost a race; nothing persisted)
    """
    cid = parse_id(customer_id, "customer")
    find_active_party(cid)

    lines = list(lines or [])
    if not lines:
        raise InvalidInput("A sale must have at least one line")

    branch = optional_text(branch, "branch", 100)
    priced = _price_lines(lines)
    total = to_money(sum((line.subtotal for line in priced), Decimal("0")))
    if total > MAX_PRICE:
        raise InvalidInput("Sale total exceeds maximum allowed")

    sale_id = uuid.uuid4()

    def _op():
        with unit_of_work():
            sale = Sale(
                id=sale_id,
                customer_id=cid,
                occurred_at=utcnow(),
                total=total,
                branch=branch,
            )
            db.session.add(sale)

            for number, line in enumerate(priced, start=1):
                db.session.add(SaleLine(
                    sale_id=sale_id,
                    product_id=line.product_id,
                    line_number=number,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    subtotal=to_money(line.subtotal),
                ))
            db.session.flush()

            for line in priced:
                ledger_service.apply_delta(
                    line.product_id,
                    MovementKind.OUTBOUND,
                    line.quantity,
                    cid,
                    note=f"Sale {sale_id}",
                    sale_id=sale_id,
                )

    run_with_retry(_op)
    current_app.logger.info("Sale %s committed: %d lines, total %s", sale_id, len(priced), total)

    return SaleReceipt(
        id=sale_id,
        total=total,
        message=f"Sale created successfully. Total: ${format_money(total)}",
    )


def _sale_query():
    return (
        db.session.query(Sale)
        .options(selectinload(Sale.lines).selectinload(SaleLine.product))
        .filter(Sale.is_active.is_(True))
    )


def get_sale(raw_id) -> Sale:
    sale_id = parse_id(raw_id, "sale")
    sale = _sale_query().filter(Sale.id == sale_id).first()
    if sale is None:
        raise NotFound(f"Sale {sale_id} not found")
    return sale


def list_sales(
    *,
    customer_id=None,
    branch: str | None = None,
    date_from=None,
    date_to=None,
) -> list[Sale]:
    """
    Active sales, newest first. Date bounds are inclusive.
    """
    query = _sale_query()

    if customer_id is not None:
        query = query.filter(Sale.customer_id == parse_id(customer_id, "customer"))
    if branch:
        query = query.filter(Sale.branch == branch)

    start = parse_optional_datetime(date_from, "date_from")
    end = parse_optional_datetime(date_to, "date_to")
    if start is not None:
        query = query.filter(Sale.occurred_at >= start)
    if end is not None:
        query = query.filter(Sale.occurred_at <= end)

    return query.order_by(Sale.occurred_at.desc()).all()

