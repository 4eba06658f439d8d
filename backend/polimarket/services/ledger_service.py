# Overview: Stock ledger; owns available quantities and the movement audit trail.

from __future__ import annotations

import uuid

from flask import current_app
from sqlalchemy import case, func

from ..errors import BusinessRuleViolation, InsufficientStock, InvalidInput, NotFound
from ..extensions import db
from ..models import MovementKind, StockLevel, StockMovement
from ..time_utils import utcnow
from ..validation import MAX_QUANTITY
from .concurrency import lock_for_update, run_with_retry, unit_of_work
"""
Stock Ledger Invariants (authoritative)

- StockLevel.available_quantity is never negative once a write commits.
- Every StockLevel mutation appends exactly one StockMovement in the same
  DB transaction; the counter and the audit trail never diverge.
- apply_delta re-reads the quantity inside its transaction, after taking
  the row lock, so concurrent writers on one product are serialized and the
  second writer sees the first writer's committed result.
- Movements are append-only (no updates/deletes).
"""

INITIAL_STOCK_NOTE = "initial stock"


def _active_stock_query(product_id: uuid.UUID):
    return db.session.query(StockLevel).filter(
        StockLevel.product_id == product_id,
        StockLevel.is_active.is_(True),
    )


def get_available(product_id: uuid.UUID) -> int:
    """Current available quantity; NotFound if the product has no active stock level."""
    level = _active_stock_query(product_id).first()
    if level is None:
        raise NotFound(f"Stock level for product {product_id} not found")
    return level.available_quantity


def has_sufficient(product_id: uuid.UUID, required_quantity: int) -> bool:
    """
    Advisory check. Not atomic with any later write; apply_delta re-validates
    under the row lock.
    """
    return get_available(product_id) >= required_quantity


def apply_delta(
    product_id: uuid.UUID,
    kind: MovementKind,
    quantity: int,
    party_id: uuid.UUID,
    note: str | None = None,
    sale_id: uuid.UUID | None = None,
) -> StockMovement:
    """
    Apply one stock movement atomically.

    Inside a single unit of work: lock the product's active StockLevel row,
    compute the signed delta from kind, re-read the current quantity, reject
    with InsufficientStock if the result would be negative (nothing written),
    otherwise update the counter and append the StockMovement.

    Called inside an enclosing unit of work (a sale), it joins that
    transaction and the caller owns the commit.
    """
    if abs(quantity) > MAX_QUANTITY:
        raise InvalidInput(f"Quantity must not exceed {MAX_QUANTITY}")

    def _op():
        with unit_of_work():
            level = lock_for_update(_active_stock_query(product_id)).populate_existing().first()
            if level is None:
                raise NotFound(f"Stock level for product {product_id} not found")

            delta = kind.signed(quantity)
            current = level.available_quantity
            new_quantity = current + delta

            if new_quantity < 0:
                current_app.logger.warning(
                    "Rejected %s of %d for product %s: available %d",
                    kind.value, quantity, product_id, current,
                )
                raise InsufficientStock(
                    details={"available_quantity": current, "requested_delta": delta},
                )
            if new_quantity > MAX_QUANTITY:
                raise BusinessRuleViolation(
                    f"Resulting stock would exceed {MAX_QUANTITY} units",
                    details={"available_quantity": current, "requested_delta": delta},
                )

            level.available_quantity = new_quantity
            level.party_id = party_id

            movement = StockMovement(
                product_id=product_id,
                kind=kind,
                quantity=quantity,
                occurred_at=utcnow(),
                party_id=party_id,
                note=note,
                sale_id=sale_id,
            )
            db.session.add(movement)
            db.session.flush()
            movement_id = movement.id

        current_app.logger.info(
            "Stock %s %+d for product %s (now %d), movement %s",
            kind.value, delta, product_id, new_quantity, movement_id,
        )
        return movement

    return run_with_retry(_op)


def provision_initial(
    product_id: uuid.UUID,
    party_id: uuid.UUID,
    initial_quantity: int,
) -> StockLevel:
    """
    Open the StockLevel row of a newly inserted product.

    Must run inside the unit of work that inserted the product. There is no
    prior row to re-read, so this bypasses apply_delta; a positive initial
    quantity is still recorded as one INBOUND movement.
    """
    level = StockLevel(
        product_id=product_id,
        party_id=party_id,
        available_quantity=initial_quantity,
        is_active=True,
    )
    db.session.add(level)

    if initial_quantity > 0:
        db.session.add(StockMovement(
            product_id=product_id,
            kind=MovementKind.INBOUND,
            quantity=initial_quantity,
            occurred_at=utcnow(),
            party_id=party_id,
            note=INITIAL_STOCK_NOTE,
        ))

    db.session.flush()
    return level


def list_movements(product_id: uuid.UUID, limit: int = 200) -> list[StockMovement]:
    return (
        db.session.query(StockMovement)
        .filter(
            StockMovement.product_id == product_id,
            StockMovement.is_active.is_(True),
        )
        .order_by(StockMovement.occurred_at.desc(), StockMovement.created_at.desc())
        .limit(limit)
        .all()
    )


def audited_balance(product_id: uuid.UUID) -> int:
    """Signed sum of every movement recorded for the product."""
    signed = case(
        (StockMovement.kind == MovementKind.OUTBOUND, -StockMovement.quantity),
        else_=StockMovement.quantity,
    )
    total = (
        db.session.query(func.coalesce(func.sum(signed), 0))
        .filter(
            StockMovement.product_id == product_id,
            StockMovement.is_active.is_(True),
        )
        .scalar()
    )
    return int(total or 0)


def reconcile(product_id: uuid.UUID) -> dict:
    """Compare the stored counter with the audit trail for one product."""
    available = get_available(product_id)
    audited = audited_balance(product_id)
    return {
        "product_id": str(product_id),
        "available_quantity": available,
        "audited_quantity": audited,
        "consistent": available == audited,
    }
