# Overview: Movement registrar; validates movement requests and drives the ledger.

# backend/polimarket/services/inventory_service.py

from __future__ import annotations

import uuid
from dataclasses import dataclass

from ..errors import InvalidInput
from ..models import MovementKind
from ..validation import MAX_QUANTITY, parse_id, parse_movement_kind
from . import ledger_service
from .party_service import find_active_party
from .products_service import find_active_product
"""
Movement registration rules

Validation is fail-fast and ordered; the first violation wins:
  1. product id parses               -> InvalidInput
  2. product exists and is active    -> ProductNotFound
  3. party id parses                 -> InvalidInput
  4. party exists / is active        -> NotFound / InactiveClient
  5. quantity > 0                    -> InvalidInput
  6. kind is INBOUND/OUTBOUND/ADJUSTMENT (any case) -> InvalidInput

Everything above runs before a transaction opens. The ledger then applies
the movement atomically; its InsufficientStock / NotFound propagate as-is.
The confirmation message is built only after the ledger has committed.
"""


@dataclass(frozen=True)
class MovementReceipt:
    id: uuid.UUID
    message: str


def _confirmation(kind: MovementKind, quantity: int, product_name: str) -> str:
    if kind is MovementKind.INBOUND:
        return f"Inbound registered: +{quantity} units of '{product_name}'. Stock updated."
    if kind is MovementKind.OUTBOUND:
        return f"Outbound registered: -{quantity} units of '{product_name}'. Stock updated."
    return f"Adjustment registered: {quantity} units of '{product_name}'. Stock updated."


def register_movement(product_id, party_id, kind, quantity: int, note: str | None = None) -> MovementReceipt:
    """
    Register an INBOUND, OUTBOUND or ADJUSTMENT movement for a product.

    product_id / party_id / kind may arrive as raw strings from the boundary.
    """
    pid = parse_id(product_id, "product")
    product = find_active_product(pid)
    product_name = product.name

    actor_id = parse_id(party_id, "party")
    find_active_party(actor_id)

    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidInput("Quantity must be greater than 0")
    if quantity > MAX_QUANTITY:
        raise InvalidInput(f"Quantity must not exceed {MAX_QUANTITY}")

    movement_kind = parse_movement_kind(kind)

    movement = ledger_service.apply_delta(
        pid,
        movement_kind,
        quantity,
        actor_id,
        note=note,
    )

    return MovementReceipt(
        id=movement.id,
        message=_confirmation(movement_kind, quantity, product_name),
    )


def get_availability(product_id) -> dict:
    pid = parse_id(product_id, "product")
    find_active_product(pid)
    return {
        "product_id": str(pid),
        "available_quantity": ledger_service.get_available(pid),
    }


def get_movement_history(product_id, limit: int = 200) -> list[dict]:
    pid = parse_id(product_id, "product")
    find_active_product(pid)
    return [m.to_dict() for m in ledger_service.list_movements(pid, limit=limit)]
