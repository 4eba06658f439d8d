from __future__ import annotations

import enum


class PartyProfile(str, enum.Enum):
    """Role a party plays in the business."""
    SELLER = "SELLER"
    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"


class MovementKind(str, enum.Enum):
    """
    Kind of stock movement.

    INBOUND and OUTBOUND carry an unsigned quantity whose sign is implied by
    the kind. ADJUSTMENT carries the signed delta itself.
    """
    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"
    ADJUSTMENT = "ADJUSTMENT"

    def signed(self, quantity: int) -> int:
        if self is MovementKind.INBOUND:
            return quantity
        if self is MovementKind.OUTBOUND:
            return -quantity
        return quantity
