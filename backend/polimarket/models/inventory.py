from __future__ import annotations

import uuid

from ..extensions import db
from ..money import format_money
from ..time_utils import to_utc_z, utcnow
from .enums import MovementKind


class Product(db.Model):
    """
    Product master data.

    Products are only created through provisioning, which opens the product's
    StockLevel row in the same transaction. unit_price is an exact decimal.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_active_name", "is_active", "name"),
    )

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    name = db.Column(db.String(255), nullable=False)
    sale_unit = db.Column(db.String(50), nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "sale_unit": self.sale_unit,
            "unit_price": format_money(self.unit_price),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class StockLevel(db.Model):
    """
    Current available quantity of one product.

    Written only by ledger_service (provision_initial / apply_delta), always
    under a row lock and always together with a StockMovement row.
    """
    __tablename__ = "stock_levels"
    __table_args__ = (
        db.UniqueConstraint("product_id", name="uq_stock_levels_product"),
        db.CheckConstraint("available_quantity >= 0", name="ck_stock_levels_non_negative"),
    )

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    product_id = db.Column(db.Uuid, db.ForeignKey("products.id"), nullable=False)

    # Owning / last-touching party
    party_id = db.Column(db.Uuid, db.ForeignKey("parties.id"), nullable=False, index=True)

    available_quantity = db.Column(db.Integer, nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )


class StockMovement(db.Model):
    """
    Append-only audit record of one change to a StockLevel.

    quantity is positive for INBOUND/OUTBOUND; for ADJUSTMENT it is the
    signed delta that was applied.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_product_occurred", "product_id", "occurred_at"),
    )

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    product_id = db.Column(db.Uuid, db.ForeignKey("products.id"), nullable=False)

    kind = db.Column(
        db.Enum(MovementKind, name="movement_kind", native_enum=False, length=16),
        nullable=False,
        index=True,
    )
    quantity = db.Column(db.Integer, nullable=False)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    party_id = db.Column(db.Uuid, db.ForeignKey("parties.id"), nullable=False, index=True)
    note = db.Column(db.Text, nullable=True)

    # Set for the OUTBOUND movements written by a sale
    sale_id = db.Column(db.Uuid, db.ForeignKey("sales.id"), nullable=True, index=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def signed_delta(self) -> int:
        return self.kind.signed(self.quantity)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "product_id": str(self.product_id),
            "kind": self.kind.value,
            "quantity": self.quantity,
            "signed_delta": self.signed_delta,
            "occurred_at": to_utc_z(self.occurred_at),
            "party_id": str(self.party_id),
            "note": self.note,
            "sale_id": str(self.sale_id) if self.sale_id else None,
        }
