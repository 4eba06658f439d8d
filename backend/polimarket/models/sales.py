from __future__ import annotations

import uuid

from ..extensions import db
from ..money import format_money
from ..time_utils import to_utc_z, utcnow


class Sale(db.Model):
    """
    Sale header. Created together with its lines and their stock debits in
    one transaction; never edited afterwards.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_customer_occurred", "customer_id", "occurred_at"),
        db.Index("ix_sales_branch_occurred", "branch", "occurred_at"),
    )

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    customer_id = db.Column(db.Uuid, db.ForeignKey("parties.id"), nullable=False)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    total = db.Column(db.Numeric(12, 2), nullable=False)
    branch = db.Column(db.String(100), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    lines = db.relationship(
        "SaleLine",
        back_populates="sale",
        order_by="SaleLine.line_number",
        cascade="all, delete-orphan",
    )

    def to_dict(self, include_lines: bool = True) -> dict:
        data = {
            "id": str(self.id),
            "customer_id": str(self.customer_id),
            "occurred_at": to_utc_z(self.occurred_at),
            "total": format_money(self.total),
            "branch": self.branch,
        }
        if include_lines:
            data["lines"] = [line.to_dict() for line in self.lines if line.is_active]
        return data


class SaleLine(db.Model):
    """Individual line item on a sale, priced at the time of sale."""
    __tablename__ = "sale_lines"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    sale_id = db.Column(db.Uuid, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Uuid, db.ForeignKey("products.id"), nullable=False)

    # 1-based position in the submitted request
    line_number = db.Column(db.Integer, nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    sale = db.relationship("Sale", back_populates="lines")
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "line_number": self.line_number,
            "product_id": str(self.product_id),
            "product_name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "unit_price": format_money(self.unit_price),
            "subtotal": format_money(self.subtotal),
        }
