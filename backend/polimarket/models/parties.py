from __future__ import annotations

import uuid

from ..extensions import db
from ..time_utils import to_utc_z
from .enums import PartyProfile


class Party(db.Model):
    """
    A customer, seller or supplier.

    Parties act as the recorded actor of stock movements and as the customer
    of sales. Only active parties take part in new operations; the document
    number is unique among active parties.
    """
    __tablename__ = "parties"
    __table_args__ = (
        db.Index(
            "uq_parties_active_document",
            "document",
            unique=True,
            postgresql_where=db.text("is_active"),
            sqlite_where=db.text("is_active"),
        ),
        db.Index("ix_parties_profile_active", "profile", "is_active"),
    )

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    name = db.Column(db.String(255), nullable=False)
    document = db.Column(db.String(50), nullable=False)
    profile = db.Column(
        db.Enum(PartyProfile, name="party_profile", native_enum=False, length=16),
        nullable=False,
    )
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(20), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Party id={self.id} profile={self.profile} document={self.document!r}>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "document": self.document,
            "profile": self.profile.value,
            "email": self.email,
            "phone": self.phone,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
