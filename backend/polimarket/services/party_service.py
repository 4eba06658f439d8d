# Overview: Party lookup and creation (customers, sellers, suppliers).

from __future__ import annotations

import uuid

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import BusinessRuleViolation, DatabaseError, InactiveClient, NotFound
from ..extensions import db
from ..models import Party, PartyProfile
from ..validation import optional_text, parse_id, parse_profile, require_text
from .concurrency import run_with_retry, unit_of_work


def get_party(party_id: uuid.UUID) -> Party:
    """Load a party regardless of its active flag; NotFound if absent."""
    party = db.session.get(Party, party_id)
    if party is None:
        raise NotFound(f"Party {party_id} not found")
    return party


def find_active_party(party_id: uuid.UUID) -> Party:
    """Load a party that may take part in new operations."""
    party = get_party(party_id)
    if not party.is_active:
        raise InactiveClient()
    return party


def list_parties(profile: PartyProfile | None = None) -> list[Party]:
    query = db.session.query(Party).filter(Party.is_active.is_(True))
    if profile is not None:
        query = query.filter(Party.profile == profile)
    return query.order_by(Party.name.asc(), Party.created_at.asc()).all()


def first_active_seller() -> Party | None:
    """
    Default actor resolver for stock provisioning: the earliest registered
    active seller. Replace with the authenticated caller once one exists.
    """
    return (
        db.session.query(Party)
        .filter(Party.is_active.is_(True), Party.profile == PartyProfile.SELLER)
        .order_by(Party.created_at.asc(), Party.name.asc())
        .first()
    )


def create_party(
    *,
    name,
    document,
    profile,
    email=None,
    phone=None,
) -> Party:
    """
    Register a party. The document must be unique among active parties.
    """
    name = require_text(name, "name", 255)
    document = require_text(document, "document", 50)
    profile = parse_profile(profile)
    email = optional_text(email, "email", 255)
    phone = optional_text(phone, "phone", 20)

    existing = (
        db.session.query(Party.id)
        .filter(Party.document == document, Party.is_active.is_(True))
        .first()
    )
    if existing is not None:
        raise BusinessRuleViolation(f"A party with document {document} already exists")

    def _op():
        with unit_of_work():
            party = Party(
                name=name,
                document=document,
                profile=profile,
                email=email,
                phone=phone,
                is_active=True,
            )
            db.session.add(party)
            db.session.flush()
        return party

    try:
        party = run_with_retry(_op)
    except DatabaseError as exc:
        # Lost a race with a concurrent insert of the same document
        if isinstance(exc.__cause__, IntegrityError):
            raise BusinessRuleViolation(f"A party with document {document} already exists") from exc
        raise
    current_app.logger.info("Registered %s party %s", profile.value, party.id)
    return party


def get_party_by_raw_id(raw_id) -> Party:
    return get_party(parse_id(raw_id, "party"))
