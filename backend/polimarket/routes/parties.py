# Overview: Flask API routes for parties; parses input and returns JSON responses.

from flask import Blueprint, request

from ..decorators import handle_api_errors
from ..services import party_service
from ..validation import parse_profile

parties_bp = Blueprint("parties", __name__, url_prefix="/v1/parties")


@parties_bp.post("")
@handle_api_errors("create party")
def create_party_route():
    """
    Register a customer, seller or supplier.

    Body: name, document, profile (SELLER | CUSTOMER | SUPPLIER), email?, phone?
    """
    payload = request.get_json(silent=True) or {}

    party = party_service.create_party(
        name=payload.get("name"),
        document=payload.get("document"),
        profile=payload.get("profile"),
        email=payload.get("email"),
        phone=payload.get("phone"),
    )
    return party.to_dict(), 201


@parties_bp.get("")
@handle_api_errors("list parties")
def list_parties_route():
    """
    List active parties.

    Query params:
    - profile: optional filter, case-insensitive
    """
    raw_profile = request.args.get("profile")
    profile = parse_profile(raw_profile) if raw_profile else None

    parties = party_service.list_parties(profile)
    return {"items": [p.to_dict() for p in parties], "count": len(parties)}


@parties_bp.get("/<party_id>")
@handle_api_errors("get party")
def get_party_route(party_id: str):
    party = party_service.get_party_by_raw_id(party_id)
    return party.to_dict(), 200
