# Overview: Error taxonomy shared by services and routes.
"""
Every failure the core reports is an ApiError subclass carrying a stable
machine-readable code, the HTTP status the boundary maps it to, and a
human-readable message. Messages only interpolate values that were already
validated (parsed ids, stored product names, integers).
"""
from __future__ import annotations


class ApiError(Exception):
    """Base class for errors rendered as {"error": ..., "code": ...}."""

    code = "INTERNAL_ERROR"
    status = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: dict | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body

    def to_response(self):
        return self.to_dict(), self.status


class InvalidInput(ApiError):
    """Malformed identifier, non-positive quantity, unknown kind, missing field."""
    code = "INVALID_INPUT"
    status = 400
    default_message = "Invalid input"


class NotFound(ApiError):
    """Referenced party, sale or stock level does not exist."""
    code = "NOT_FOUND"
    status = 404
    default_message = "Resource not found"


class ProductNotFound(ApiError):
    code = "PRODUCT_NOT_FOUND"
    status = 404
    default_message = "Product not found or inactive"


class InactiveClient(ApiError):
    code = "INACTIVE_CLIENT"
    status = 400
    default_message = "Party is inactive"


class InsufficientStock(ApiError):
    """Authoritative low-stock signal raised inside the ledger transaction."""
    code = "INSUFFICIENT_STOCK"
    status = 400
    default_message = "Insufficient stock for product"


class BusinessRuleViolation(ApiError):
    code = "BUSINESS_RULE_VIOLATION"
    status = 400
    default_message = "Business rule violation"


class DatabaseError(ApiError):
    """Connection, pool or unexpected store failure. Never exposes driver detail."""
    code = "DATABASE_ERROR"
    status = 500
    default_message = "Database error"
