"""
Ledger error kinds.

Every error is recoverable at the call site: the store rolls back its
session before raising, so prior state stays intact. status_code is the
HTTP status the API answers with.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for rejected ledger operations."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": str(self), "details": self.details}


class InvalidInput(LedgerError):
    """Non-positive amounts, missing payment reference, blank required text."""
    status_code = 400


class InsufficientStock(LedgerError):
    """Requested quantity exceeds available stock for the product."""
    status_code = 409


class NotFound(LedgerError):
    """Referenced record id does not exist."""
    status_code = 404
