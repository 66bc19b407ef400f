# backend/shopledger/routes/inventory.py
"""
Inventory routes.

Stock only grows through intake here; sales decrement it through the
sales routes.
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..models import StockLevel
from ..services.errors import LedgerError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    ValidationError,
)


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")

INVENTORY_INTAKE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"product_id", "quantity"}),
    required_on_create=frozenset({"product_id", "quantity"}),
)


@inventory_bp.get("")
def list_stock_route():
    """Quantity on hand per product."""
    stock = g.ledger.stock_levels()
    return jsonify({
        "items": [
            {"product_id": p.id, "name": p.name, "quantity": stock.get(p.id, 0)}
            for p in g.ledger.list_products()
        ]
    }), 200


@inventory_bp.get("/<product_id>")
def get_stock_route(product_id: str):
    try:
        quantity = g.ledger.current_stock(product_id)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"product_id": product_id, "quantity": quantity}), 200


@inventory_bp.post("/intake")
def intake_route():
    """
    Receive stock.

    Body: {"product_id": str, "quantity": int > 0}
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(
            model=StockLevel,
            payload=payload,
            policy=INVENTORY_INTAKE_POLICY,
            partial=False,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        quantity = g.ledger.adjust_stock(patch["product_id"], patch["quantity"])
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to record stock intake")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"product_id": patch["product_id"], "quantity": quantity}), 201
