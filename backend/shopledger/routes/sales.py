# Overview: Flask API routes for sales; parses input and returns JSON responses.

"""Sales API routes"""

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Sale
from ..services.errors import LedgerError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    ValidationError,
)


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")

SALE_FIELDS = ("product_id", "quantity", "unit_price_cents", "payment_method", "payment_ref", "customer")

SALE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset(SALE_FIELDS),
    required_on_create=frozenset({"product_id", "quantity", "unit_price_cents", "payment_method"}),
    money_fields=frozenset({"unit_price_cents"}),
)


def _sale_payload(partial: bool) -> dict:
    return validate_payload(
        model=Sale,
        payload=request.get_json(silent=True) or {},
        policy=SALE_POLICY,
        partial=partial,
    )


@sales_bp.get("")
def list_sales_route():
    return jsonify({"items": [s.to_dict() for s in g.ledger.list_sales()]}), 200


@sales_bp.post("")
def record_sale_route():
    """
    Record a sale.

    Body: {"product_id", "quantity", "unit_price_cents", "payment_method",
           "payment_ref"? (required for mobile-money), "customer"?}
    """
    try:
        patch = _sale_payload(partial=False)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        sale = g.ledger.record_sale(**patch)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"sale": sale.to_dict()}), 201


@sales_bp.get("/<sale_id>")
def get_sale_route(sale_id: str):
    try:
        sale = g.ledger.get_sale(sale_id)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"sale": sale.to_dict()}), 200


@sales_bp.put("/<sale_id>")
def edit_sale_route(sale_id: str):
    """
    Edit a sale. Fields left out of the body keep their current value;
    stock and the payment ledger entry are reconciled by the store.
    """
    try:
        patch = _sale_payload(partial=True)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        current = g.ledger.get_sale(sale_id)
        fields = {name: getattr(current, name) for name in SALE_FIELDS}
        fields.update(patch)
        sale = g.ledger.edit_sale(sale_id, **fields)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to edit sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"sale": sale.to_dict()}), 200


@sales_bp.delete("/<sale_id>")
def delete_sale_route(sale_id: str):
    try:
        g.ledger.delete_sale(sale_id)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"deleted": sale_id}), 200
