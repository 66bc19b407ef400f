# Overview: Flask API routes for the customer directory.

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Customer
from ..services.errors import LedgerError
from ..validation import ModelValidationPolicy, validate_payload, ValidationError


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name"}),
    required_on_create=frozenset({"name"}),
)


@customers_bp.get("")
def list_customers_route():
    return jsonify({"items": [c.to_dict() for c in g.ledger.list_customers()]}), 200


@customers_bp.post("")
def add_customer_route():
    try:
        patch = validate_payload(
            model=Customer,
            payload=request.get_json(silent=True) or {},
            policy=CUSTOMER_POLICY,
            partial=False,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        customer = g.ledger.add_customer(patch["name"])
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to add customer")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"customer": customer.to_dict()}), 201


@customers_bp.delete("/<name>")
def delete_customer_route(name: str):
    """Remove a customer from the directory. Past sales keep the name."""
    try:
        g.ledger.delete_customer(name)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete customer")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"deleted": name}), 200
