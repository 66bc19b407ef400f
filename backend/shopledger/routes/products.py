# Overview: Flask API routes for products; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Product
from ..services.errors import LedgerError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    ValidationError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"id", "name", "unit_price_cents"}),
    required_on_create=frozenset({"id", "name"}),
    money_fields=frozenset({"unit_price_cents"}),
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """List products with their quantity on hand."""
    stock = g.ledger.stock_levels()
    items = []
    for product in g.ledger.list_products():
        item = product.to_dict()
        item["stock"] = stock.get(product.id, 0)
        items.append(item)
    return jsonify({"items": items}), 200


@products_bp.post("")
def create_product_route():
    """
    Create a new product.

    Body: {"id", "name", "unit_price_cents"?, "starting_stock"?}
    """
    payload = request.get_json(silent=True) or {}

    try:
        if not isinstance(payload, dict):
            raise ValidationError("Invalid JSON payload")
        payload = dict(payload)
        starting_stock = payload.pop("starting_stock", 0)
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        product = g.ledger.add_product(
            product_id=patch["id"],
            name=patch["name"],
            unit_price_cents=patch.get("unit_price_cents"),
            starting_stock=starting_stock,
        )
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    item = product.to_dict()
    item["stock"] = g.ledger.current_stock(product.id)
    return jsonify({"product": item}), 201
