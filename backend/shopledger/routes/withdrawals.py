# Overview: Flask API routes for withdrawals; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Withdrawal
from ..services.errors import LedgerError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    ValidationError,
)


withdrawals_bp = Blueprint("withdrawals", __name__, url_prefix="/api/withdrawals")

WITHDRAWAL_FIELDS = ("category", "amount_cents", "note")

WITHDRAWAL_POLICY = ModelValidationPolicy(
    writable_fields=frozenset(WITHDRAWAL_FIELDS),
    required_on_create=frozenset({"category", "amount_cents"}),
    money_fields=frozenset({"amount_cents"}),
)


def _withdrawal_payload(partial: bool) -> dict:
    return validate_payload(
        model=Withdrawal,
        payload=request.get_json(silent=True) or {},
        policy=WITHDRAWAL_POLICY,
        partial=partial,
    )


@withdrawals_bp.get("")
def list_withdrawals_route():
    return jsonify({"items": [w.to_dict() for w in g.ledger.list_withdrawals()]}), 200


@withdrawals_bp.post("")
def record_withdrawal_route():
    try:
        patch = _withdrawal_payload(partial=False)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        entry = g.ledger.record_withdrawal(**patch)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to record withdrawal")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"withdrawal": entry.to_dict()}), 201


@withdrawals_bp.get("/<withdrawal_id>")
def get_withdrawal_route(withdrawal_id: str):
    try:
        entry = g.ledger.get_withdrawal(withdrawal_id)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"withdrawal": entry.to_dict()}), 200


@withdrawals_bp.put("/<withdrawal_id>")
def edit_withdrawal_route(withdrawal_id: str):
    try:
        patch = _withdrawal_payload(partial=True)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        current = g.ledger.get_withdrawal(withdrawal_id)
        fields = {name: getattr(current, name) for name in WITHDRAWAL_FIELDS}
        fields.update(patch)
        entry = g.ledger.edit_withdrawal(withdrawal_id, **fields)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to edit withdrawal")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"withdrawal": entry.to_dict()}), 200


@withdrawals_bp.delete("/<withdrawal_id>")
def delete_withdrawal_route(withdrawal_id: str):
    try:
        g.ledger.delete_withdrawal(withdrawal_id)
    except LedgerError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete withdrawal")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"deleted": withdrawal_id}), 200
