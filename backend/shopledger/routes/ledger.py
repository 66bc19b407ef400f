# Overview: Flask API routes for the payment ledgers and the summary.

from flask import Blueprint, jsonify, g, current_app

from shopledger.money_utils import format_cents

ledger_bp = Blueprint("ledger", __name__, url_prefix="/api/ledger")


@ledger_bp.get("/cash")
def list_cash_route():
    return jsonify({"items": [e.to_dict() for e in g.ledger.list_cash_entries()]}), 200


@ledger_bp.get("/momo")
def list_momo_route():
    return jsonify({"items": [e.to_dict() for e in g.ledger.list_momo_entries()]}), 200


@ledger_bp.get("/summary")
def summary_route():
    """Totals in cents plus display strings in the configured currency."""
    summary = g.ledger.compute_summary()
    symbol = current_app.config.get("CURRENCY_SYMBOL", "$")
    return jsonify({
        "summary": summary,
        "formatted": {key: format_cents(value, symbol) for key, value in summary.items()},
    }), 200
