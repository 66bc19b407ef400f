# Overview: Request payload checks driven by model column metadata.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Integer, String, Text


# Largest accepted amount: 9,999,999.99 in cents
MAX_AMOUNT_CENTS = 999_999_999


class ValidationError(ValueError):
    """Malformed request body (400)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    What a route lets clients send for one model.

    - writable_fields: allowlist; anything else is rejected
    - required_on_create: must be present when partial=False
    - money_fields: integer cents, capped at MAX_AMOUNT_CENTS
    """
    writable_fields: frozenset
    required_on_create: frozenset = field(default_factory=frozenset)
    money_fields: frozenset = field(default_factory=frozenset)


def _check_integer(key: str, value: Any) -> int:
    # JSON numbers only: no bools, no floats, no numeric strings
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, float):
            raise ValidationError(f"{key} must be an integer, not a decimal")
        raise ValidationError(f"{key} must be an integer")
    return value


def _check_text(key: str, value: Any, column) -> str:
    if isinstance(value, (dict, list, bool)):
        raise ValidationError(f"{key} must be a string")
    text = str(value).strip()
    if text == "" and not column.nullable:
        raise ValidationError(f"{key} cannot be blank")
    length = getattr(column.type, "length", None)
    if length and len(text) > length:
        raise ValidationError(f"{key} exceeds max length {length}")
    return text


def validate_payload(*, model, payload: Any, policy: ModelValidationPolicy, partial: bool) -> dict:
    """
    Check a JSON body against the policy and the model's columns and return
    the cleaned fields.

    partial=False is create semantics (required fields enforced);
    partial=True only checks the keys that were sent.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    unknown = sorted(k for k in payload if k not in policy.writable_fields)
    if unknown:
        raise ValidationError(f"Field not allowed: {', '.join(unknown)}")

    if not partial:
        missing = sorted(policy.required_on_create - payload.keys())
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    columns = {c.key: c for c in model.__mapper__.columns}
    cleaned: dict = {}

    for key, raw in payload.items():
        column = columns[key]
        if raw is None:
            if not column.nullable:
                raise ValidationError(f"{key} cannot be null")
            cleaned[key] = None
        elif isinstance(column.type, Integer):
            cleaned[key] = _check_integer(key, raw)
        elif isinstance(column.type, (String, Text)):
            cleaned[key] = _check_text(key, raw, column)
        else:
            cleaned[key] = raw

    for key in policy.money_fields:
        amount = cleaned.get(key)
        if amount is not None and amount > MAX_AMOUNT_CENTS:
            raise ValidationError(f"{key} cannot exceed {MAX_AMOUNT_CENTS} cents")

    return cleaned
