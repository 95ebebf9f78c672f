from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import ValidationFailure, ValidationKind
from .money import MoneyFormatError, parse_price_cents

# Largest values the Integer and BigInteger columns hold
MAX_ROW_ID = 2_147_483_647
MAX_BIGINT = 9_223_372_036_854_775_807


def invalid(message: str, **details) -> ValidationFailure:
    return ValidationFailure(ValidationKind.INVALID_FIELD, message, details or None)


@dataclass(frozen=True)
class FieldRule:
    """
    How one JSON field is coerced.

    kind: "str" | "int" | "float" | "price"
    column: target attribute when it differs from the JSON key
    min_value / max_value: inclusive bounds for "int" fields
    """
    kind: str
    max_length: int | None = None
    nullable: bool = False
    column: str | None = None
    min_value: int | None = None
    max_value: int | None = None


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Central policy layer:
    - fields: what clients are allowed to send (security boundary)
    - required_on_create: fields required for POST
    """
    fields: dict[str, FieldRule]
    required_on_create: frozenset[str] = field(default_factory=frozenset)


def coerce_int(key: str, value: Any) -> int:
    # Strict: reject bools, floats, decimals and scientific notation
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise invalid(f"{key} must be an integer", field=key)
        if 'e' in stripped.lower():
            raise invalid(f"{key} must be a plain integer (scientific notation not allowed)", field=key)
        if '.' in stripped:
            raise invalid(f"{key} must be an integer (no decimals)", field=key)
        try:
            return int(stripped)
        except ValueError:
            raise invalid(f"{key} must be an integer", field=key)
    if isinstance(value, float):
        raise invalid(f"{key} must be an integer, not a decimal", field=key)
    raise invalid(f"{key} must be an integer", field=key)


def coerce_float(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise invalid(f"{key} must be a number", field=key)
    try:
        return float(value)
    except ValueError:
        raise invalid(f"{key} must be a number", field=key)


def _coerce_value(key: str, rule: FieldRule, value: Any):
    if rule.kind == "int":
        number = coerce_int(key, value)
        if rule.min_value is not None and number < rule.min_value:
            raise invalid(f"{key} must be at least {rule.min_value}", field=key)
        if rule.max_value is not None and number > rule.max_value:
            raise invalid(f"{key} must be at most {rule.max_value}", field=key)
        return number

    if rule.kind == "float":
        return coerce_float(key, value)

    if rule.kind == "price":
        try:
            return parse_price_cents(value)
        except MoneyFormatError as e:
            raise invalid(str(e), field=key)

    # Strings
    if not isinstance(value, str):
        raise invalid(f"{key} must be a string", field=key)
    val = value.strip()
    if not val and not rule.nullable:
        raise invalid(f"{key} cannot be blank", field=key)
    if rule.max_length and len(val) > rule.max_length:
        raise invalid(f"{key} exceeds max length {rule.max_length}", field=key)
    return val


def validate_payload(*, payload: Any, policy: PayloadPolicy, partial: bool) -> dict:
    """
    Validates + normalizes incoming JSON against a policy allowlist.
    Returns a cleaned dict keyed by target column, with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise invalid("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) is None)
        if missing:
            raise invalid(f"Missing required fields: {', '.join(missing)}", missing=missing)

    for k in payload.keys():
        if k not in policy.fields:
            raise invalid(f"Field not allowed: {k}", field=k)

    cleaned: dict = {}
    for k, raw in payload.items():
        rule = policy.fields[k]
        target = rule.column or k

        if raw is None:
            if partial and not rule.nullable:
                # Absent and null mean "leave unchanged" on a patch
                continue
            if not rule.nullable:
                raise invalid(f"{k} cannot be null", field=k)
            cleaned[target] = None
            continue

        cleaned[target] = _coerce_value(k, rule, raw)

    return cleaned
