from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError


# Numeric(12, 2) upper bound: 9,999,999,999.99
MAX_AMOUNT = Decimal("9999999999.99")
CENT = Decimal("0.01")

PASSCODE_MIN_LENGTH = 3
PASSCODE_MAX_LENGTH = 8


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for create
    - extra_fields: writable keys that are not model columns (e.g. a raw passcode)
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore
    extra_fields: set[str] | None = None


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def to_money(value: Any, field: str, *, error_cls: type[ValidationError] = ValidationError) -> Decimal:
    """
    Coerce a currency input to an exact two-place Decimal.

    Floats are converted through their repr so 19.99 stays 19.99; more than
    two decimal places is rejected rather than silently rounded.
    """
    if value is None or isinstance(value, bool):
        raise error_cls(f"{field} must be a decimal amount")
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
    except (InvalidOperation, ValueError):
        raise error_cls(f"{field} must be a decimal amount")
    if not amount.is_finite():
        raise error_cls(f"{field} must be a finite amount")
    # Checked before quantize: huge exponents overflow the decimal context
    if abs(amount) > MAX_AMOUNT:
        raise error_cls(f"{field} cannot exceed {MAX_AMOUNT}")
    if amount != amount.quantize(CENT):
        raise error_cls(f"{field} must have at most 2 decimal places")
    amount = amount.quantize(CENT)
    return amount


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        # String input - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer")
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        if isinstance(value, float):
            raise ValidationError(f"{col.key} must be an integer, not a decimal")
        raise ValidationError(f"{col.key} must be an integer")

    # Decimals (money and percentages)
    if isinstance(coltype, Numeric):
        return to_money(value, col.key)

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be a boolean")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming fields against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)
    extra = policy.extra_fields or set()

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols and k not in extra:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        if k in extra:
            patch[k] = raw
            continue

        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_item(patch: dict) -> None:
    """
    Catalog rules that are not captured by SQLAlchemy metadata alone.
    """
    if patch.get("base_price") is not None and patch["base_price"] < 0:
        raise ValidationError("base_price must be >= 0")

    for key in ("stock_quantity", "min_stock_alert"):
        if patch.get(key) is not None and patch[key] < 0:
            raise ValidationError(f"{key} must be >= 0")

    pct = patch.get("max_discount_percentage")
    if pct is not None and not (Decimal("0") <= pct <= Decimal("100")):
        raise ValidationError("max_discount_percentage must be between 0 and 100")

    if patch.get("max_discount_fixed") is not None and patch["max_discount_fixed"] < 0:
        raise ValidationError("max_discount_fixed must be >= 0")


def validate_passcode(passcode: Any) -> str:
    """Passcodes are short numeric codes entered on the shop counter."""
    if not isinstance(passcode, (str, int)) or isinstance(passcode, bool):
        raise ValidationError("passcode must be a numeric string")
    code = str(passcode).strip()
    if not (code.isascii() and code.isdigit()):
        raise ValidationError("passcode must contain digits only")
    if not (PASSCODE_MIN_LENGTH <= len(code) <= PASSCODE_MAX_LENGTH):
        raise ValidationError(
            f"passcode must be {PASSCODE_MIN_LENGTH}-{PASSCODE_MAX_LENGTH} digits"
        )
    return code
