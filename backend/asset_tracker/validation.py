from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from asset_tracker.errors import ValidationError, ConflictError  # noqa: F401  (re-exported)
from asset_tracker.time_utils import parse_iso_datetime, parse_iso_date


# Numeric(10, 2) upper bound
MAX_PRICE = Decimal("99999999.99")

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
CONTACT_RE = re.compile(r"^[0-9+\-\s()]+$")

# Keys clients echo back from GET responses; accepted and dropped on write.
READ_ONLY_FIELDS = {"id", "createdAt", "updatedAt", "versionId", "category", "imageUrl"}


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - fields: wire name (camelCase) -> model column key; the writable allowlist
    - required_on_create: wire names required for POST
    - choices: column key -> allowed values for enumerated columns
    """
    fields: dict[str, str]
    required_on_create: set[str] = field(default_factory=set)
    choices: dict[str, tuple] = field(default_factory=dict)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, wire_name: str, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped.lstrip("-").isdigit():
                raise ValidationError(f"{wire_name} must be an integer")
            return int(stripped)
        raise ValidationError(f"{wire_name} must be an integer")

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    # Money: Decimal with two places, never float arithmetic
    if isinstance(coltype, Numeric):
        if isinstance(value, bool):
            raise ValidationError(f"{wire_name} must be a number")
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{wire_name} must be a number")
        if not amount.is_finite():
            raise ValidationError(f"{wire_name} must be a number")
        return amount.quantize(Decimal("0.01"))

    # DateTime before Date: only exact column types matter here
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        try:
            dt = parse_iso_datetime(str(value))
        except ValueError:
            raise ValidationError(f"{wire_name} must be an ISO-8601 datetime")
        if dt is None:
            raise ValidationError(f"{wire_name} must be an ISO-8601 datetime")
        return dt

    if isinstance(coltype, Date):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            d = parse_iso_date(str(value))
        except ValueError:
            raise ValidationError(f"{wire_name} must be an ISO-8601 date")
        if d is None:
            raise ValidationError(f"{wire_name} must be an ISO-8601 date")
        return d

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
    Validates + normalizes incoming JSON (or form data) against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - the policy allowlist and enumerated choices
    - required_on_create (if partial=False)
    Returns a patch dict keyed by model column names.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = [
            f for f in sorted(policy.required_on_create)
            if payload.get(f) is None or (isinstance(payload.get(f), str) and not payload[f].strip())
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)
    patch: dict = {}

    for wire_name, raw in payload.items():
        if wire_name in READ_ONLY_FIELDS:
            continue
        key = policy.fields.get(wire_name)
        if key is None:
            raise ValidationError(f"Field not allowed: {wire_name}")
        col = cols[key]

        # Form posts send "" for untouched optional inputs
        if isinstance(raw, str) and not raw.strip() and col.nullable:
            raw = None

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{wire_name} cannot be null")
            patch[key] = None
            continue

        val = _coerce_value(col, wire_name, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable and val == "":
            raise ValidationError(f"{wire_name} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{wire_name} exceeds max length {col.type.length}")

        allowed = policy.choices.get(key)
        if allowed is not None and val not in allowed:
            raise ValidationError(f"{wire_name} must be one of: {', '.join(allowed)}")

        patch[key] = val

    return patch


def enforce_rules_asset(patch: dict) -> None:
    price = patch.get("purchase_price")
    if price is not None:
        if price < 0:
            raise ValidationError("purchasePrice must be >= 0")
        if price > MAX_PRICE:
            raise ValidationError(f"purchasePrice cannot exceed {MAX_PRICE}")


def enforce_rules_category(patch: dict) -> None:
    if patch.get("code") is not None:
        code = patch["code"].upper()
        if not 2 <= len(code) <= 10:
            raise ValidationError("Code must be between 2-10 characters")
        patch["code"] = code


def enforce_rules_employee(patch: dict) -> None:
    name = patch.get("name")
    if name is not None and not 2 <= len(name) <= 100:
        raise ValidationError("name must be between 2 and 100 characters")

    email = patch.get("email")
    if email is not None:
        if not EMAIL_RE.match(email):
            raise ValidationError("Valid email is required")
        patch["email"] = email.lower()

    contact = patch.get("contact")
    if contact is not None and not CONTACT_RE.match(contact):
        raise ValidationError("contact may only contain digits, spaces, +, - and parentheses")


def optional_condition(value: Any, conditions: tuple) -> str | None:
    """Validate an optional condition value sent to a lifecycle endpoint."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    value = str(value).strip()
    if value not in conditions:
        raise ValidationError(f"condition must be one of: {', '.join(conditions)}")
    return value


def optional_text(value: Any, wire_name: str) -> str | None:
    """Free-text body field (reason, notes): a string or nothing; blank becomes None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{wire_name} must be a string")
    value = value.strip()
    return value or None


def required_id(payload: dict, wire_name: str) -> int:
    """Pull a required integer id out of a request body."""
    raw = payload.get(wire_name)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError(f"{wire_name} is required")
    if isinstance(raw, bool):
        raise ValidationError(f"{wire_name} must be an integer id")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    raise ValidationError(f"{wire_name} must be an integer id")


LIKE_ESCAPE = "\\"


def contains_pattern(search: str) -> str:
    """ILIKE pattern matching `search` literally anywhere; use with escape=LIKE_ESCAPE."""
    escaped = (
        search.strip()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
