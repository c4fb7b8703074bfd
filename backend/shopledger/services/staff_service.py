# Overview: Service-layer operations for the staff directory.

"""
Staff Directory

SECURITY NOTES:
- Passcodes are short numeric codes (3-8 digits) hashed with bcrypt.
- Lookups are exact: the candidate code is checked against each active
  staff member's hash with bcrypt.checkpw (timing-safe).
- A passcode identifies at most one active staff member per shop. Because
  hashes are salted this is enforced here, not by a unique index.
- Staff with transaction history are deactivated, never deleted.
"""

from __future__ import annotations

import bcrypt
from flask import current_app

from .. import persistence
from ..errors import ConflictError, NotFound, ValidationError
from ..models import Staff
from ..validation import ModelValidationPolicy, validate_passcode, validate_payload
from .shop_service import get_shop

STAFF_POLICY = ModelValidationPolicy(
    writable_fields={"name", "passcode", "is_active"},
    required_on_create={"name", "passcode"},
    extra_fields={"passcode"},
)


def hash_passcode(passcode: str) -> str:
    salt = bcrypt.gensalt(rounds=current_app.config["PASSCODE_BCRYPT_ROUNDS"])
    return bcrypt.hashpw(passcode.encode("utf-8"), salt).decode("utf-8")


def verify_passcode(passcode: str, passcode_hash: str) -> bool:
    try:
        return bcrypt.checkpw(passcode.encode("utf-8"), passcode_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def get_staff(shop_id: int, staff_id: int) -> Staff:
    staff = persistence.get("staff", staff_id)
    if staff is None or staff.shop_id != shop_id:
        raise NotFound("Staff not found", details={"staff_id": staff_id})
    return staff


def list_staff(shop_id: int) -> list[Staff]:
    return persistence.query("staff", {"shop_id": shop_id}, order=["name", "id"])


def list_active_staff(shop_id: int) -> list[Staff]:
    return persistence.query(
        "staff",
        {"shop_id": shop_id, "is_active": True},
        order=["name", "id"],
    )


def _match_active(shop_id: int, passcode: str, exclude_id: int | None = None) -> Staff | None:
    for member in list_active_staff(shop_id):
        if member.id == exclude_id:
            continue
        if verify_passcode(passcode, member.passcode_hash):
            return member
    return None


def _ensure_passcode_available(shop_id: int, passcode: str, exclude_id: int | None = None) -> None:
    if _match_active(shop_id, passcode, exclude_id) is not None:
        raise ConflictError("Passcode already in use by another active staff member")


def find_by_passcode(shop_id: int, passcode) -> Staff:
    """Exact-match lookup among active staff. Raises NotFound."""
    try:
        code = validate_passcode(passcode)
    except ValidationError:
        raise NotFound("No active staff member matches this passcode")
    member = _match_active(shop_id, code)
    if member is None:
        raise NotFound("No active staff member matches this passcode")
    return member


def upsert_staff(shop_id: int, fields: dict) -> Staff:
    """
    Create a staff member, or patch one when fields carries an "id".

    Reactivating a staff member requires supplying a passcode so that
    uniqueness among active staff can be re-checked.
    """
    fields = dict(fields or {})
    staff_id = fields.pop("id", None)

    if staff_id is None:
        get_shop(shop_id)
        patch = validate_payload(model=Staff, payload=fields, policy=STAFF_POLICY, partial=False)
        code = validate_passcode(patch.pop("passcode"))
        if patch.get("is_active", True):
            _ensure_passcode_available(shop_id, code)
        return persistence.insert(
            "staff",
            {"shop_id": shop_id, "passcode_hash": hash_passcode(code), **patch},
        )

    current = get_staff(shop_id, staff_id)
    patch = validate_payload(model=Staff, payload=fields, policy=STAFF_POLICY, partial=True)
    will_be_active = patch.get("is_active", current.is_active)

    if "passcode" in patch:
        code = validate_passcode(patch.pop("passcode"))
        if will_be_active:
            _ensure_passcode_available(shop_id, code, exclude_id=staff_id)
        patch["passcode_hash"] = hash_passcode(code)
    elif will_be_active and not current.is_active:
        raise ValidationError("passcode is required when reactivating a staff member")

    return persistence.update("staff", staff_id, patch)


def deactivate_staff(shop_id: int, staff_id: int) -> Staff:
    staff = get_staff(shop_id, staff_id)
    if not staff.is_active:
        return staff
    return persistence.update("staff", staff_id, {"is_active": False})


def delete_staff(shop_id: int, staff_id: int) -> None:
    get_staff(shop_id, staff_id)
    history = persistence.count("transactions", {"staff_id": staff_id})
    if history:
        raise ConflictError(
            "Staff member has transaction history; deactivate instead",
            details={"staff_id": staff_id, "transaction_count": history},
        )
    persistence.delete("staff", staff_id)
