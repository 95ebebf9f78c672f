"""User account updates and admin deactivation."""

from __future__ import annotations

from ..errors import Entity, InactiveUserFailure, NotFoundFailure
from ..extensions import db
from ..models import User
from ..validation import MAX_BIGINT, FieldRule, PayloadPolicy, validate_payload
from .auth_service import hash_password
from .credential_service import Identity
from .ownership_service import (
    ResourceKind,
    authorize_admin_only,
    authorize_self_or_admin,
    fetch_ownership,
)
from .patching import UserPatch, apply_patch
from .persistence import fetch_admin_flag, fetch_user_active, transaction_scope
from .stats_service import record_account_deactivated


UPDATE_USER_POLICY = PayloadPolicy(
    fields={
        "name": FieldRule("str", max_length=120),
        "lastname": FieldRule("str", max_length=120),
        "phone": FieldRule("int", min_value=0, max_value=MAX_BIGINT),
        "email": FieldRule("str", max_length=255),
        "password": FieldRule("str", max_length=128),
    },
)


def update_user(identity: Identity, user_id: int, payload: dict) -> dict:
    """
    Update profile fields. The caller must be the user or an admin.

    An empty patch succeeds without touching the row.
    """
    cleaned = validate_payload(payload=payload, policy=UPDATE_USER_POLICY, partial=True)

    if fetch_ownership(ResourceKind.USER, user_id) is None:
        raise NotFoundFailure(Entity.USER)
    authorize_self_or_admin(identity, user_id, fetch_admin_flag).enforce()

    if "password" in cleaned:
        cleaned["password_hash"] = hash_password(cleaned.pop("password"))
    patch = UserPatch.from_cleaned(cleaned)

    if patch.is_empty():
        return {"message": f"No fields to update for user {user_id}", "user_id": user_id}

    with transaction_scope():
        user = db.session.get(User, user_id)
        apply_patch(user, patch)

    return {"message": f"User {user_id} has been updated successfully", "user_id": user_id}


def deactivate_user(identity: Identity, user_id: int) -> dict:
    """Admin-only soft delete. Deactivating an inactive user is a 404."""
    fact = fetch_ownership(ResourceKind.USER, user_id)
    if fact is None:
        raise NotFoundFailure(Entity.USER)
    authorize_admin_only(identity, fetch_admin_flag).enforce()
    if not fact.active:
        raise NotFoundFailure(Entity.USER, f"User {user_id} is already inactive")

    with transaction_scope():
        user = db.session.get(User, user_id)
        user.is_active = False
        record_account_deactivated()

    return {"message": f"User {user_id} has been deactivated", "user_id": user_id}


def require_active_user(user_id: int) -> None:
    """The caller must still exist and be active before acting as a buyer or owner."""
    user = fetch_user_active(user_id)
    if user is None:
        raise NotFoundFailure(Entity.USER)
    if not user.active:
        raise InactiveUserFailure()
