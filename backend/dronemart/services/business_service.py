# Overview: Service-layer operations for businesses and their pickup location.

"""
Business Service

Any active user can open a business; it starts unverified and active.
Everything after registration is owner-only and goes through
authorize_resource, so a missing business is 404, someone else's is 403 and
an already deactivated one is 404.

Verification is not exposed here. Operators grant it with
`flask businesses verify`.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Business, Location
from ..validation import FieldRule, PayloadPolicy, validate_payload
from .credential_service import Identity
from .ownership_service import ResourceKind, authorize_resource
from .patching import BusinessPatch, apply_patch
from .persistence import transaction_scope
from .user_service import require_active_user


REGISTER_BUSINESS_POLICY = PayloadPolicy(
    fields={
        "name": FieldRule("str", max_length=120),
        "description": FieldRule("str", nullable=True),
    },
    required_on_create=frozenset({"name"}),
)

UPDATE_BUSINESS_POLICY = PayloadPolicy(
    fields={
        "name": FieldRule("str", max_length=120),
        "description": FieldRule("str"),
    },
)

LOCATION_POLICY = PayloadPolicy(
    fields={
        "name": FieldRule("str", max_length=120, nullable=True),
        "latitude": FieldRule("float"),
        "longitude": FieldRule("float"),
    },
    required_on_create=frozenset({"latitude", "longitude"}),
)


def register_business(identity: Identity, payload: dict) -> dict:
    cleaned = validate_payload(payload=payload, policy=REGISTER_BUSINESS_POLICY, partial=False)

    with transaction_scope() as session:
        require_active_user(identity.subject_id)
        business = Business(
            name=cleaned["name"],
            description=cleaned.get("description"),
            owner_id=identity.subject_id,
            is_verified=False,
            is_active=True,
        )
        session.add(business)
        session.flush()
        business_id = business.id

    current_app.logger.info("Business %s registered by user %s", business_id, identity.subject_id)

    return {
        "business_id": business_id,
        "name": business.name,
        "description": business.description,
        "owner_id": identity.subject_id,
        "verified": False,
        "active": True,
        "message": "Business registered successfully",
    }


def list_businesses(identity: Identity) -> list[dict]:
    """Caller's active businesses, newest first."""
    businesses = (
        db.session.query(Business)
        .filter(Business.owner_id == identity.subject_id, Business.is_active.is_(True))
        .order_by(Business.created_at.desc(), Business.id.desc())
        .all()
    )
    return [b.to_dict() for b in businesses]


def update_business(identity: Identity, business_id: int, payload: dict) -> dict:
    cleaned = validate_payload(payload=payload, policy=UPDATE_BUSINESS_POLICY, partial=True)
    authorize_resource(identity, ResourceKind.BUSINESS, business_id, require_active=True)

    patch = BusinessPatch.from_cleaned(cleaned)
    if patch.is_empty():
        return {"message": f"No fields to update for business {business_id}", "business_id": business_id}

    with transaction_scope():
        business = db.session.get(Business, business_id)
        apply_patch(business, patch)

    return {"message": f"Business {business_id} has been updated successfully", "business_id": business_id}


def deactivate_business(identity: Identity, business_id: int) -> dict:
    authorize_resource(identity, ResourceKind.BUSINESS, business_id, require_active=True)

    with transaction_scope():
        business = db.session.get(Business, business_id)
        business.is_active = False

    current_app.logger.info("Business %s deactivated by user %s", business_id, identity.subject_id)
    return {"message": f"Business {business_id} has been deactivated", "business_id": business_id}


def set_business_location(identity: Identity, business_id: int, payload: dict) -> dict:
    """Create a new location row and point the business at it."""
    cleaned = validate_payload(payload=payload, policy=LOCATION_POLICY, partial=False)
    authorize_resource(identity, ResourceKind.BUSINESS, business_id)

    with transaction_scope() as session:
        location = Location(
            name=cleaned.get("name"),
            latitude=cleaned["latitude"],
            longitude=cleaned["longitude"],
        )
        session.add(location)
        session.flush()
        business = db.session.get(Business, business_id)
        business.location_id = location.id
        location_id = location.id

    return {
        "location_id": location_id,
        "business_id": business_id,
        "name": location.name,
        "latitude": location.latitude,
        "longitude": location.longitude,
        "message": f"Location set successfully for business {business_id}",
    }
