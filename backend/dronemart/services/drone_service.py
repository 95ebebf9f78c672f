"""Drone registration and fleet listing."""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictFailure
from ..extensions import db
from ..models import Drone
from ..validation import MAX_ROW_ID, FieldRule, PayloadPolicy, validate_payload
from .credential_service import Identity
from .ownership_service import ResourceKind, authorize_resource
from .persistence import transaction_scope
from .user_service import require_active_user


REGISTER_DRONE_POLICY = PayloadPolicy(
    fields={
        "name": FieldRule("str", max_length=120),
        "number": FieldRule("int", min_value=0, max_value=MAX_ROW_ID),
    },
    required_on_create=frozenset({"name", "number"}),
)


def register_drone(identity: Identity, payload: dict) -> dict:
    """
    Register a drone for the caller.

    Raises:
        ValidationFailure: missing or malformed fields
        NotFoundFailure / InactiveUserFailure: caller account is gone or inactive
        ConflictFailure: drone number already registered
    """
    cleaned = validate_payload(payload=payload, policy=REGISTER_DRONE_POLICY, partial=False)

    with transaction_scope() as session:
        require_active_user(identity.subject_id)
        drone = Drone(
            name=cleaned["name"],
            number=cleaned["number"],
            user_id=identity.subject_id,
            is_active=True,
        )
        session.add(drone)
        try:
            session.flush()
        except IntegrityError:
            raise ConflictFailure(f"Drone number {cleaned['number']} is already registered")
        drone_id = drone.id

    current_app.logger.info("Drone %s registered by user %s", drone_id, identity.subject_id)

    return {
        "drone_id": drone_id,
        "name": cleaned["name"],
        "number": cleaned["number"],
        "user_id": identity.subject_id,
        "active": True,
        "message": "Drone registered successfully",
    }


def list_drones(identity: Identity) -> list[dict]:
    drones = (
        db.session.query(Drone)
        .filter(Drone.user_id == identity.subject_id, Drone.is_active.is_(True))
        .order_by(Drone.id)
        .all()
    )
    return [d.to_dict() for d in drones]


def deactivate_drone(identity: Identity, drone_id: int) -> dict:
    authorize_resource(identity, ResourceKind.DRONE, drone_id, require_active=True)

    with transaction_scope():
        drone = db.session.get(Drone, drone_id)
        drone.is_active = False

    return {"message": f"Drone {drone_id} has been deactivated", "drone_id": drone_id}
