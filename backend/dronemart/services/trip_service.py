# Overview: Service-layer operations for delivery trips.

"""
Trip registration

A trip flies one order from the drone's reported start position to the
pickup location of the business that sells the order's products.

RULES:
- caller must be an existing, active user
- weight must be greater than zero
- the drone must exist (404), be the caller's (403) and be active (400)
- the order must exist (404) and be the caller's (403)
- the selling business must have a location (400)

Distance and estimated time are the configured placeholder values
(TRIP_PLACEHOLDER_DISTANCE_KM / TRIP_PLACEHOLDER_EST_MINUTES); no flight
planning is done. New trips are always in state "Requested".
"""

from __future__ import annotations

from flask import current_app

from ..errors import Entity, NotFoundFailure
from ..extensions import db
from ..models import Business, Location, OrderLine, Product, Trip
from ..validation import MAX_ROW_ID, FieldRule, PayloadPolicy, invalid, validate_payload
from .credential_service import Identity
from .ownership_service import ResourceKind, authorize_resource
from .persistence import transaction_scope
from .stats_service import record_trip_requested
from .user_service import require_active_user


TRIP_REQUESTED = "Requested"

REGISTER_TRIP_POLICY = PayloadPolicy(
    fields={
        "drone_id": FieldRule("int", max_value=MAX_ROW_ID),
        "order_id": FieldRule("int", max_value=MAX_ROW_ID),
        "weight": FieldRule("float"),
        "from_latitude": FieldRule("float"),
        "from_longitude": FieldRule("float"),
    },
    required_on_create=frozenset({"drone_id", "order_id", "weight", "from_latitude", "from_longitude"}),
)


def fetch_order_pickup_location_id(order_id: int):
    """
    Location of the business selling the order's first line.

    Returns (found, location_id): found is False when the order has no lines
    to resolve a business from.
    """
    row = (
        db.session.query(Business.location_id)
        .select_from(OrderLine)
        .join(Product, OrderLine.product_id == Product.id)
        .join(Business, Product.business_id == Business.id)
        .filter(OrderLine.order_id == order_id)
        .order_by(OrderLine.id)
        .first()
    )
    if row is None:
        return False, None
    return True, row.location_id


def register_trip(identity: Identity, payload: dict) -> dict:
    cleaned = validate_payload(payload=payload, policy=REGISTER_TRIP_POLICY, partial=False)

    require_active_user(identity.subject_id)

    if cleaned["weight"] <= 0:
        raise invalid("weight must be greater than zero", field="weight")

    drone_id = cleaned["drone_id"]
    order_id = cleaned["order_id"]

    drone = authorize_resource(identity, ResourceKind.DRONE, drone_id)
    if not drone.active:
        raise invalid(f"Drone {drone_id} is not active", field="drone_id")

    authorize_resource(identity, ResourceKind.ORDER, order_id)

    found, to_location_id = fetch_order_pickup_location_id(order_id)
    if not found:
        raise NotFoundFailure(Entity.BUSINESS, f"No business found for order {order_id}")
    if to_location_id is None:
        raise invalid("Business has no location assigned", field="order_id")

    distance = float(current_app.config["TRIP_PLACEHOLDER_DISTANCE_KM"])
    est_time = float(current_app.config["TRIP_PLACEHOLDER_EST_MINUTES"])

    with transaction_scope() as session:
        start = Location(
            name=f"Drone {drone_id} start position",
            latitude=cleaned["from_latitude"],
            longitude=cleaned["from_longitude"],
        )
        session.add(start)
        session.flush()

        trip = Trip(
            weight=cleaned["weight"],
            distance=distance,
            est_time=est_time,
            state=TRIP_REQUESTED,
            order_id=order_id,
            drone_id=drone_id,
            from_location_id=start.id,
            to_location_id=to_location_id,
        )
        session.add(trip)
        session.flush()
        trip_id = trip.id
        from_location_id = start.id

        record_trip_requested()

    current_app.logger.info("Trip %s requested for order %s with drone %s", trip_id, order_id, drone_id)

    return {
        "trip_id": trip_id,
        "weight": cleaned["weight"],
        "distance": distance,
        "est_time": est_time,
        "state": TRIP_REQUESTED,
        "order_id": order_id,
        "from_location_id": from_location_id,
        "to_location_id": to_location_id,
        "drone_id": drone_id,
        "message": "Trip registered successfully",
    }
