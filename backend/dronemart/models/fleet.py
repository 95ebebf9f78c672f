from __future__ import annotations

from ..extensions import db
from dronemart.time_utils import to_utc_z


class Drone(db.Model):
    """A delivery drone registered by a user. `number` is globally unique."""
    __tablename__ = "drones"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    number = db.Column(db.Integer, nullable=False, unique=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    owner = db.relationship("User", backref=db.backref("drones", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "number": self.number,
            "user_id": self.user_id,
            "active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Trip(db.Model):
    """
    One delivery leg for an order, flown by a drone.

    Telemetry columns (packing time, battery readings) stay NULL until the
    drone reports them.
    """
    __tablename__ = "trips"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    weight = db.Column(db.Float, nullable=False)
    distance = db.Column(db.Float, nullable=False)
    est_time = db.Column(db.Float, nullable=False)
    state = db.Column(db.String(16), nullable=False, default="Requested")

    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    drone_id = db.Column(db.Integer, db.ForeignKey("drones.id"), nullable=False, index=True)
    from_location_id = db.Column(db.Integer, db.ForeignKey("locations.id"), nullable=False)
    to_location_id = db.Column(db.Integer, db.ForeignKey("locations.id"), nullable=False)

    packing_time = db.Column(db.Float, nullable=True)
    battery_init = db.Column(db.Float, nullable=True)
    battery_end = db.Column(db.Float, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "weight": self.weight,
            "distance": self.distance,
            "est_time": self.est_time,
            "state": self.state,
            "order_id": self.order_id,
            "drone_id": self.drone_id,
            "from_location_id": self.from_location_id,
            "to_location_id": self.to_location_id,
            "created_at": to_utc_z(self.created_at),
        }
