from __future__ import annotations

from ..extensions import db


class Stats(db.Model):
    """Global counters. A single row with id=1."""
    __tablename__ = "stats"

    id = db.Column(db.Integer, primary_key=True)

    total_trips = db.Column(db.Integer, nullable=False, default=0)
    today_trips = db.Column(db.Integer, nullable=False, default=0)
    weekend_trips = db.Column(db.Integer, nullable=False, default=0)
    monthly_trips = db.Column(db.Integer, nullable=False, default=0)

    avg_delivery_time = db.Column(db.Float, nullable=False, default=0.0)
    avg_packing_time = db.Column(db.Float, nullable=False, default=0.0)
    avg_battery_consumption_per_km = db.Column(db.Float, nullable=False, default=0.0)
    cancellation_rate = db.Column(db.Float, nullable=False, default=0.0)

    active_accounts = db.Column(db.Integer, nullable=False, default=0)
    inactive_accounts = db.Column(db.Integer, nullable=False, default=0)
    total_accounts = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            "total_trips": self.total_trips,
            "today_trips": self.today_trips,
            "weekend_trips": self.weekend_trips,
            "monthly_trips": self.monthly_trips,
            "avg_delivery_time": self.avg_delivery_time,
            "avg_packing_time": self.avg_packing_time,
            "avg_battery_consumption_per_km": self.avg_battery_consumption_per_km,
            "cancellation_rate": self.cancellation_rate,
            "active_accounts": self.active_accounts,
            "inactive_accounts": self.inactive_accounts,
            "total_accounts": self.total_accounts,
        }
