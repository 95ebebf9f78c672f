from __future__ import annotations

from ..extensions import db
from dronemart.money import format_cents
from dronemart.time_utils import to_utc_z


class Order(db.Model):
    """
    Order header. Created together with its lines in one transaction.

    flight_number is derived from the order count and wraps every 1000
    orders, so it is not unique.
    """
    __tablename__ = "orders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    flight_number = db.Column(db.String(16), nullable=False, index=True)
    total_price_cents = db.Column(db.Integer, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    approved = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    buyer = db.relationship("User", backref=db.backref("orders", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "flight_number": self.flight_number,
            "total_price": format_cents(self.total_price_cents),
            "total_price_cents": self.total_price_cents,
            "user_id": self.user_id,
            "approved": self.approved,
            "created_at": to_utc_z(self.created_at),
        }


class OrderLine(db.Model):
    """Product and amount on an order, with the unit price at purchase time."""
    __tablename__ = "order_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)

    amount = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)

    order = db.relationship("Order", backref=db.backref("lines", lazy=True, order_by="OrderLine.id"))
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "amount": self.amount,
            "unit_price": format_cents(self.unit_price_cents),
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.unit_price_cents * self.amount,
        }
