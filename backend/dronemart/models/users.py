from __future__ import annotations

from ..extensions import db
from dronemart.time_utils import to_utc_z


class User(db.Model):
    """
    Marketplace accounts. A user can own businesses and drones and place orders.

    Deactivation is a soft delete (is_active=False); rows are never removed so
    orders and businesses keep their owner.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(64), nullable=False, unique=True, index=True)
    name = db.Column(db.String(120), nullable=False)
    lastname = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.BigInteger, nullable=True)
    email = db.Column(db.String(255), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "lastname": self.lastname,
            "phone": self.phone,
            "email": self.email,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Admin(db.Model):
    """Membership in this table grants admin rights over other users."""
    __tablename__ = "admins"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    granted_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    user = db.relationship("User", backref=db.backref("admin_membership", uselist=False, lazy=True))
