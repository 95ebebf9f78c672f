# Overview: Ownership Authorizer; owner-only, self-or-admin and admin-only policies.

"""
Ownership Authorizer

Businesses, products, drones, orders and user accounts all answer the same
question ("does the caller own this?") through one check, parameterized by a
per-kind ownership lookup in OWNERSHIP_LOOKUPS.

ORDERING (applied by authorize_resource for every ownership-scoped call):
1. existence   -> NotFoundFailure      (404)
2. ownership   -> AuthzFailure         (403)
3. state       -> NotFoundFailure      (404, "already inactive")

Ownership facts and admin membership are read from the database on every
call. Nothing here is cached between requests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from flask import current_app
from sqlalchemy import literal

from ..errors import AuthzFailure, AuthzReason, Entity, NotFoundFailure
from ..extensions import db
from ..models import Business, Drone, Order, Product, User
from .credential_service import Identity
from .persistence import fetch_admin_flag, row_id_in_range


class ResourceKind(str, Enum):
    USER = "user"
    BUSINESS = "business"
    PRODUCT = "product"
    DRONE = "drone"
    ORDER = "order"

    @property
    def entity(self) -> Entity:
        return Entity[self.name]


@dataclass(frozen=True)
class OwnershipFact:
    kind: ResourceKind
    resource_id: int
    owner_user_id: int
    active: bool


@dataclass(frozen=True)
class AuthzDecision:
    allowed: bool
    reason: AuthzReason | None = None

    def enforce(self) -> None:
        if not self.allowed:
            raise AuthzFailure(self.reason)


ALLOW = AuthzDecision(allowed=True)


def authorize_owner_only(identity: Identity, owner_user_id: int) -> AuthzDecision:
    if identity.subject_id == owner_user_id:
        return ALLOW
    return AuthzDecision(allowed=False, reason=AuthzReason.NOT_OWNER)


def authorize_self_or_admin(
    identity: Identity,
    target_user_id: int,
    is_admin_lookup: Callable[[int], bool] = fetch_admin_flag,
) -> AuthzDecision:
    if identity.subject_id == target_user_id:
        return ALLOW
    if is_admin_lookup(identity.subject_id):
        return ALLOW
    return AuthzDecision(allowed=False, reason=AuthzReason.NOT_AUTHORIZED)


def authorize_admin_only(
    identity: Identity,
    is_admin_lookup: Callable[[int], bool] = fetch_admin_flag,
) -> AuthzDecision:
    if is_admin_lookup(identity.subject_id):
        return ALLOW
    return AuthzDecision(allowed=False, reason=AuthzReason.NOT_AUTHORIZED)


# Per-kind ownership lookups: (owner_user_id, active) rows

def _user_owner(resource_id: int):
    return db.session.query(User.id, User.is_active).filter(User.id == resource_id).first()


def _business_owner(resource_id: int):
    return (
        db.session.query(Business.owner_id, Business.is_active)
        .filter(Business.id == resource_id)
        .first()
    )


def _product_owner(resource_id: int):
    # A product belongs to whoever owns its business
    return (
        db.session.query(Business.owner_id, Product.is_active)
        .join(Business, Product.business_id == Business.id)
        .filter(Product.id == resource_id)
        .first()
    )


def _drone_owner(resource_id: int):
    return db.session.query(Drone.user_id, Drone.is_active).filter(Drone.id == resource_id).first()


def _order_owner(resource_id: int):
    # Orders have no soft delete; they are always "active"
    return (
        db.session.query(Order.user_id, literal(True))
        .filter(Order.id == resource_id)
        .first()
    )


OWNERSHIP_LOOKUPS: dict[ResourceKind, Callable[[int], tuple | None]] = {
    ResourceKind.USER: _user_owner,
    ResourceKind.BUSINESS: _business_owner,
    ResourceKind.PRODUCT: _product_owner,
    ResourceKind.DRONE: _drone_owner,
    ResourceKind.ORDER: _order_owner,
}


def fetch_ownership(kind: ResourceKind, resource_id: int) -> OwnershipFact | None:
    if not row_id_in_range(resource_id):
        return None
    row = OWNERSHIP_LOOKUPS[kind](resource_id)
    if row is None:
        return None
    owner_user_id, active = row
    return OwnershipFact(
        kind=kind,
        resource_id=resource_id,
        owner_user_id=owner_user_id,
        active=bool(active),
    )


def authorize_resource(
    identity: Identity,
    kind: ResourceKind,
    resource_id: int,
    *,
    require_active: bool = False,
) -> OwnershipFact:
    """
    Existence, then ownership, then state. Returns the fact on ALLOW.
    """
    fact = fetch_ownership(kind, resource_id)
    if fact is None:
        raise NotFoundFailure(kind.entity)

    decision = authorize_owner_only(identity, fact.owner_user_id)
    if not decision.allowed:
        current_app.logger.warning(
            "Ownership denied: user %s on %s %s", identity.subject_id, kind.value, resource_id
        )
    decision.enforce()

    if require_active and not fact.active:
        raise NotFoundFailure(kind.entity, f"{kind.value.capitalize()} {resource_id} is already inactive")

    return fact
