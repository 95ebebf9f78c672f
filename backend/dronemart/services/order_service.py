# Overview: Order Transaction Engine; validates, prices and persists an order atomically.

"""
Order placement

Start -> UserValidated -> LinesNonEmpty -> LinesValidated -> Priced
      -> Persisted -> Committed

Every step runs inside one transaction_scope. The first failure wins (lines
are checked in submission order) and rolls back everything written during the
call, so an order row never exists without its lines.

PRICING: unit prices are snapshotted from the product at validation time and
stored on each line. All arithmetic is in integer cents.

FLIGHT NUMBER: "FL" + zero-padded (order_count + 1) % 1000. This wraps every
1000 orders and is therefore not unique.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from flask import current_app

from ..errors import (
    Entity,
    NotFoundFailure,
    ValidationFailure,
    ValidationKind,
)
from ..extensions import db
from ..models import Order, OrderLine
from ..money import format_cents
from ..validation import MAX_ROW_ID, coerce_int, invalid
from .credential_service import Identity
from .ownership_service import ResourceKind, authorize_resource
from .user_service import require_active_user
from .persistence import (
    fetch_order_count,
    fetch_product_with_business,
    insert_order,
    insert_order_line,
    transaction_scope,
)


FLIGHT_NUMBER_PREFIX = "FL"
FLIGHT_NUMBER_MODULUS = 1000

# Per-line quantity cap; the order total must also fit its Integer column
MAX_LINE_AMOUNT = 1_000_000


@dataclass(frozen=True)
class OrderLineRequest:
    product_id: int
    amount: int


@dataclass(frozen=True)
class PricedOrderLine:
    product_id: int
    amount: int
    unit_price_cents: int

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.amount


@dataclass(frozen=True)
class PricedOrder:
    lines: tuple[PricedOrderLine, ...]
    total_price_cents: int


@dataclass(frozen=True)
class PlacedOrder:
    order_id: int
    flight_number: str
    total_price_cents: int
    approved: bool = False

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "flight_number": self.flight_number,
            "total_price": format_cents(self.total_price_cents),
            "total_price_cents": self.total_price_cents,
            "approved": self.approved,
            "message": "Order registered successfully",
        }


def parse_order_lines(payload) -> list[OrderLineRequest]:
    """
    Shape-check the request body. Semantic checks (amount > 0, product state)
    belong to the engine so they are reported in submission order.
    """
    if not isinstance(payload, dict):
        raise invalid("Invalid JSON payload")

    details = payload.get("order_details")
    if details is None:
        raise invalid("order_details required", field="order_details")
    if not isinstance(details, list):
        raise invalid("order_details must be a list", field="order_details")

    lines = []
    for index, entry in enumerate(details):
        if not isinstance(entry, dict):
            raise invalid(f"order_details[{index}] must be an object", index=index)
        if entry.get("product_id") is None or entry.get("amount") is None:
            raise invalid(f"order_details[{index}] requires product_id and amount", index=index)
        lines.append(OrderLineRequest(
            product_id=coerce_int("product_id", entry["product_id"]),
            amount=coerce_int("amount", entry["amount"]),
        ))
    return lines


def flight_number_for(order_count: int) -> str:
    return f"{FLIGHT_NUMBER_PREFIX}{(order_count + 1) % FLIGHT_NUMBER_MODULUS:03d}"


def price_order_lines(lines: Sequence[OrderLineRequest]) -> PricedOrder:
    """
    Validate every line against live product/business state and price it.

    Raises on the first bad line:
    - NotFoundFailure(PRODUCT): product or its business is missing
    - ValidationFailure(PRODUCT_INACTIVE)
    - ValidationFailure(BUSINESS_UNVERIFIED)
    - ValidationFailure(INVALID_AMOUNT): amount <= 0 or above MAX_LINE_AMOUNT,
      or the order total does not fit in MAX_ROW_ID cents
    """
    priced: list[PricedOrderLine] = []
    for index, line in enumerate(lines):
        listing = fetch_product_with_business(line.product_id)
        details = {"index": index, "product_id": line.product_id}

        if listing is None:
            raise NotFoundFailure(Entity.PRODUCT, f"Product {line.product_id} not found", details)

        if not listing.product_active:
            raise ValidationFailure(
                ValidationKind.PRODUCT_INACTIVE,
                f"Product {line.product_id} is not active",
                details,
            )

        if not listing.business_verified:
            raise ValidationFailure(
                ValidationKind.BUSINESS_UNVERIFIED,
                f"Product {line.product_id} belongs to an unverified business",
                details,
            )

        if line.amount <= 0:
            raise ValidationFailure(
                ValidationKind.INVALID_AMOUNT,
                "Amount must be greater than zero",
                details,
            )

        if line.amount > MAX_LINE_AMOUNT:
            raise ValidationFailure(
                ValidationKind.INVALID_AMOUNT,
                f"Amount must not exceed {MAX_LINE_AMOUNT}",
                details,
            )

        priced.append(PricedOrderLine(
            product_id=line.product_id,
            amount=line.amount,
            unit_price_cents=listing.price_cents,
        ))

    total_price_cents = sum(p.line_total_cents for p in priced)
    if total_price_cents > MAX_ROW_ID:
        raise ValidationFailure(
            ValidationKind.INVALID_AMOUNT,
            "Order total is too large",
            {"total_price_cents": total_price_cents},
        )

    return PricedOrder(lines=tuple(priced), total_price_cents=total_price_cents)


def place_order(identity: Identity, lines: Iterable[OrderLineRequest]) -> PlacedOrder:
    lines = list(lines)

    with transaction_scope() as session:
        require_active_user(identity.subject_id)

        if not lines:
            raise ValidationFailure(ValidationKind.EMPTY_ORDER, "Order must contain at least one product")

        priced = price_order_lines(lines)

        flight_number = flight_number_for(fetch_order_count())
        order_id = insert_order(
            session,
            flight_number=flight_number,
            total_price_cents=priced.total_price_cents,
            buyer_id=identity.subject_id,
        )
        for line in priced.lines:
            insert_order_line(
                session,
                order_id=order_id,
                product_id=line.product_id,
                amount=line.amount,
                unit_price_cents=line.unit_price_cents,
            )

    current_app.logger.info(
        "Order %s placed by user %s: %s line(s), total %s",
        order_id, identity.subject_id, len(priced.lines), format_cents(priced.total_price_cents),
    )
    return PlacedOrder(
        order_id=order_id,
        flight_number=flight_number,
        total_price_cents=priced.total_price_cents,
    )


def get_order(identity: Identity, order_id: int) -> dict:
    """Order header and lines; visible to the buyer only."""
    authorize_resource(identity, ResourceKind.ORDER, order_id)
    order = db.session.get(Order, order_id)
    lines = db.session.query(OrderLine).filter_by(order_id=order_id).order_by(OrderLine.id).all()
    return {
        "order": order.to_dict(),
        "lines": [line.to_dict() for line in lines],
    }


def list_orders(identity: Identity) -> list[dict]:
    orders = (
        db.session.query(Order)
        .filter(Order.user_id == identity.subject_id)
        .order_by(Order.id.desc())
        .all()
    )
    return [o.to_dict() for o in orders]
