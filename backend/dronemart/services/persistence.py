# Overview: Persistence gateway; the reads/writes the core needs plus the transaction scope.

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from ..errors import PersistenceFailure, PersistenceKind
from ..extensions import db
from ..models import Admin, Business, Order, OrderLine, Product, User
from ..validation import MAX_ROW_ID


@dataclass(frozen=True)
class UserStatus:
    id: int
    active: bool


@dataclass(frozen=True)
class ProductListing:
    """A product joined with the business that sells it."""
    product_id: int
    price_cents: int
    product_active: bool
    business_verified: bool


@contextmanager
def transaction_scope() -> Iterator[Session]:
    """
    All-or-nothing unit of work on the request session.

    Commits only when the block finishes normally. Every other exit (a
    classified failure, an unexpected error, a cancelled request) rolls back
    first and then propagates. Raw SQLAlchemy errors are classified so no
    storage text reaches the caller.
    """
    session = db.session
    try:
        yield session
    except PoolTimeoutError as exc:
        session.rollback()
        raise PersistenceFailure(PersistenceKind.CONNECTION_TIMEOUT) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise PersistenceFailure(PersistenceKind.QUERY_ERROR) from exc
    except BaseException:
        session.rollback()
        raise

    try:
        session.commit()
    except PoolTimeoutError as exc:
        session.rollback()
        raise PersistenceFailure(PersistenceKind.CONNECTION_TIMEOUT) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise PersistenceFailure(PersistenceKind.TRANSACTION_ABORT) from exc


def row_id_in_range(value: int) -> bool:
    """Ids outside the Integer column range cannot match a row."""
    return 0 < value <= MAX_ROW_ID


def fetch_user_active(user_id: int) -> UserStatus | None:
    if not row_id_in_range(user_id):
        return None
    row = db.session.query(User.id, User.is_active).filter(User.id == user_id).first()
    if row is None:
        return None
    return UserStatus(id=row.id, active=bool(row.is_active))


def fetch_product_with_business(product_id: int) -> ProductListing | None:
    """None when the product or its business is missing."""
    if not row_id_in_range(product_id):
        return None
    row = (
        db.session.query(
            Product.id,
            Product.price_cents,
            Product.is_active,
            Business.is_verified,
        )
        .join(Business, Product.business_id == Business.id)
        .filter(Product.id == product_id)
        .first()
    )
    if row is None:
        return None
    return ProductListing(
        product_id=row.id,
        price_cents=row.price_cents,
        product_active=bool(row.is_active),
        business_verified=bool(row.is_verified),
    )


def fetch_order_count() -> int:
    return db.session.query(func.count(Order.id)).scalar() or 0


def insert_order(session: Session, flight_number: str, total_price_cents: int, buyer_id: int) -> int:
    order = Order(
        flight_number=flight_number,
        total_price_cents=total_price_cents,
        user_id=buyer_id,
        approved=False,
    )
    session.add(order)
    session.flush()
    return order.id


def insert_order_line(
    session: Session,
    order_id: int,
    product_id: int,
    amount: int,
    unit_price_cents: int,
) -> None:
    session.add(OrderLine(
        order_id=order_id,
        product_id=product_id,
        amount=amount,
        unit_price_cents=unit_price_cents,
    ))
    session.flush()


def fetch_admin_flag(user_id: int) -> bool:
    """Fresh membership check against the admins table."""
    exists = db.session.query(Admin.user_id).filter(Admin.user_id == user_id).exists()
    return bool(db.session.query(exists).scalar())
