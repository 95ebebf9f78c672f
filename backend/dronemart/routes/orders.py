# Overview: Flask API routes for orders; parses input and returns JSON responses.

# backend/dronemart/routes/orders.py
"""
Order routes.

POST /orders runs the whole placement (validation, pricing, persistence) in
one transaction; any failure leaves no order behind.

Request body:
    {"order_details": [{"product_id": 3, "amount": 2}, ...]}
"""
from flask import Blueprint, request, current_app, g
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from ..errors import MarketplaceError, service_unavailable
from ..services import order_service
from ..decorators import require_auth

orders_bp = Blueprint("orders", __name__, url_prefix="/orders")


@orders_bp.post("")
@require_auth
def place_order_route():
    payload = request.get_json(silent=True)

    try:
        lines = order_service.parse_order_lines(payload)
        placed = order_service.place_order(g.identity, lines)
    except MarketplaceError as e:
        if e.status_code < 500:
            current_app.logger.info("Order rejected for user %s: %s", g.identity.subject_id, e.kind)
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Order placement failed for user %s", g.identity.subject_id)
        return {"error": "Internal server error"}, 500

    return placed.to_dict(), 200


@orders_bp.get("")
@require_auth
def list_orders_route():
    """Caller's orders, newest first."""
    try:
        return {"orders": order_service.list_orders(g.identity)}
    except MarketplaceError as e:
        return e.to_dict(), e.status_code


@orders_bp.get("/<int:order_id>")
@require_auth
def get_order_route(order_id: int):
    try:
        return order_service.get_order(g.identity, order_id)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
