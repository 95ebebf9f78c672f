# Overview: Flask API routes for delivery trips; parses input and returns JSON responses.

from flask import Blueprint, request, current_app, g
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from ..errors import MarketplaceError, service_unavailable
from ..services import trip_service
from ..decorators import require_auth

trips_bp = Blueprint("trips", __name__, url_prefix="/trips")


@trips_bp.post("")
@require_auth
def register_trip_route():
    """
    Request a delivery trip for one of the caller's orders.

    Body: drone_id, order_id, weight, from_latitude, from_longitude
    """
    payload = request.get_json(silent=True) or {}

    try:
        created = trip_service.register_trip(g.identity, payload)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to register trip")
        return {"error": "Internal server error"}, 500

    return created, 201
