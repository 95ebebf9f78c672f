# Overview: Flask API routes for drone fleet operations; parses input and returns JSON responses.

from flask import Blueprint, request, current_app, g
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from ..errors import MarketplaceError, service_unavailable
from ..services import drone_service
from ..decorators import require_auth

drones_bp = Blueprint("drones", __name__, url_prefix="/drones")


@drones_bp.post("")
@require_auth
def register_drone_route():
    """
    Register a drone for the caller.

    Body: name, number (globally unique; a duplicate answers 409)
    """
    payload = request.get_json(silent=True) or {}

    try:
        created = drone_service.register_drone(g.identity, payload)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to register drone")
        return {"error": "Internal server error"}, 500

    return created, 201


@drones_bp.get("")
@require_auth
def list_drones_route():
    try:
        return {"drones": drone_service.list_drones(g.identity)}
    except MarketplaceError as e:
        return e.to_dict(), e.status_code


@drones_bp.delete("/<int:drone_id>")
@require_auth
def deactivate_drone_route(drone_id: int):
    try:
        return drone_service.deactivate_drone(g.identity, drone_id)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to deactivate drone %s", drone_id)
        return {"error": "Internal server error"}, 500
