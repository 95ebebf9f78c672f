# Overview: Flask API routes for businesses operations; parses input and returns JSON responses.

# backend/dronemart/routes/businesses.py
"""
Business management routes.

SECURITY: All routes require authentication. Everything except registration
and listing is owner-only; ownership is checked in the service layer so a
missing business answers 404 before a foreign one answers 403.
"""
from flask import Blueprint, request, current_app, g
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from ..errors import MarketplaceError, service_unavailable
from ..services import business_service, product_service
from ..decorators import require_auth

businesses_bp = Blueprint("businesses", __name__, url_prefix="/businesses")


@businesses_bp.post("")
@require_auth
def register_business_route():
    """
    Register a business owned by the caller.

    New businesses start unverified; their products cannot be ordered until an
    operator verifies them.
    """
    payload = request.get_json(silent=True) or {}

    try:
        created = business_service.register_business(g.identity, payload)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to register business")
        return {"error": "Internal server error"}, 500

    return created, 201


@businesses_bp.get("")
@require_auth
def list_businesses_route():
    """Caller's active businesses, newest first."""
    try:
        return {"businesses": business_service.list_businesses(g.identity)}
    except MarketplaceError as e:
        return e.to_dict(), e.status_code


@businesses_bp.put("/<int:business_id>")
@require_auth
def update_business_route(business_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        return business_service.update_business(g.identity, business_id, payload)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to update business %s", business_id)
        return {"error": "Internal server error"}, 500


@businesses_bp.delete("/<int:business_id>")
@require_auth
def deactivate_business_route(business_id: int):
    try:
        return business_service.deactivate_business(g.identity, business_id)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to deactivate business %s", business_id)
        return {"error": "Internal server error"}, 500


@businesses_bp.post("/<int:business_id>/location")
@require_auth
def set_location_route(business_id: int):
    """
    Set the pickup location trips fly to.

    Body: latitude, longitude, name (optional)
    """
    payload = request.get_json(silent=True) or {}

    try:
        return business_service.set_business_location(g.identity, business_id, payload)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to set location for business %s", business_id)
        return {"error": "Internal server error"}, 500


@businesses_bp.get("/<int:business_id>/products")
@require_auth
def list_business_products_route(business_id: int):
    """Active products of one of the caller's businesses."""
    try:
        products = product_service.list_products_by_business(g.identity, business_id)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code

    return {"business_id": business_id, "products": products}
