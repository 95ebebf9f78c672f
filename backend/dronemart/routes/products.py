# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/dronemart/routes/products.py
"""
Product management routes.

SECURITY: All routes require authentication and ownership of the product's
business. Prices are accepted as decimal strings or numbers ("20.00", 20)
and stored as integer cents.
"""
from flask import Blueprint, request, current_app, g
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from ..errors import MarketplaceError, service_unavailable
from ..services import product_service
from ..decorators import require_auth

products_bp = Blueprint("products", __name__, url_prefix="/products")


@products_bp.post("")
@require_auth
def create_product_route():
    """
    Create a product.

    Body: business_id, name, price, description (optional)
    """
    payload = request.get_json(silent=True) or {}

    try:
        created = product_service.register_product(g.identity, payload)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to register product")
        return {"error": "Internal server error"}, 500

    return created, 201


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        return product_service.update_product(g.identity, product_id, payload)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to update product %s", product_id)
        return {"error": "Internal server error"}, 500


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    """Soft delete a product. Existing orders are unaffected."""
    try:
        return product_service.deactivate_product(g.identity, product_id)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to deactivate product %s", product_id)
        return {"error": "Internal server error"}, 500
