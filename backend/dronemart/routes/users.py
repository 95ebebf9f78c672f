# Overview: Flask API routes for user account operations; parses input and returns JSON responses.

from flask import Blueprint, request, current_app, g
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from ..errors import MarketplaceError, service_unavailable
from ..services import user_service
from ..decorators import require_auth


users_bp = Blueprint("users", __name__, url_prefix="/users")


@users_bp.put("/<int:user_id>")
@require_auth
def update_user_route(user_id: int):
    """
    Update profile fields (name, lastname, phone, email, password).

    SECURITY: the caller must be the user or an admin.
    """
    payload = request.get_json(silent=True) or {}

    try:
        return user_service.update_user(g.identity, user_id, payload)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to update user %s", user_id)
        return {"error": "Internal server error"}, 500


@users_bp.delete("/<int:user_id>")
@require_auth
def deactivate_user_route(user_id: int):
    """Deactivate an account. Admin only."""
    try:
        return user_service.deactivate_user(g.identity, user_id)
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to deactivate user %s", user_id)
        return {"error": "Internal server error"}, 500
