# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/dronemart/routes/auth.py
"""
Authentication API routes

Registration and login both answer with a bearer credential. The credential
goes in the Authorization header ("Bearer <token>") of every protected call.
"""

from flask import Blueprint, request, current_app, g
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from ..errors import MarketplaceError, service_unavailable
from ..services import auth_service
from ..services.identity_service import get_codec
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.post("/register")
def register_route():
    """
    Create an account and log it in.

    Body: username, name, lastname, email, password, phone (optional)
    """
    payload = request.get_json(silent=True)

    try:
        result = auth_service.register_user(payload, get_codec())
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("User registration failed")
        return {"error": "Internal server error"}, 500

    current_app.logger.info("User %s registered", result["user_id"])
    return result, 201


@auth_bp.post("/login")
def login_route():
    """
    Exchange username and password for a credential.

    Unknown user, wrong password and deactivated account all answer 401
    "Invalid credentials".
    """
    data = request.get_json(silent=True) or {}

    try:
        result = auth_service.login(data.get("username"), data.get("password"), get_codec())
    except MarketplaceError as e:
        current_app.logger.warning("Failed login for username %r", data.get("username"))
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Login failed")
        return {"error": "Internal server error"}, 500

    return result


@auth_bp.get("/me")
@require_auth
def me_route():
    """Echo the verified identity carried by the credential."""
    identity = g.identity
    return {
        "user_id": identity.subject_id,
        "username": identity.display_name,
        "issued_at": identity.issued_at,
        "expires_at": identity.expires_at,
    }
