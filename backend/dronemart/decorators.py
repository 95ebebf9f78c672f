# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, g, current_app

from .errors import AuthFailure
from .services.identity_service import extract_identity, get_codec


def require_auth(f):
    """
    Require a valid bearer credential.

    Sets g.identity (a verified Identity) before the view runs.

    SECURITY: Returns 401 if:
    - No Authorization header, or not a "Bearer" header
    - Credential signature or payload is invalid
    - Credential has expired
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            identity = extract_identity(request.headers.get("Authorization"), get_codec())
        except AuthFailure as e:
            current_app.logger.warning(
                "Rejected credential on %s %s: %s", request.method, request.path, e.kind
            )
            return e.to_dict(), e.status_code

        g.identity = identity
        return f(*args, **kwargs)

    return decorated_function
