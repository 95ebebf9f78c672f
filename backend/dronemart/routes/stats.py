# Overview: Public statistics endpoint.

from flask import Blueprint, current_app
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from ..errors import MarketplaceError, service_unavailable
from ..services import stats_service

stats_bp = Blueprint("stats", __name__)


@stats_bp.get("/stats")
def stats_route():
    """Global counters. No authentication."""
    try:
        return stats_service.get_stats()
    except MarketplaceError as e:
        return e.to_dict(), e.status_code
    except PoolTimeoutError:
        return service_unavailable()
    except Exception:
        current_app.logger.exception("Failed to read stats")
        return {"error": "Internal server error"}, 500
