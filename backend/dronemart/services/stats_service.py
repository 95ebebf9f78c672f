"""
Global statistics counters.

Account counters move with registrations and deactivations. The increment
helpers join the caller's open transaction and never commit on their own.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Stats

STATS_ROW_ID = 1


def ensure_stats_row() -> Stats:
    stats = db.session.get(Stats, STATS_ROW_ID)
    if stats is None:
        stats = Stats(id=STATS_ROW_ID)
        db.session.add(stats)
        db.session.flush()
    return stats


def get_stats() -> dict:
    stats = db.session.get(Stats, STATS_ROW_ID)
    if stats is None:
        return Stats(
            total_trips=0, today_trips=0, weekend_trips=0, monthly_trips=0,
            avg_delivery_time=0.0, avg_packing_time=0.0,
            avg_battery_consumption_per_km=0.0, cancellation_rate=0.0,
            active_accounts=0, inactive_accounts=0, total_accounts=0,
        ).to_dict()
    return stats.to_dict()


def record_account_created() -> None:
    stats = ensure_stats_row()
    stats.total_accounts = (stats.total_accounts or 0) + 1
    stats.active_accounts = (stats.active_accounts or 0) + 1


def record_account_deactivated() -> None:
    stats = ensure_stats_row()
    stats.active_accounts = (stats.active_accounts or 0) - 1
    stats.inactive_accounts = (stats.inactive_accounts or 0) + 1


def record_trip_requested() -> None:
    stats = ensure_stats_row()
    stats.total_trips = (stats.total_trips or 0) + 1
