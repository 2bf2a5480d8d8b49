"""
Health check endpoints for production deployment.

Provides:
- /health - Basic liveness check (is the app running?)
- /ready - Readiness check (can the app accept players?)
- /metrics - Table metrics for monitoring
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Response
from pydantic import BaseModel

from room import TableManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

# Service references (set during app initialization)
_table_manager: Optional[TableManager] = None


class TableMetrics(BaseModel):
    """Snapshot of live tables."""

    timestamp: str
    active_tables: int = 0
    running_tables: int = 0
    seated_players: int = 0
    queued_players: int = 0
    total_players: int = 0
    rounds_played: int = 0


def set_health_dependencies(table_manager: Optional[TableManager] = None) -> None:
    """Set dependencies for health checks."""
    global _table_manager
    _table_manager = table_manager


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check():
    """
    Basic liveness check - is the app running?

    This endpoint should always return 200 if the process is alive.
    Used by container orchestration for restart decisions.
    """
    return {
        "status": "ok",
        "timestamp": _now(),
    }


@router.get("/ready")
async def readiness_check(response: Response):
    """
    Readiness check - can the app accept players?

    Returns 503 until the table manager has been wired in.
    """
    if _table_manager is None:
        response.status_code = 503
        return {"status": "starting", "timestamp": _now()}
    return {"status": "ok", "timestamp": _now()}


@router.get("/metrics", response_model=TableMetrics)
async def metrics() -> TableMetrics:
    """
    Expose table metrics for monitoring.

    Returns operational metrics useful for dashboards and alerting.
    """
    snapshot = TableMetrics(timestamp=_now())
    if _table_manager is None:
        return snapshot

    tables = list(_table_manager.tables.values())
    snapshot.active_tables = len(tables)
    snapshot.running_tables = sum(1 for t in tables if t.running)
    snapshot.seated_players = sum(len(t.active) for t in tables)
    snapshot.queued_players = sum(len(t.queued) for t in tables)
    snapshot.total_players = _table_manager.actor_count()
    snapshot.rounds_played = sum(t.rounds_played for t in tables)
    return snapshot
