"""
Liveness and readiness probes.

Lightweight endpoints for operational monitoring; they never expose secrets.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import inspect

from creatorhub.core.database import Database, get_database, metadata

logger = logging.getLogger("creatorhub")

root_router = APIRouter(tags=["health"])


@root_router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@root_router.get("/readyz")
def readyz(db: Database = Depends(get_database)):
    """Readiness check: DB connectivity + required tables."""
    if not db.is_open or not db.check_connection():
        logger.error("[readyz] database unreachable")
        return JSONResponse(status_code=503, content={"status": "error", "detail": "database unreachable"})

    inspector = inspect(db.engine)
    missing = [name for name in sorted(metadata.tables) if not inspector.has_table(name)]
    if missing:
        detail = f"missing tables: {', '.join(missing)}"
        logger.warning(f"[readyz] {detail}")
        return JSONResponse(status_code=503, content={"status": "error", "detail": detail})

    return {"status": "ok"}
