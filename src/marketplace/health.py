"""Health and readiness endpoints for container orchestration.

- ``GET /health``: Liveness check.  Returns 200 if the process is alive.
- ``GET /ready``: Readiness check.  Returns 200 only when both the
  marketplace store and the audit DB answer a trivial query.  Returns 503
  with per-check details otherwise.
"""

from __future__ import annotations

import asyncio
import sqlite3
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from marketplace.domain.errors import StoreError


def register_health_routes(app: FastAPI) -> None:
    """Register ``/health`` and ``/ready`` endpoints on *app*."""

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/ready")
    async def ready(request: Request) -> JSONResponse:
        """Readiness check: checks the document store and audit DB."""
        services: dict[str, Any] = request.app.state.services
        checks: dict[str, str] = {}

        store = services.get("store")
        if store is not None:
            try:
                await asyncio.to_thread(store.ping)
                checks["store"] = "ok"
            except StoreError:
                checks["store"] = "fail"
        else:
            checks["store"] = "fail"

        audit_conn = services.get("audit_conn")
        if audit_conn is not None:
            try:
                await asyncio.to_thread(audit_conn.execute, "SELECT 1")
                checks["audit_db"] = "ok"
            except sqlite3.Error:
                checks["audit_db"] = "fail"
        else:
            checks["audit_db"] = "fail"

        all_ok = all(v == "ok" for v in checks.values())
        status = "ready" if all_ok else "not_ready"
        code = 200 if all_ok else 503

        return JSONResponse(content={"status": status, "checks": checks}, status_code=code)
