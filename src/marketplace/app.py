"""Application entry point for the campaign marketplace HTTP service.

Configures:
- **structlog** with JSON rendering (production) or colored console (development),
  forwarding ERROR events to Sentry when a DSN is configured
- **Document store** and **audit DB** on SQLite, optionally reconciled at startup
- **Lifecycle engine**, **profile service** and **matching engine** shared by all
  requests through ``app.state.services``
- **Envelope error handlers**, request-ID middleware, health routes and
  Prometheus metrics on the FastAPI app
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from marketplace.api import campaigns_router, profiles_router, register_exception_handlers
from marketplace.audit.logger import AuditLogger
from marketplace.audit.store import close_audit_db, init_audit_db
from marketplace.config import Settings, get_settings, validate_settings
from marketplace.health import register_health_routes
from marketplace.lifecycle.engine import CampaignLifecycleEngine
from marketplace.lifecycle.profiles import ProfileService
from marketplace.matching.engine import MatchingEngine
from marketplace.matching.scoring import build_strategy, load_scoring_weights
from marketplace.observability.metrics import setup_metrics
from marketplace.observability.middleware import RequestIdMiddleware
from marketplace.observability.sentry import get_sentry_processor, init_sentry
from marketplace.store.reconcile import reconcile
from marketplace.store.schema import init_marketplace_db
from marketplace.store.store import MarketplaceStore

logger = structlog.get_logger()


def configure_logging(production: bool = False, sentry_enabled: bool = False) -> None:
    """Configure structlog for production (JSON) or development (console).

    Production mode (*production=True*): JSON rendering at INFO level.
    Development mode: colored console rendering at DEBUG level.

    Args:
        production: Enable production mode if ``True``.
        sentry_enabled: Insert the Sentry processor ahead of the renderer.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if sentry_enabled:
        shared_processors.append(get_sentry_processor())

    if production:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        log_level = logging.INFO
    else:
        renderer = structlog.dev.ConsoleRenderer()
        log_level = logging.DEBUG

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service="marketplace")


def initialize_services(settings: Settings | None = None) -> dict[str, Any]:
    """Set up all shared services for the application.

    Opens the marketplace document store and the audit database, creates
    the AuditLogger, loads the scoring weights, and builds the lifecycle
    engine, profile service and matching engine on top of them.  When
    ``reconcile_on_startup`` is set, derived counters and back-references
    are rebuilt from campaign documents before the first request.

    Args:
        settings: Application settings.  If ``None``, ``get_settings()`` is used.

    Returns:
        A dict of initialized service instances keyed by name.
    """
    if settings is None:
        settings = get_settings()

    services: dict[str, Any] = {"_settings": settings}

    # a. Marketplace document store
    for path in (settings.database_path, settings.audit_db_path):
        if str(path) != ":memory:":
            path.parent.mkdir(parents=True, exist_ok=True)
    store = MarketplaceStore(init_marketplace_db(settings.database_path))
    services["store"] = store

    if settings.reconcile_on_startup:
        report = reconcile(store)
        logger.info(
            "startup_reconcile_finished",
            campaigns_checked=report.campaigns_checked,
            repaired=report.total_repaired,
        )

    # b. Audit trail
    audit_conn = init_audit_db(settings.audit_db_path)
    services["audit_conn"] = audit_conn
    audit_logger = AuditLogger(audit_conn)
    services["audit_logger"] = audit_logger

    # c. Lifecycle engine and profiles
    services["lifecycle"] = CampaignLifecycleEngine(
        store,
        audit=audit_logger,
        publish_on_create=settings.publish_on_create,
        enforce_max_influencers=settings.enforce_max_influencers,
        max_write_attempts=settings.max_write_attempts,
    )
    services["profiles"] = ProfileService(
        store,
        audit=audit_logger,
        max_write_attempts=settings.max_write_attempts,
    )

    # d. Matching engine
    weights = load_scoring_weights(settings.scoring_weights_path)
    services["matching"] = MatchingEngine(
        store,
        page_size=settings.campaign_page_size,
        match_limit=settings.influencer_match_limit,
        strategy=build_strategy(settings.scoring_strategy, weights),
    )

    logger.info(
        "services_initialized",
        database=str(settings.database_path),
        scoring_strategy=settings.scoring_strategy,
        publish_on_create=settings.publish_on_create,
    )
    return services


def close_services(services: dict[str, Any]) -> None:
    """Close the database connections held in *services*.  Safe to call twice."""
    store = services.pop("store", None)
    if store is not None:
        store.close()
        logger.info("Marketplace store closed")
    audit_conn = services.pop("audit_conn", None)
    if audit_conn is not None:
        close_audit_db(audit_conn)
        logger.info("Audit database connection closed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Lifespan context manager for FastAPI startup and shutdown.

    On shutdown: closes the store and audit database connections.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application.
    """
    logger.info("FastAPI application starting")
    yield
    close_services(app.state.services)


def create_app(services: dict[str, Any]) -> FastAPI:
    """Create the FastAPI app with middleware, error envelope and routers.

    Args:
        services: The initialized services dict from ``initialize_services``.

    Returns:
        The configured FastAPI application.
    """
    fastapi_app = FastAPI(title="Campaign Marketplace", lifespan=lifespan)
    fastapi_app.state.services = services
    fastapi_app.state.settings = services.get("_settings") or get_settings()
    fastapi_app.add_middleware(RequestIdMiddleware)
    register_exception_handlers(fastapi_app)
    fastapi_app.include_router(profiles_router)
    fastapi_app.include_router(campaigns_router)
    register_health_routes(fastapi_app)
    setup_metrics(fastapi_app)
    return fastapi_app


async def main() -> None:
    """Main entry point.

    1. Load settings and configure logging
    2. Validate settings and initialize Sentry
    3. Initialize services and create the FastAPI app
    4. Serve with uvicorn until shutdown
    """
    settings = get_settings()
    dsn = settings.sentry_dsn.get_secret_value()
    configure_logging(production=settings.production, sentry_enabled=bool(dsn))
    logger.info("Application starting")

    validate_settings(settings)
    init_sentry(dsn, environment="production" if settings.production else "development")

    services = initialize_services(settings)
    fastapi_app = create_app(services)

    config = uvicorn.Config(
        fastapi_app,
        host=settings.host,
        port=settings.port,
        log_level="info",
    )
    server = uvicorn.Server(config)

    try:
        await server.serve()
    finally:
        close_services(services)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
