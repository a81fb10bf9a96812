"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Everything long-lived (engine, token service, image storage,
Redis) sits in the AppContext passed in or built from Settings, and is
reachable from handlers as request.app.state.ctx. Lifespan manages
startup/shutdown: table creation, the upload dir, Redis.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from marketplace import __version__
from marketplace.api import api_router
from marketplace.config import Settings, get_settings
from marketplace.context import AppContext
from marketplace.db.engine import create_tables
from marketplace.errors import register_exception_handlers
from marketplace.log import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    ctx: AppContext = app.state.ctx
    logger.info(
        "marketplace.starting",
        version=__version__,
        environment=ctx.settings.environment,
        port=ctx.settings.port,
    )

    if ctx.settings.create_tables_on_startup:
        await create_tables(ctx.engine)
        logger.info("marketplace.tables_ready")

    try:
        await ctx.connect_redis()
        logger.info("marketplace.redis_connected", url=ctx.settings.redis_url)
    except Exception as e:
        # Redis only backs rate limiting; the API works without it
        logger.warning("marketplace.redis_unavailable", error=str(e))

    yield

    logger.info("marketplace.shutdown")
    await ctx.close()


def create_app(
    settings: Optional[Settings] = None, ctx: Optional[AppContext] = None
) -> FastAPI:
    """Build and return the FastAPI application."""
    if ctx is None:
        ctx = AppContext.from_settings(settings or get_settings())
    settings = ctx.settings

    configure_logging(settings.log_level, json=settings.log_json)

    app = FastAPI(
        title="Marketplace",
        description="Accounts, session tokens and owner-scoped item listings",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.ctx = ctx

    register_exception_handlers(app)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette wraps in reverse order of registration, so the error
    # boundary (added first) sits closest to the routes and its 500s
    # still pass through the header middlewares.

    from marketplace.middleware.errors import ErrorBoundaryMiddleware
    from marketplace.middleware.rate_limit import RateLimitMiddleware
    from marketplace.middleware.request_id import RequestIdMiddleware
    from marketplace.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(ErrorBoundaryMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    # Uploaded item images: GET /uploads/image-{id}.jpg
    app.mount(
        "/uploads",
        StaticFiles(directory=ctx.images.ensure_root()),
        name="uploads",
    )

    return app
