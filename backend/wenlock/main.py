import asyncio
import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware

from wenlock import models  # noqa: F401  registers tables on Base.metadata
from wenlock.config import get_settings
from wenlock.container import build_services
from wenlock.database import Base, async_session
from wenlock.error_handlers import register_exception_handlers
from wenlock.logging_config import configure_logging
from wenlock.routers import alerts, audit_logs, integrations, inventory, meta, realtime, reports, schedules, tokens, users
from wenlock.routers import auth as auth_router
from wenlock.services.realtime import Broadcaster, ConnectionManager

logger = logging.getLogger(__name__)


class NoCacheMiddleware(BaseHTTPMiddleware):
    """Middleware to add no-cache headers to prevent browser caching."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0"
        response.headers["Expires"] = "0"
        response.headers["Pragma"] = "no-cache"
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response


async def seed_admin(app: FastAPI):
    """Create the bootstrap admin from settings if configured. Idempotent."""
    settings = get_settings()
    async with app.state.session_factory() as session:
        await app.state.services.users.ensure_seed_admin(
            session, settings.seed_admin_username, settings.seed_admin_email, settings.seed_admin_password
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables then seed the bootstrap admin
    session_factory = app.state.session_factory
    async with session_factory.kw["bind"].begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await seed_admin(app)
    logger.info("Wenlock API ready")
    yield
    # Shutdown
    await session_factory.kw["bind"].dispose()


def create_app(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    broadcaster: Optional[Broadcaster] = None,
) -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Wenlock Hospital Management",
        description="Staff, scheduling, queue, inventory and emergency alert management",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Services are wired here rather than in the lifespan so the app is usable
    # without a startup phase (ASGI test transports do not run it).
    app.state.session_factory = session_factory or async_session
    app.state.broadcaster = broadcaster or ConnectionManager()
    app.state.services = build_services(app.state.session_factory, app.state.broadcaster)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(NoCacheMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(schedules.router, prefix="/api/schedules", tags=["Schedules"])
    app.include_router(tokens.router, prefix="/api/tokens", tags=["Tokens"])
    app.include_router(inventory.router, prefix="/api/inventory", tags=["Inventory"])
    app.include_router(alerts.router, prefix="/api/alerts", tags=["Alerts"])
    app.include_router(audit_logs.router, prefix="/api/auditlogs", tags=["Audit Logs"])
    app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])
    app.include_router(meta.router, prefix="/api/meta", tags=["Meta"])
    app.include_router(integrations.router, prefix="/api/mock-integrations", tags=["Mock Integrations"])
    app.include_router(realtime.router)

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "service": "wenlock-api"}

    return app


app = create_app()


def run():
    """Console entry point. Any exception reaching the event loop is fatal."""
    settings = get_settings()
    configure_logging(settings.log_level)
    server = uvicorn.Server(uvicorn.Config(app, host=settings.host, port=settings.port, log_config=None))
    failed = False

    def on_loop_error(loop: asyncio.AbstractEventLoop, context: dict):
        nonlocal failed
        failed = True
        logger.critical("Unhandled event loop error: %s", context.get("message"), exc_info=context.get("exception"))
        server.should_exit = True

    async def serve():
        asyncio.get_running_loop().set_exception_handler(on_loop_error)
        await server.serve()

    asyncio.run(serve())
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    run()
