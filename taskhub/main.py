"""Main FastAPI application."""
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text, inspect

from taskhub.core.config import settings
from taskhub.core.logging import setup_logging, get_logger
from taskhub.core.database import engine, async_session_maker
from taskhub.core.dependencies import DbSession
from taskhub.core.exception_handlers import register_exception_handlers
from taskhub.core.middleware import RequestIdMiddleware
from taskhub.api.v1 import router as v1_router
from taskhub.models import Tenant, User, Project, Task, AuditLog  # noqa: F401  register models with Base
from taskhub.seed_data import seed_data


# Setup logging
setup_logging(settings.DEBUG)
logger = get_logger(__name__)

REQUIRED_TABLES = ("tenants", "users", "projects", "tasks", "audit_logs")


def missing_tables(sync_conn) -> list[str]:
    existing = set(inspect(sync_conn).get_table_names())
    return [t for t in REQUIRED_TABLES if t not in existing]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    try:
        logger.info("Checking database schema integrity...")
        async with engine.connect() as conn:
            missing = await conn.run_sync(missing_tables)

        if missing:
            logger.error(f"DANGER: Database is missing tables: {missing}. Run `alembic upgrade head`.")
        else:
            logger.info("Database integrity check passed.")
            if settings.SEED_ON_START:
                async with async_session_maker() as session:
                    await seed_data(session)
    except Exception:
        # Keep booting so /api/health can report the problem
        logger.exception("Startup database check failed")

    yield
    logger.info(f"Shutting down {settings.APP_NAME}")
    await engine.dispose()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Multi-tenant project and task management API",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(RequestIdMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

register_exception_handlers(app)

# Include API router
app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/api/health")
async def health_check(db: DbSession):
    """Liveness check: database reachable and schema present."""
    try:
        await db.execute(text("SELECT 1"))
        conn = await db.connection()
        missing = await conn.run_sync(missing_tables)
    except Exception:
        logger.exception("Health check failed")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"success": False, "message": "Database unavailable",
                     "data": {"status": "error", "database": "disconnected"}},
        )

    if missing:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"success": False, "message": f"Missing tables: {', '.join(missing)}",
                     "data": {"status": "error", "database": "connected"}},
        )

    return {"success": True, "data": {"status": "ok", "database": "connected", "service": settings.APP_NAME}}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/api/docs",
    }
