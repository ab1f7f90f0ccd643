"""Application configuration and router setup."""

from contextlib import asynccontextmanager

import fastapi
from fastapi.middleware import cors

from components.core import init_db
from components.core.config import get_settings
from components.core.logging_config import logger
from components.core.middleware import RequestLoggingMiddleware
from components.payment.sweeper import OtpExpirySweeper
from restapi.endpoints import health_check, auth, students, payments, transactions
from restapi.errors import register_exception_handlers

settings = get_settings()


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create tables and run the OTP expiry sweep for the app's lifetime."""
    if settings.DB_CREATE_ALL:
        await init_db.init_models()

    sweeper = None
    if settings.OTP_SWEEP_INTERVAL_SECONDS > 0:
        sweeper = OtpExpirySweeper(init_db.db_manager, settings.OTP_SWEEP_INTERVAL_SECONDS)
        await sweeper.start()

    logger.info(f"{settings.APP_NAME} started")
    yield

    if sweeper:
        await sweeper.stop()
    await init_db.db_manager.dispose()


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    app = fastapi.FastAPI(
        title=settings.APP_NAME,
        description="Campus tuition payment API with OTP confirmation",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    app.add_middleware(RequestLoggingMiddleware)
    # Open CORS is meant for local deployments
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Include routers
    app.include_router(health_check.router)
    app.include_router(auth.router)
    app.include_router(students.router)
    app.include_router(payments.router)
    app.include_router(transactions.router)

    return app
