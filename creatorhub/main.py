import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

from creatorhub.api import auth, content, creators, health, plans, subscriptions, users
from creatorhub.core.config import get_database_url, settings, validate_config
from creatorhub.core.database import Database
from creatorhub.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_error_handler,
    unhandled_exception_handler,
)
from creatorhub.core.logging import configure_logging
from creatorhub.core.middleware.request_id import RequestIdMiddleware


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the API application.

    `database` defaults to one built from DATABASE_URL (or TEST_DATABASE_URL).
    The handle is opened at startup, closed at shutdown and exposed to
    handlers as `app.state.db`.
    """
    configure_logging(settings.ENV)
    validate_config(strict=settings.CONFIG_STRICT)

    db = database or Database(get_database_url())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger = logging.getLogger("creatorhub")
        logger.info("Starting creatorhub backend...")
        db.open()
        if settings.DB_AUTO_CREATE:
            db.create_all()
        try:
            yield
        finally:
            db.close()
            logger.info("Stopping creatorhub backend...")

    app = FastAPI(title="creatorhub", version="0.1.0", lifespan=lifespan)
    app.state.db = db

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(plans.router, prefix="/api/plans", tags=["plans"])
    app.include_router(creators.router, prefix="/api/creators", tags=["creators"])
    app.include_router(subscriptions.router, prefix="/api/subscriptions", tags=["subscriptions"])
    app.include_router(content.router, prefix="/api/content", tags=["content"])
    app.include_router(health.root_router, tags=["health"])

    return app


app = create_app()
