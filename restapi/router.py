"""Application configuration and router setup."""

import logging

import fastapi
from fastapi.middleware import cors
from fastapi.openapi.utils import get_openapi

from components.core import init_db
from components.core.config import get_settings
from restapi.endpoints import health_check, plan, allowance

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)

    app = fastapi.FastAPI(
        title=settings.SERVICE_NAME,
        description="Monthly budget with daily spending allowances",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=init_db.lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health_check.router)
    app.include_router(plan.router)
    app.include_router(allowance.router)

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title=settings.SERVICE_NAME,
            version="1.0.0",
            description="Monthly budget with daily spending allowances",
            routes=app.routes,
        )
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app
