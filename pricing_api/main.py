"""
Main FastAPI application.

WHY: This is the entry point for the application. It configures logging,
middleware, routes and exception handlers.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pricing_api.core.config import settings
from pricing_api.core.exceptions import AppException
from pricing_api.core.exception_handlers import (
    app_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    generic_exception_handler,
)
from pricing_api.core.logging import configure_logging
from pricing_api.middleware import RequestContextMiddleware
from pricing_api.api import auth, proposals, settings as settings_api, commissions, calculators


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    WHY: Factory pattern allows easier testing with different configurations.

    Returns:
        Configured FastAPI application instance
    """
    configure_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Telecom pricing calculators API (VM, PABX/SIP, double fiber/radio, DRE, payback)",
        version=settings.VERSION,
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    )

    # Register exception handlers
    # WHY: Every error leaves the API as {"error", "message", "status_code", "details"}
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Request id and client ip for log correlation
    app.add_middleware(RequestContextMiddleware)

    # Configure CORS
    # WHY: The calculators frontend runs on a different origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        """
        Health check endpoint.

        WHY: Allows load balancers and monitoring to verify service health
        without checking authentication or database connectivity.
        """
        return {
            "status": "healthy",
            "version": settings.VERSION,
        }

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": f"{settings.API_V1_PREFIX}/docs",
        }

    # Register API routers
    for module in (auth, proposals, settings_api, commissions, calculators):
        app.include_router(module.router, prefix=settings.API_V1_PREFIX)

    return app


# Create app instance
# WHY: Creating the app instance here allows it to be imported by uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pricing_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info" if settings.DEBUG else "warning",
    )
