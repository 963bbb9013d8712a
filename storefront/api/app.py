"""
FastAPI Application Factory

Creates and configures the FastAPI application.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from storefront.api.context import AdminContext, build_context
from storefront.api.http.routes import router as http_router
from storefront.core.config import Config, config
from storefront.core.constants import APP_NAME, APP_VERSION, APP_DESCRIPTION, HEADER_RETRY_AFTER
from storefront.core.exceptions import StorefrontException, RateLimitExceeded
from storefront.observability.tracing import setup_tracing


def create_app(
    context: Optional[AdminContext] = None,
    cfg: Optional[Config] = None
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        context: Admin context to serve (None = build from cfg)
        cfg: Configuration (None = global config)

    Returns:
        Configured FastAPI application

    Example:
        >>> app = create_app()
        >>> uvicorn.run(app, host="0.0.0.0", port=8000)
    """
    # Create FastAPI app
    app = FastAPI(
        title=APP_NAME,
        version=APP_VERSION,
        description=APP_DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )
    cfg = cfg or config
    app.state.context = context or build_context(cfg)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add exception handlers
    @app.exception_handler(StorefrontException)
    async def storefront_exception_handler(request: Request, exc: StorefrontException):
        """Handle custom exceptions."""
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        headers = {}
        if isinstance(exc, RateLimitExceeded) and exc.retry_after:
            headers[HEADER_RETRY_AFTER] = str(int(exc.retry_after))
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers=headers
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.opt(exception=exc).error(f"Unexpected error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "InternalServerError",
                "message": "An unexpected error occurred",
                "details": {"type": type(exc).__name__}
            }
        )

    # Include routers
    app.include_router(http_router, prefix="/api")

    # Instrument FastAPI app for OpenTelemetry
    FastAPIInstrumentor.instrument_app(app)

    # Startup event
    @app.on_event("startup")
    async def startup_event():
        """Initialize tracing and the admin session."""
        setup_tracing(cfg.get('tracing.otlp_endpoint', default='', expected_type=str))
        snapshot = await app.state.context.session.initialize()
        logger.info(f"{APP_NAME} v{APP_VERSION} started (auth state: {snapshot.state.value})")
        logger.info("API documentation available at /docs")

    # Shutdown event
    @app.on_event("shutdown")
    async def shutdown_event():
        """Close the admin session."""
        logger.info("Shutting down gracefully...")
        await app.state.context.session.close()

    return app
