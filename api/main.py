"""
FastAPI application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from database.engine import AsyncSessionLocal, init_db, close_db
from api.routes import health
from api.routes.v1 import (
    admin,
    auth,
    candidates,
    employers,
    introductions,
    jobs,
    webhooks,
)
from api.schemas.common import ErrorResponse
from api.services.users import seed_admin
from core.middleware import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    StructuredLoggingMiddleware,
    setup_logging,
    AuthenticationMiddleware,
)
from core.middleware.error_handling import error_envelope

# Setup structured logging (do this first, before anything else)
setup_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")
    await init_db()

    async with AsyncSessionLocal() as session:
        await seed_admin(session, settings.admin_email, settings.admin_password)

    if not settings.stripe_secret_key:
        logger.warning("STRIPE_SECRET_KEY not set; hires will produce draft invoices")
    if not settings.stripe_webhook_secret:
        logger.warning("STRIPE_WEBHOOK_SECRET not set; payment notifications will be rejected")

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Healthcare administration placement marketplace",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
    responses={
        code: {"model": ErrorResponse}
        for code in (400, 401, 403, 404, 409, 502)
    },
)

# Setup error handlers (before middleware)
setup_error_handlers(app)

# Add middleware; the last one added is the outermost
# 1. Authentication middleware (innermost - attaches the principal)
app.add_middleware(
    AuthenticationMiddleware,
    jwt_secret=settings.jwt_secret_key,
    jwt_algorithm=settings.jwt_algorithm,
    cookie_name=settings.auth_cookie_name,
)

# 2. Structured logging middleware (logs all requests, including auth rejections)
app.add_middleware(
    StructuredLoggingMiddleware,
    log_request_body=settings.log_request_body,
    max_body_size=settings.log_max_body_size,
)

# 3. Error handling middleware (catches anything the handlers let escape)
app.add_middleware(
    ErrorHandlingMiddleware,
    debug=settings.debug,
)

# 4. CORS middleware (outermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Health check routes
app.include_router(health.router, tags=["Health"])

# API v1 routes
app.include_router(
    auth.router,
    prefix=f"{settings.api_v1_prefix}/auth",
    tags=["Authentication"],
)
app.include_router(
    candidates.router,
    prefix=f"{settings.api_v1_prefix}/candidates",
    tags=["Candidates"],
)
app.include_router(
    employers.router,
    prefix=f"{settings.api_v1_prefix}/employers",
    tags=["Employers"],
)
app.include_router(
    jobs.router,
    prefix=f"{settings.api_v1_prefix}/jobs",
    tags=["Jobs"],
)
app.include_router(
    introductions.router,
    prefix=f"{settings.api_v1_prefix}/introductions",
    tags=["Introductions"],
)
app.include_router(
    admin.router,
    prefix=f"{settings.api_v1_prefix}/admin",
    tags=["Admin"],
)
app.include_router(
    webhooks.router,
    prefix=f"{settings.api_v1_prefix}/webhooks",
    tags=["Webhooks"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Handle all unhandled exceptions.
    Note: This is a fallback - ErrorHandlingMiddleware handles most cases.
    """
    logger.error(
        f"Unhandled exception in global handler: {type(exc).__name__}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content=error_envelope(
            "INTERNAL_SERVER_ERROR",
            "An unexpected error occurred",
            str(request.url.path),
            request.method,
        ),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
