"""
FastAPI application for the Reglements API

Serves CRUD over settlement records. The database backend (PostgreSQL or
MySQL) is chosen once at startup from DATABASE_URL.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from reglements_api.core.config import settings
from reglements_api.core.exceptions import ReglementsAPIException
from reglements_api.core.exception_handlers import (
    general_exception_handler,
    reglements_api_exception_handler,
    starlette_http_exception_handler,
    validation_exception_handler,
)
from reglements_api.db.database import create_backend
from reglements_api.models.responses import RootResponse
from reglements_api.routes import reglements

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-DNS-Prefetch-Control": "off",
}


class CORSHeaderMiddleware(BaseHTTPMiddleware):
    """Add CORS headers to all responses"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type,Authorization,Accept,X-API-Key"

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Reject oversized bodies and set conservative security headers"""

    def __init__(self, app, max_body_size: int):
        super().__init__(app)
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_size:
            logger.warning(f"Rejected request body of {content_length} bytes")
            response = JSONResponse(status_code=413, content={"error": "Request entity too large"})
        else:
            response = await call_next(request)

        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI application"""
    # Startup
    logger.info("Starting Reglements API")
    logger.info(f"Environment: {settings.environment}")
    if getattr(app.state, "db", None) is None:
        app.state.db = create_backend(settings)

    yield

    # Shutdown
    logger.info("Shutting down Reglements API")
    app.state.db.close()
    app.state.db = None


# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(CORSHeaderMiddleware)
app.add_middleware(SecurityHeadersMiddleware, max_body_size=settings.max_request_size)

# Add exception handlers
app.add_exception_handler(ReglementsAPIException, reglements_api_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)

app.include_router(reglements.router)


# Root endpoint
@app.get("/", response_model=RootResponse)
async def root():
    """Root endpoint returning API information"""
    return RootResponse(
        message="API Reglements is running!",
        timestamp=datetime.now(timezone.utc).isoformat(),
        endpoints={"reglements": "/api/reglements"},
    )


# Health check endpoint
@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


# For local development
if __name__ == "__main__":
    import uvicorn

    logger.info("Starting development server...")
    uvicorn.run(
        "reglements_api.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
