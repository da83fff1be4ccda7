"""Global exception handlers for the FastAPI application"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from reglements_api.core.config import get_settings
from reglements_api.core.exceptions import ReglementsAPIException, ValidationException
from reglements_api.models.responses import ErrorResponse

logger = logging.getLogger(__name__)


def _development_detail(detail):
    """Underlying error text is only exposed in development"""
    return detail if get_settings().is_development else None


async def reglements_api_exception_handler(request: Request, exc: ReglementsAPIException) -> JSONResponse:
    """Handle custom Reglements API exceptions"""
    if exc.status_code >= 500:
        logger.error(f"Reglements API exception: {exc.message} - {exc.detail}")
    else:
        logger.warning(f"Reglements API exception: {exc.status_code} - {exc.message}")

    errors = exc.errors if isinstance(exc, ValidationException) and exc.errors else None
    content = ErrorResponse(
        error=exc.message,
        errors=errors,
        details=_development_detail(exc.detail),
    ).model_dump(exclude_none=True)
    content.update(exc.extra)

    return JSONResponse(status_code=exc.status_code, content=content)


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle Starlette HTTPExceptions; unknown paths answer 'Route not found'"""
    logger.warning(f"Starlette HTTP exception: {exc.status_code} - {exc.detail}")

    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Route not found"})

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors"""
    logger.warning(f"Validation error: {exc.errors()}")

    # One readable message per failing location
    error_details = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        error_details.append(f"{field}: {error['msg']}")

    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error="Validation Error", errors=error_details).model_dump(exclude_none=True),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle general exceptions"""
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Something went wrong!",
            "message": str(exc) if get_settings().is_development else "Internal Server Error",
        },
    )
