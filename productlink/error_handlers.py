"""Global exception handlers for the productlink API.

API paths (``/api/...``) answer with JSON and an open CORS header; page paths
answer with the HTML error page so a bad link never shows a stack trace.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response

from productlink.errors import ProductLinkError, UpstreamStoreError
from productlink.services.rendering import ListingRenderer

logger = logging.getLogger(__name__)

API_PREFIX = "/api/"
CORS_HEADERS = {"access-control-allow-origin": "*"}

_renderer = ListingRenderer()


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _is_api(request: Request) -> bool:
    return request.url.path.startswith(API_PREFIX)


def _page_message(exc: ProductLinkError) -> str:
    if isinstance(exc, UpstreamStoreError):
        return exc.to_response()["error"]
    return exc.message


def error_response(request: Request, exc: ProductLinkError) -> Response:
    if _is_api(request):
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(),
            headers=CORS_HEADERS,
        )
    return HTMLResponse(
        _renderer.build_error_page(_page_message(exc)),
        status_code=exc.http_status,
    )


def _register_domain_error_handler(app: FastAPI) -> None:
    @app.exception_handler(ProductLinkError)
    async def productlink_error_handler(request: Request, exc: ProductLinkError):
        log = logger.error if exc.http_status >= 500 else logger.info
        log(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return error_response(request, exc)


def _register_validation_error_handler(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        details = [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
            }
            for e in exc.errors()
        ]
        if not _is_api(request):
            return HTMLResponse(
                _renderer.build_error_page("The link is missing data or is malformed."),
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body", "code": "VALIDATION_ERROR", "details": details},
            headers=CORS_HEADERS,
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to process request", "code": "INTERNAL_ERROR"},
            headers=CORS_HEADERS,
        )
