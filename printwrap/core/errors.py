# printwrap/core/errors.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base exception for catalog errors."""
    pass


class InvalidPaginationError(CatalogError):
    """
    Raised when page/limit fall outside the accepted bounds.

    Always raised before the store is touched.
    """

    def __init__(self, page: int, limit: int, max_limit: int):
        self.page = page
        self.limit = limit
        self.max_limit = max_limit
        super().__init__(
            f"page must be >= 1 and limit between 1 and {max_limit} "
            f"(got page={page}, limit={limit})"
        )


def error_body(error: str, details: str | None = None) -> dict[str, str]:
    """
    Build the `{error, details?}` body every failure response uses.
    """
    body = {"error": error}
    if details:
        body["details"] = details
    return body


async def invalid_pagination_handler(
    request: Request,
    exc: InvalidPaginationError,
) -> JSONResponse:
    logger.warning("Invalid pagination parameters: page=%s limit=%s", exc.page, exc.limit)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid pagination parameters", str(exc)),
    )


async def store_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal store error", str(exc)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Attach the JSON error handlers to the application.
    """
    app.add_exception_handler(InvalidPaginationError, invalid_pagination_handler)
    app.add_exception_handler(PyMongoError, store_error_handler)
