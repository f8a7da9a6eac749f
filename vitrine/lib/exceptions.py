"""Catalog error taxonomy and the JSON exception handlers that render it."""

import logging

from litestar import Request, Response
from litestar.exceptions import HTTPException
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for errors raised by the catalog core."""

    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# -- client input errors --


class InvalidPayload(CatalogError):
    status_code = HTTP_400_BAD_REQUEST


class MissingRequiredField(CatalogError):
    status_code = HTTP_400_BAD_REQUEST

    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(f"Missing required fields: {', '.join(fields)}")


class MediaSourceRequired(CatalogError):
    status_code = HTTP_400_BAD_REQUEST

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(
            f"Media entry {index} must reference an uploaded file or an existing path"
        )


class MediaFileNotFound(CatalogError):
    status_code = HTTP_400_BAD_REQUEST

    def __init__(self, file_index: int) -> None:
        self.file_index = file_index
        super().__init__(f"No uploaded media file for index {file_index}")


class UnknownCategory(CatalogError):
    """A product references a category that does not exist."""

    status_code = HTTP_400_BAD_REQUEST

    def __init__(self, category_id: object) -> None:
        self.category_id = category_id
        super().__init__(f"Category {category_id} does not exist")


class UploadTooLarge(CatalogError):
    status_code = HTTP_413_REQUEST_ENTITY_TOO_LARGE

    def __init__(self, filename: str, size: int, limit: int) -> None:
        super().__init__(f"File {filename} is {size} bytes, limit is {limit}")


# -- not found / conflicts --


class ProductNotFound(CatalogError):
    status_code = HTTP_404_NOT_FOUND

    def __init__(self, product_id: object) -> None:
        self.product_id = product_id
        super().__init__("Product not found")


class CategoryNotFound(CatalogError):
    status_code = HTTP_404_NOT_FOUND

    def __init__(self, category_id: object) -> None:
        self.category_id = category_id
        super().__init__("Category not found")


class CategoryInUse(CatalogError):
    status_code = HTTP_409_CONFLICT

    def __init__(self, category_id: object, product_count: int) -> None:
        self.category_id = category_id
        self.product_count = product_count
        super().__init__(
            f"Category still has {product_count} product(s); move or delete them first"
        )


# -- persistence --


class PersistenceError(CatalogError):
    """A write transaction failed and was rolled back."""

    status_code = HTTP_500_INTERNAL_SERVER_ERROR


def catalog_exception_handler(request: Request, exc: CatalogError) -> Response:
    """Render catalog errors; server-side failures never leak their detail."""
    status_code = exc.status_code
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Catalog failure on %s %s", request.method, request.url.path, exc_info=exc)
        detail = "Internal Server Error"
    else:
        detail = exc.message

    return Response(
        content={"status_code": status_code, "detail": detail},
        status_code=status_code,
        media_type="application/json",
    )


def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    """Handle Litestar HTTP exceptions (guards, routing, validation)."""
    status_code = exc.status_code
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    return Response(
        content={"status_code": status_code, "detail": detail},
        status_code=status_code,
        media_type="application/json",
    )


def internal_server_error_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected exceptions without exposing internals."""
    status_code = HTTP_500_INTERNAL_SERVER_ERROR
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)

    return Response(
        content={"status_code": status_code, "detail": "Internal Server Error"},
        status_code=status_code,
        media_type="application/json",
    )


EXCEPTION_HANDLERS = {
    CatalogError: catalog_exception_handler,
    HTTPException: http_exception_handler,
    Exception: internal_server_error_handler,
}
