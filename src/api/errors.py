"""Mapping of service errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.services.exceptions import (
    ExtractionError,
    ExtractionRequestError,
    ItemNotFoundError,
    NoItemsExtractedError,
    PersistenceError,
    RecipeGenerationError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _error_response(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))


async def item_not_found_handler(request: Request, exc: ItemNotFoundError) -> JSONResponse:
    return _error_response(status.HTTP_404_NOT_FOUND, "Inventory item not found")


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        f"{exc}. Nothing was changed, please try again.",
    )


async def extraction_error_handler(request: Request, exc: ExtractionError) -> JSONResponse:
    if isinstance(exc, NoItemsExtractedError):
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.user_message)
    if isinstance(exc, ExtractionRequestError):
        return _error_response(status.HTTP_502_BAD_GATEWAY, exc.user_message)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.user_message)


async def recipe_generation_error_handler(
    request: Request, exc: RecipeGenerationError
) -> JSONResponse:
    return _error_response(
        status.HTTP_502_BAD_GATEWAY,
        "The recipe service is unavailable right now. Please try again.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers; the most specific registered class wins."""
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ItemNotFoundError, item_not_found_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.add_exception_handler(ExtractionError, extraction_error_handler)
    app.add_exception_handler(RecipeGenerationError, recipe_generation_error_handler)
