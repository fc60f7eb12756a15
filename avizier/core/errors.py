import logging
from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AvizierError(Exception):
    """Base class for errors raised around the billing engine."""


class AssociationNotFoundError(AvizierError):
    def __init__(self, association_id: int) -> None:
        super().__init__(f"Association {association_id} not found")
        self.association_id = association_id


class UnitNotFoundError(AvizierError):
    def __init__(self, unit_id: int) -> None:
        super().__init__(f"Unit {unit_id} not found")
        self.unit_id = unit_id


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore[override]
        return JSONResponse(
            status_code=422,
            content={
                "detail": "Validation failed.",
                "errors": jsonable_errors(exc),
                "path": str(request.url),
            },
        )

    @app.exception_handler(AssociationNotFoundError)
    @app.exception_handler(UnitNotFoundError)
    async def not_found_handler(request: Request, exc: AvizierError) -> JSONResponse:  # type: ignore[override]
        return JSONResponse(
            status_code=404,
            content={"detail": str(exc), "path": str(request.url)},
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:  # type: ignore[override]
        payload: Dict[str, Any] = {"detail": exc.detail or "HTTP error.", "path": str(request.url)}
        if exc.headers:
            payload["headers"] = exc.headers
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # type: ignore[override]
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error.",
                "path": str(request.url),
            },
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic may put exception instances in "ctx"; keep the rest as-is.
    errors = []
    for error in exc.errors():
        entry = {key: value for key, value in error.items() if key != "ctx"}
        errors.append(entry)
    return errors
