import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LpjError(Exception):
    """Base class for errors raised by the reporting core."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def payload(self) -> Dict[str, Any]:
        return {}


class DomainValidationError(LpjError):
    """User input rejected before any write was attempted."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field

    def payload(self) -> Dict[str, Any]:
        return {"field": self.field} if self.field else {}


class NotFoundError(LpjError):
    status_code = 404


class PersistenceError(LpjError):
    """The record store rejected or could not complete a write."""

    status_code = 503


class PartialCascadeError(LpjError):
    """A cascade stopped after removing some, but not all, dependents."""

    status_code = 500

    def __init__(self, message: str, removed: int, step: str) -> None:
        super().__init__(message)
        self.removed = removed
        self.step = step

    def payload(self) -> Dict[str, Any]:
        return {"removed": self.removed, "step": self.step}


class ExportBlockedError(LpjError):
    status_code = 409

    def __init__(self, errors: List[str], warnings: Optional[List[str]] = None) -> None:
        super().__init__("Dokumen tidak dapat diekspor: " + "; ".join(errors))
        self.errors = list(errors)
        self.warnings = list(warnings or [])

    def payload(self) -> Dict[str, Any]:
        return {"errors": self.errors, "warnings": self.warnings}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore[override]
        return JSONResponse(
            status_code=422,
            content={
                "detail": "Validation failed.",
                "errors": [
                    {key: value for key, value in error.items() if key in ("loc", "msg", "type")}
                    for error in exc.errors()
                ],
                "path": str(request.url),
            },
        )

    @app.exception_handler(LpjError)
    async def domain_exception_handler(request: Request, exc: LpjError) -> JSONResponse:  # type: ignore[override]
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        payload: Dict[str, Any] = {"detail": exc.message, "path": str(request.url)}
        payload.update(exc.payload())
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

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:  # type: ignore[override]
        payload: Dict[str, Any] = {"detail": exc.detail or "HTTP error.", "path": str(request.url)}
        if exc.headers:
            payload["headers"] = exc.headers
        return JSONResponse(status_code=exc.status_code, content=payload)
