"""Problem details and custom exceptions for HTTP responses."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Mapping, cast

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.observability.logger import get_logger

__all__ = [
    "PROBLEM_BASE_URI",
    "ProblemDetails",
    "ProblemDetailsException",
    "problem_response",
    "register_exception_handlers",
]

logger = get_logger(__name__)

PROBLEM_BASE_URI = "https://records.local/problems"


class ProblemDetails(BaseModel):
    """Representation of an RFC 7807 problem details payload."""

    type: str = Field(default="about:blank", description="URI identifying the error type")
    title: str = Field(default="An error occurred", description="Short human-readable summary")
    status: int = Field(default=status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail: str | None = Field(default=None, description="Detailed description of the error")
    instance: str | None = Field(
        default=None, description="URI identifying the specific occurrence"
    )
    errors: list[Any] | None = Field(
        default=None, description="Detailed validation errors when applicable"
    )

    model_config = ConfigDict(extra="allow")


class ProblemDetailsException(RuntimeError):
    """Base exception carrying structured problem details metadata."""

    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_title = "Service Error"
    default_type = "about:blank"

    def __init__(
        self,
        detail: str | None = None,
        *,
        status_code: int | None = None,
        title: str | None = None,
        type_uri: str | None = None,
        extensions: Mapping[str, Any] | None = None,
    ) -> None:
        message = detail or title or self.default_title
        super().__init__(message)
        self.detail = message
        self.status_code = status_code or self.default_status_code
        self.title = title or self.default_title
        self.problem_type = type_uri or self.default_type
        self.extensions = dict(extensions or {})

    def to_problem_details(self, *, instance: str | None = None) -> ProblemDetails:
        """Return a :class:`ProblemDetails` representation of the exception."""

        return ProblemDetails(
            type=self.problem_type,
            title=self.title,
            status=self.status_code,
            detail=self.detail,
            instance=instance,
            **self.extensions,
        )


def problem_response(problem: ProblemDetails) -> JSONResponse:
    """Render ``problem`` as an ``application/problem+json`` response."""

    payload = problem.model_dump(mode="json", exclude_none=True)
    return JSONResponse(
        payload,
        status_code=payload.get("status", status.HTTP_500_INTERNAL_SERVER_ERROR),
        media_type="application/problem+json",
    )


def _status_title(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "HTTP Error"


def _http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    http_error = cast(StarletteHTTPException, exc)
    detail = http_error.detail if isinstance(http_error.detail, str) else None
    problem = ProblemDetails(
        title=_status_title(http_error.status_code),
        status=http_error.status_code,
        detail=detail,
        instance=str(request.url),
    )
    return problem_response(problem)


def _validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    validation_error = cast(RequestValidationError, exc)
    problem = ProblemDetails(
        type=f"{PROBLEM_BASE_URI}/request-validation",
        title="Request Validation Failed",
        status=422,
        detail="One or more request parameters failed validation.",
        instance=str(request.url),
        errors=jsonable_encoder(validation_error.errors()),
    )
    return problem_response(problem)


def _problem_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    problem = cast(ProblemDetailsException, exc).to_problem_details(
        instance=str(request.url)
    )
    return problem_response(problem)


def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", error=str(exc), path=str(request.url))
    problem = ProblemDetails(
        type=f"{PROBLEM_BASE_URI}/internal-server-error",
        title="Internal Server Error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing the request.",
        instance=str(request.url),
    )
    return problem_response(problem)


def register_exception_handlers(app: FastAPI) -> None:
    """Register shared exception handlers that emit RFC 7807 problem details."""

    app.add_exception_handler(ProblemDetailsException, _problem_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
