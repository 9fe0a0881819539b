"""HTTP helpers and exception definitions used across services."""

from .errors import (
    PROBLEM_BASE_URI,
    ProblemDetails,
    ProblemDetailsException,
    problem_response,
    register_exception_handlers,
)

__all__ = [
    "PROBLEM_BASE_URI",
    "ProblemDetails",
    "ProblemDetailsException",
    "problem_response",
    "register_exception_handlers",
]
