"""Business errors returned by the entity services."""

from __future__ import annotations

from fastapi import status

from shared.http.errors import PROBLEM_BASE_URI, ProblemDetailsException

__all__ = ["EmptyFieldsError", "NotFoundError", "RecordServiceError"]


class RecordServiceError(ProblemDetailsException):
    """Base class for expected, non-fatal entity service failures."""

    @property
    def msg(self) -> str:
        return self.detail


class EmptyFieldsError(RecordServiceError):
    """Raised when required payload fields are blank or zero."""

    default_status_code = 422
    default_title = "Empty Fields"
    default_type = f"{PROBLEM_BASE_URI}/empty-fields"

    def __init__(self, msg: str, *, fields: list[str] | None = None) -> None:
        self.fields = list(fields or [])
        super().__init__(
            detail=msg,
            title=self.default_title,
            type_uri=self.default_type,
            extensions={"fields": self.fields},
        )


class NotFoundError(RecordServiceError):
    """Raised when no record exists for the requested id."""

    default_status_code = status.HTTP_404_NOT_FOUND
    default_title = "Not Found"
    default_type = f"{PROBLEM_BASE_URI}/not-found"

    def __init__(self, entity: str, record_id: int, *, msg: str | None = None) -> None:
        self.entity = entity
        self.record_id = record_id
        super().__init__(
            detail=msg or f"{entity} with ID {record_id} can not be found",
            title=self.default_title,
            type_uri=self.default_type,
            extensions={"entity": entity, "recordId": record_id},
        )
