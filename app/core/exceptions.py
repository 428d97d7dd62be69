from typing import Optional

from fastapi import HTTPException, status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        field: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        # Offending request field for 400 responses, e.g. "records.0.studentId"
        self.field = field


class DuplicateRecordError(Exception):
    """Raised by the record store when an insert violates a uniqueness constraint."""


def to_http_exception(e: ServiceError) -> HTTPException:
    """Map a ServiceError to the HTTP error returned by routers."""
    if e.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return HTTPException(status_code=e.status_code, detail="Internal server error")
    if e.field:
        return HTTPException(status_code=e.status_code, detail={"message": e.message, "field": e.field})
    return HTTPException(status_code=e.status_code, detail=e.message)
