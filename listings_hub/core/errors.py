"""
Typed service errors.

Each one is an HTTPException so FastAPI renders it directly; services and
routers raise them instead of building HTTPException(status_code=...) by hand.
"""
from __future__ import annotations

from typing import Any

from fastapi import HTTPException


class ServiceError(HTTPException):
    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: Any = None) -> None:
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class Unauthorized(ServiceError):
    status_code = 401
    default_detail = "Authentication required"


class Forbidden(ServiceError):
    status_code = 403
    default_detail = "Insufficient permissions"


class NotFound(ServiceError):
    status_code = 404
    default_detail = "Not found"


class BadRequest(ServiceError):
    status_code = 400
    default_detail = "Bad request"


class Conflict(BadRequest):
    # precondition no longer holds (e.g. listing already reviewed)
    default_detail = "Precondition failed"


class Internal(ServiceError):
    status_code = 500
    default_detail = "Internal server error"
