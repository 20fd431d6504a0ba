"""
Task API Errors — Failure Taxonomy
===================================
Every failure the core can signal, each bound to the HTTP status the
adapter emits for it.

    InvalidInput        → 400  malformed id, missing/invalid field, fuzz field
    NoOp                → 400  update carried none of the updatable fields
    Unauthorized        → 401  admin key missing or wrong
    NotFound            → 404  no task with that id, or no matching route
    ServiceUnavailable  → 503  simulated stress failure on /tasks/slow
    Internal            → 500  anything unexpected
"""

from __future__ import annotations


class TaskAPIError(Exception):
    """Base class for failures reported to the caller as ``{error, message}``."""

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class InvalidInput(TaskAPIError):
    status_code = 400
    error = "Bad Request"


class NoOp(InvalidInput):
    """An update that would change nothing."""


class Unauthorized(TaskAPIError):
    status_code = 401
    error = "Unauthorized"


class NotFound(TaskAPIError):
    status_code = 404
    error = "Not Found"


class ServiceUnavailable(TaskAPIError):
    status_code = 503
    error = "Service Unavailable"


class Internal(TaskAPIError):
    status_code = 500
    error = "Internal Server Error"
