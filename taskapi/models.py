"""
Task API Models
================
Data types shared by the store and the HTTP adapter.

    Task        — the stored record (id, title, description, completed)
    TaskFields  — a parsed request body; each field is absent (MISSING)
                  or carries whatever raw value the caller sent
    *Out        — pydantic schemas describing the JSON the API returns
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Optional

from pydantic import BaseModel


DEFAULT_DESCRIPTION = "No description"
FUZZ_FIELD = "unexpected_fuzz_field"
UPDATABLE_FIELDS = ("title", "description", "completed")


class _Missing:
    """Marker for a field the request body did not carry."""

    _instance: Optional[_Missing] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


# ─────────────────────────────────────────────────────────────
#  Task
# ─────────────────────────────────────────────────────────────

@dataclass
class Task:
    """A single task record held by the TaskStore."""

    id: int
    title: str
    description: str = DEFAULT_DESCRIPTION
    completed: bool = False

    def to_dict(self) -> dict:
        """Serialize to dict for the JSON response."""
        return asdict(self)


# ─────────────────────────────────────────────────────────────
#  Request Body
# ─────────────────────────────────────────────────────────────

@dataclass
class TaskFields:
    """Tri-state view of a create/update body.

    A field is either MISSING, or present with the raw JSON value. Whether
    a present value is valid is decided by ``taskapi.validation``.
    """

    title: Any = MISSING
    description: Any = MISSING
    completed: Any = MISSING
    extra: list[str] = field(default_factory=list)  # unrecognised top-level keys

    @classmethod
    def from_body(cls, body: dict) -> TaskFields:
        return cls(
            title=body.get("title", MISSING),
            description=body.get("description", MISSING),
            completed=body.get("completed", MISSING),
            extra=[k for k in body if k not in UPDATABLE_FIELDS],
        )

    @property
    def provided(self) -> list[str]:
        """Names of the updatable fields present in the body."""
        return [name for name in UPDATABLE_FIELDS
                if getattr(self, name) is not MISSING]

    @property
    def has_fuzz_field(self) -> bool:
        return FUZZ_FIELD in self.extra


# ─────────────────────────────────────────────────────────────
#  Response Schemas
# ─────────────────────────────────────────────────────────────

class TaskOut(BaseModel):
    id: int
    title: str
    description: str
    completed: bool


class HealthOut(BaseModel):
    status: str
    timestamp: str


class MessageOut(BaseModel):
    message: str


class DeletedOut(BaseModel):
    message: str
    task: TaskOut


class ErrorOut(BaseModel):
    error: str
    message: str
