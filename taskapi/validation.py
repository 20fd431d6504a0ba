"""
Task Field Validation
======================
Rules shared by create and update. Each ``clean_*`` function takes the raw
JSON value of a present field and either returns the value to store or
raises InvalidInput naming the violated constraint.
"""

from __future__ import annotations

import logging
import re

from taskapi.errors import InvalidInput, NoOp
from taskapi.models import DEFAULT_DESCRIPTION, FUZZ_FIELD, MISSING, TaskFields

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100
TASK_ID_PATTERN = re.compile(r"[+-]?[0-9]+")

TITLE_REQUIRED = "Task title is required and must be a non-empty string."
TITLE_INVALID = "Task title must be a non-empty string if provided."
TITLE_TOO_LONG = f"Task title is too long (max {MAX_TITLE_LENGTH} characters)."
COMPLETED_INVALID = "Field 'completed' must be a boolean if provided."
DESCRIPTION_INVALID = "Field 'description' must be a string if provided."
FUZZ_REJECTED = f"Unexpected field '{FUZZ_FIELD}' received."
ID_INVALID = "Task ID must be a valid number."
NOTHING_TO_UPDATE = "No updateable fields provided (title, description, completed)."


def parse_task_id(raw: str) -> int:
    """Parse a path identifier, e.g. ``"42"`` → 42. Only ASCII digits with an optional sign."""
    if not isinstance(raw, str) or not TASK_ID_PATTERN.fullmatch(raw.strip()):
        raise InvalidInput(ID_INVALID)
    return int(raw.strip())


def clean_title(value, message: str = TITLE_INVALID) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(message)
    title = value.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise InvalidInput(TITLE_TOO_LONG)
    return title


def clean_description(value) -> str:
    if not isinstance(value, str):
        raise InvalidInput(DESCRIPTION_INVALID)
    return value.strip()


def clean_completed(value) -> bool:
    if not isinstance(value, bool):
        raise InvalidInput(COMPLETED_INVALID)
    return value


def validate_create(fields: TaskFields) -> dict:
    """Check a create body and return ``{title, description, completed}``.

    Checks run in a fixed order and the first failure wins: title,
    completed, description, then the fuzz field.
    """
    title = clean_title(fields.title, TITLE_REQUIRED)

    completed = False
    if fields.completed is not MISSING:
        completed = clean_completed(fields.completed)

    # null and "" fall back to the placeholder, like an absent field
    description = DEFAULT_DESCRIPTION
    if fields.description is not MISSING and fields.description not in (None, ""):
        description = clean_description(fields.description)

    if fields.has_fuzz_field:
        logger.error("FUZZING DETECTED: Unexpected field '%s' received!", FUZZ_FIELD)
        raise InvalidInput(FUZZ_REJECTED)

    return {"title": title, "description": description, "completed": completed}


def validate_update(fields: TaskFields) -> dict:
    """Check an update body and return only the changes to apply.

    Every provided field is validated before anything is returned, so a
    caller applying the result never writes a partial update.
    """
    if not fields.provided:
        raise NoOp(NOTHING_TO_UPDATE)

    changes = {}
    if fields.title is not MISSING:
        changes["title"] = clean_title(fields.title)
    if fields.description is not MISSING:
        changes["description"] = clean_description(fields.description)
    if fields.completed is not MISSING:
        changes["completed"] = clean_completed(fields.completed)
    return changes
