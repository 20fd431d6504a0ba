"""
TaskStore — In-Memory Task Collection
======================================
Owns the ordered task list and the id counter. All access goes through
the store's operations; the HTTP adapter holds a reference to one store
created at startup.

Invariants:
    - ids are unique and never reused, even after deletion
    - ``next_id`` is strictly greater than every id ever assigned
    - every stored task passed ``taskapi.validation``

Mutations are serialized by a lock, so no caller can observe a
half-applied create/update/delete/reset.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Optional

from taskapi.errors import NotFound
from taskapi.models import MISSING, Task, TaskFields
from taskapi.validation import validate_create, validate_update

logger = logging.getLogger(__name__)


SEED_TASKS = (
    Task(id=1, title="Learn API Testing Basics", completed=False,
         description="Understand different types of API tests."),
    Task(id=2, title="Prepare Video Script", completed=True,
         description="Outline content for the 10-minute video."),
    Task(id=3, title="Record API Demos", completed=False,
         description="Create live demos for each test type."),
)
SEED_NEXT_ID = 4


class TaskStore:
    """Ordered, in-memory collection of tasks.

    The store starts in the seed state: three demo tasks, next id 4.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._tasks: list[Task] = []
        self._next_id = SEED_NEXT_ID
        self._seed()

    def _seed(self):
        self._tasks = [copy.copy(t) for t in SEED_TASKS]
        self._next_id = SEED_NEXT_ID

    def _find(self, task_id: int) -> Task:
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise NotFound("Task not found.")

    # ── Queries ──────────────────────────────────────────────

    def list(self) -> list[Task]:
        """All tasks in insertion order (a copy of the list)."""
        with self._lock:
            return list(self._tasks)

    def get(self, task_id: int) -> Task:
        with self._lock:
            return self._find(task_id)

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._tasks)

    # ── Mutations ────────────────────────────────────────────

    def create(self, title=MISSING, description=MISSING, completed=MISSING,
               fields: Optional[TaskFields] = None) -> Task:
        """Validate and append a new task under the next id.

        Pass either the three fields directly or a parsed ``TaskFields``
        body (which also carries any extra top-level keys).
        """
        if fields is None:
            fields = TaskFields(title=title, description=description, completed=completed)
        values = validate_create(fields)

        with self._lock:
            task = Task(id=self._next_id, **values)
            self._next_id += 1
            self._tasks.append(task)

        logger.info("AUDIT_LOG: New task created with id %d - Title: '%s'", task.id, task.title)
        return task

    def update(self, task_id: int, title=MISSING, description=MISSING, completed=MISSING,
               fields: Optional[TaskFields] = None) -> Task:
        """Apply the provided fields to an existing task.

        Raises NotFound before looking at the body; raises InvalidInput
        (or NoOp) without touching the task.
        """
        if fields is None:
            fields = TaskFields(title=title, description=description, completed=completed)

        with self._lock:
            task = self._find(task_id)
            changes = validate_update(fields)
            for name, value in changes.items():
                setattr(task, name, value)

        logger.info("AUDIT_LOG: Task updated with id %d", task.id)
        return task

    def delete(self, task_id: int) -> Task:
        with self._lock:
            task = self._find(task_id)
            self._tasks.remove(task)

        logger.info("AUDIT_LOG: Task deleted with id %d", task_id)
        return task

    def reset(self) -> None:
        """Discard everything and restore the seed state."""
        with self._lock:
            self._seed()
        logger.info("ADMIN ACTION: All tasks have been reset by admin.")
