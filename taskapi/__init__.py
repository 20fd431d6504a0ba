"""
Task Target API — a controllable HTTP target for API testing demos
===================================================================
CRUD over an in-memory task list, plus a deliberately slow endpoint and
an admin-gated reset.

Components:
    TaskStore       — ordered tasks, id counter, seed state
    SlowResponder   — random delay with simulated 503
    AdminGate       — static X-API-KEY check
    create_app      — FastAPI adapter (taskapi.server)
"""

__version__ = "0.1.0"

from taskapi.errors import (
    TaskAPIError, InvalidInput, NoOp, NotFound, Unauthorized,
    ServiceUnavailable, Internal,
)
from taskapi.models import Task, TaskFields, MISSING
from taskapi.store import TaskStore
from taskapi.slow import SlowResponder
from taskapi.auth import AdminGate
from taskapi.config import ServerConfig

__all__ = [
    "TaskAPIError", "InvalidInput", "NoOp", "NotFound", "Unauthorized",
    "ServiceUnavailable", "Internal",
    "Task", "TaskFields", "MISSING",
    "TaskStore", "SlowResponder", "AdminGate", "ServerConfig",
]
