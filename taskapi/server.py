"""
Task API Server — HTTP Adapter
===============================
FastAPI application that exposes the TaskStore, the slow responder and
the admin gate over HTTP. The adapter only parses requests, dispatches
and serializes; all decisions live in the core modules.

Launch:
    python -m taskapi.cli serve                 # Via CLI
    uvicorn taskapi.server:app --port 3000      # Direct

Endpoints:
    GET    /health                  → {status, timestamp}
    GET    /tasks                   → all tasks
    POST   /tasks                   → create a task
    GET    /tasks/slow              → ≤2 tasks after 1.5–3.5s, sometimes 503
    GET    /tasks/{id}              → one task
    PUT    /tasks/{id}              → partial update
    DELETE /tasks/{id}              → delete
    POST   /admin/reset-all-tasks   → restore seed state (X-API-KEY)
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import time
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Awaitable, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskapi import __version__
from taskapi.auth import ADMIN_HEADER, AdminGate
from taskapi.config import ServerConfig
from taskapi.errors import Internal, InvalidInput, NotFound, TaskAPIError
from taskapi.log import configure_logging, log_access, log_request_body
from taskapi.models import (
    DeletedOut, ErrorOut, HealthOut, MessageOut, TaskFields, TaskOut,
)
from taskapi.slow import SlowResponder
from taskapi.store import TaskStore
from taskapi.validation import parse_task_id

logger = logging.getLogger(__name__)


ROUTES = [
    ("GET", "/health", ""),
    ("GET", "/tasks", ""),
    ("POST", "/tasks", "(Body: {title: string, completed?: boolean, description?: string})"),
    ("GET", "/tasks/:id", ""),
    ("PUT", "/tasks/:id", "(Body: {title?: string, completed?: boolean, description?: string})"),
    ("DELETE", "/tasks/:id", ""),
    ("GET", "/tasks/slow", "(Simulates a slow response, good for load/stress demos)"),
    ("POST", "/admin/reset-all-tasks", f"(Requires {ADMIN_HEADER} header for auth)"),
]

_ERROR_RESPONSES = {
    400: {"model": ErrorOut},
    404: {"model": ErrorOut},
}


# ─────────────────────────────────────────────────────────────
#  Request Helpers
# ─────────────────────────────────────────────────────────────

async def read_json_body(request: Request) -> dict:
    """Parse the request body as a JSON object; an empty body is ``{}``."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except (ValueError, RecursionError):
        raise InvalidInput("Request body must be valid JSON.")
    if not isinstance(body, dict):
        raise InvalidInput("Request body must be a JSON object.")
    log_request_body(request.method, body)
    return body


def _error_response(exc: TaskAPIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _not_found_route(request: Request) -> JSONResponse:
    return _error_response(NotFound(
        f"The requested URL {request.url.path} was not found on this server."
    ))


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2026-01-01T00:00:00.000Z``."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ─────────────────────────────────────────────────────────────
#  App Factory
# ─────────────────────────────────────────────────────────────

def create_app(config: Optional[ServerConfig] = None,
               store: Optional[TaskStore] = None,
               rng: Optional[random.Random] = None,
               sleep: Optional[Callable[[float], Awaitable[None]]] = None) -> FastAPI:
    """Build the FastAPI app around one store instance.

    ``rng`` and ``sleep`` are forwarded to the SlowResponder so tests can
    make ``/tasks/slow`` deterministic and instant.
    """
    config = config or ServerConfig()
    store = store if store is not None else TaskStore()
    slow = SlowResponder(
        store,
        rng=rng,
        sleep=sleep or asyncio.sleep,
        min_ms=config.slow_min_ms,
        max_ms=config.slow_max_ms,
        failure_threshold_ms=config.slow_failure_threshold_ms,
        failure_rate=config.slow_failure_rate,
    )
    gate = AdminGate(config.admin_api_key)

    app = FastAPI(title="Task Target API", version=__version__)
    app.state.config = config
    app.state.store = store
    app.state.slow = slow
    app.state.gate = gate

    # ── Middleware ───────────────────────────────────────────

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log_access(request.method, request.url.path, 500,
                       (time.perf_counter() - start) * 1000)
            raise
        log_access(request.method, request.url.path, response.status_code,
                   (time.perf_counter() - start) * 1000)
        return response

    # ── Error Handlers ───────────────────────────────────────

    @app.exception_handler(TaskAPIError)
    async def handle_task_error(request: Request, exc: TaskAPIError):
        return _error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        # unknown path or unsupported method on a known path
        if exc.status_code in (404, 405):
            return _not_found_route(request)
        return JSONResponse(status_code=exc.status_code, content={
            "error": HTTPStatus(exc.status_code).phrase,
            "message": str(exc.detail),
        })

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return _error_response(InvalidInput("Request could not be parsed."))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("An unexpected error occurred: %s", exc)
        return _error_response(Internal(
            "Something went wrong on the server. Please try again later."
        ))

    # ── Routes — Health ──────────────────────────────────────

    @app.get("/health", response_model=HealthOut)
    async def health():
        return {"status": "UP", "timestamp": utc_timestamp()}

    # ── Routes — Tasks ───────────────────────────────────────

    @app.get("/tasks", response_model=list[TaskOut])
    async def list_tasks():
        return [t.to_dict() for t in store.list()]

    @app.post("/tasks", status_code=201, response_model=TaskOut,
              responses=_ERROR_RESPONSES)
    async def create_task(request: Request):
        body = await read_json_body(request)
        task = store.create(fields=TaskFields.from_body(body))
        return task.to_dict()

    # Registered before /tasks/{task_id} so "slow" is never read as an id.
    @app.get("/tasks/slow", response_model=list[TaskOut],
             responses={503: {"model": ErrorOut}})
    async def slow_tasks():
        logger.info("Request received for /tasks/slow endpoint...")
        return [t.to_dict() for t in await slow.respond()]

    @app.get("/tasks/{task_id}", response_model=TaskOut, responses=_ERROR_RESPONSES)
    async def get_task(task_id: str):
        return store.get(parse_task_id(task_id)).to_dict()

    @app.put("/tasks/{task_id}", response_model=TaskOut, responses=_ERROR_RESPONSES)
    async def update_task(task_id: str, request: Request):
        tid = parse_task_id(task_id)
        body = await read_json_body(request)
        task = store.update(tid, fields=TaskFields.from_body(body))
        return task.to_dict()

    @app.delete("/tasks/{task_id}", response_model=DeletedOut, responses=_ERROR_RESPONSES)
    async def delete_task(task_id: str):
        task = store.delete(parse_task_id(task_id))
        return {"message": "Task deleted successfully", "task": task.to_dict()}

    # ── Routes — Admin ───────────────────────────────────────

    @app.post("/admin/reset-all-tasks", response_model=MessageOut,
              responses={401: {"model": ErrorOut}})
    async def reset_all_tasks(request: Request):
        client = request.client.host if request.client else "unknown"
        gate.check(request.headers.get(ADMIN_HEADER), client=client)
        store.reset()
        return {"message": "All tasks have been reset successfully."}

    return app


# ─────────────────────────────────────────────────────────────
#  Startup
# ─────────────────────────────────────────────────────────────

def print_routes():
    print("Available routes:")
    for method, path, note in ROUTES:
        print(f"  {method:6s} {path:24s} {note}".rstrip())


def print_banner(config: ServerConfig, store: TaskStore):
    print(f"\n☤ ─── Task Target API ───")
    print(f"  Mock API server is running on http://localhost:{config.port}")
    print("  " + "-" * 57)
    seeds = [{"id": t.id, "title": t.title} for t in store.list()]
    print("  Initial tasks available:", json.dumps(seeds, indent=2))
    print(f"  Admin API Key for /admin/reset-all-tasks (Header {ADMIN_HEADER}): "
          f"{config.admin_api_key}")
    print("  " + "-" * 57)
    print_routes()
    print("  Press Ctrl+C to stop\n")


def run_server(config: Optional[ServerConfig] = None):
    """Launch the Task Target API with uvicorn."""
    import uvicorn

    config = config or ServerConfig.from_env()
    configure_logging(config.log_level)
    server_app = create_app(config)
    print_banner(config, server_app.state.store)
    uvicorn.run(server_app, host=config.host, port=config.port, log_level="warning")


app = create_app(ServerConfig.from_env())


if __name__ == "__main__":
    run_server()
