"""
Task API CLI
=============
Entry point for running and inspecting the demo server.

Usage:
    # Start the server (defaults: 0.0.0.0:3000)
    python -m taskapi.cli serve
    python -m taskapi.cli serve --port 8080 --admin-key s3cret --log-level DEBUG

    # Print the route table
    python -m taskapi.cli routes

    # Print the seed tasks as JSON
    python -m taskapi.cli seed

Environment:
    TASKAPI_HOST, TASKAPI_PORT, TASKAPI_ADMIN_KEY, TASKAPI_LOG_LEVEL,
    TASKAPI_SLOW_MIN_MS, TASKAPI_SLOW_MAX_MS  (flags take precedence)
"""

from __future__ import annotations

import argparse
import json
import sys

from taskapi.config import ServerConfig
from taskapi.store import SEED_TASKS


# ─────────────────────────────────────────────────────────────
#  Commands
# ─────────────────────────────────────────────────────────────

def load_config(args) -> ServerConfig:
    """Environment first, then any flag the user actually passed."""
    return ServerConfig.from_env().override(
        host=getattr(args, "host", None),
        port=getattr(args, "port", None),
        admin_api_key=getattr(args, "admin_key", None),
        log_level=getattr(args, "log_level", None),
    )


def cmd_serve(args):
    """Run the HTTP server until interrupted."""
    try:
        config = load_config(args)
    except ValueError as e:
        print(f"✘ {e}")
        return 1

    try:
        import uvicorn  # noqa: F401
    except ImportError:
        print("✘ uvicorn is required to serve the API.")
        print("  Install it with:  pip install uvicorn fastapi")
        return 1

    from taskapi.server import run_server
    run_server(config)
    return 0


def cmd_routes(args):
    from taskapi.server import print_routes
    print_routes()
    return 0


def cmd_seed(args):
    print(json.dumps([t.to_dict() for t in SEED_TASKS], indent=2))
    return 0


# ─────────────────────────────────────────────────────────────
#  Main
# ─────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskapi",
        description="Task Target API — a controllable demo server for API testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  taskapi serve\n"
            "  taskapi serve --port 8080 --admin-key s3cret\n"
            "  taskapi routes\n"
            "  taskapi seed\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # serve
    p_serve = subparsers.add_parser("serve", help="Start the HTTP server")
    p_serve.add_argument("--host", default=None, help="Bind address (default: 0.0.0.0)")
    p_serve.add_argument("--port", "-p", default=None, type=int,
                         help="Port number (default: 3000)")
    p_serve.add_argument("--admin-key", default=None,
                         help="Shared secret expected in the X-API-KEY header")
    p_serve.add_argument("--log-level", default=None,
                         choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                         help="Logging level (default: INFO)")

    # routes
    subparsers.add_parser("routes", help="List the HTTP routes")

    # seed
    subparsers.add_parser("seed", help="Print the seed tasks as JSON")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {
        "serve": cmd_serve,
        "routes": cmd_routes,
        "seed": cmd_seed,
    }

    if args.command in commands:
        return commands[args.command](args)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
