"""
Admin Gate
===========
A single static shared-secret check in front of the reset operation.
No sessions, no expiry, no per-caller identity.
"""

from __future__ import annotations

import logging
from typing import Optional

from taskapi.errors import Unauthorized

logger = logging.getLogger(__name__)

ADMIN_HEADER = "X-API-KEY"


class AdminGate:
    def __init__(self, api_key: str):
        self.api_key = api_key

    def check(self, provided: Optional[str], client: str = "unknown") -> None:
        """Raise Unauthorized unless ``provided`` equals the configured key."""
        if provided and provided == self.api_key:
            return
        logger.warning("Failed admin access attempt. IP: %s. Provided key: %s",
                       client, provided or "None")
        raise Unauthorized(
            f"Unauthorized. Valid {ADMIN_HEADER} header required for this operation."
        )
