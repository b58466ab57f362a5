"""ID generation and timestamp utilities."""

import time
import uuid
from datetime import datetime, timezone


def generate_local_id() -> str:
    """Generate a client-side id for an unsaved stage or transition.

    Millisecond timestamp plus a short random suffix, so ids created within
    the same millisecond stay unique.
    """
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def generate_name_suffix() -> str:
    """Generate a short suffix for default technical names (8-char hex)."""
    return uuid.uuid4().hex[:8]


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
