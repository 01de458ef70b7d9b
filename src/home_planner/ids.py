"""Collision-resistant string identifiers and timestamps for new rows.

Format: ``<prefix>_<epoch-millis>_<16 hex chars>_<counter base36>``.
Uniqueness is not checked against the store.

Usage:
    from home_planner.ids import create_id

    snapshot_id = create_id("backup_snapshot")
"""

import itertools
import random
import secrets
import time
from datetime import datetime, timezone

_COUNTER_WRAP = 1_000_000
_counter = itertools.count(1)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    """Format a non-negative integer in lowercase base 36."""
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _random_hex(byte_length: int) -> str:
    """Return ``byte_length`` random bytes as hex.

    Uses the OS CSPRNG; falls back to ``random`` only when no secure
    source is available on the platform.
    """
    try:
        return secrets.token_hex(byte_length)
    except NotImplementedError:
        return "".join(f"{random.randrange(256):02x}" for _ in range(byte_length))


def create_id(prefix: str) -> str:
    """Generate a new id for an entity.

    Args:
        prefix: Entity prefix, e.g. ``"task"`` or ``"backup_snapshot"``.

    Returns:
        Identifier string such as ``"task_1760000000000_9f1c..._1a"``.
    """
    counter = next(_counter) % _COUNTER_WRAP
    millis = time.time_ns() // 1_000_000
    return f"{prefix}_{millis}_{_random_hex(8)}_{_to_base36(counter)}"


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with milliseconds and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
