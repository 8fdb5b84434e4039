"""Report id generation and clock helpers.

Report ids and timestamps are injected so outputs stay deterministic under
test: pass a SequentialIdGenerator and a fixed ``now``.
"""
import itertools
import threading
from datetime import datetime, timezone
from typing import Optional, Protocol
from uuid import uuid4


class IdGenerator(Protocol):
    """Produces unique ids for report objects."""

    def next_id(self, prefix: str) -> str:
        ...


class UuidIdGenerator:
    """Default generator: ``<prefix>-<uuid4>``."""

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{uuid4()}"


class SequentialIdGenerator:
    """Monotonic counter generator: ``<prefix>-1``, ``<prefix>-2``, ..."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self, prefix: str) -> str:
        with self._lock:
            value = next(self._counter)
        return f"{prefix}-{value}"


_default_generator = UuidIdGenerator()


def resolve_id_generator(id_generator: Optional[IdGenerator]) -> IdGenerator:
    return id_generator or _default_generator


def resolve_now(now: Optional[datetime]) -> datetime:
    """Return ``now`` or the current UTC time."""
    return now if now is not None else datetime.now(timezone.utc)
