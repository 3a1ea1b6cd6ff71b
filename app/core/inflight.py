"""Thread-safe single-flight guard: one outstanding request per (user, action, target)."""
import threading
import logging
from contextlib import contextmanager
from typing import Iterator, Tuple

from app.core.exceptions import ConflictError

logger = logging.getLogger(__name__)
_lock = threading.Lock()
_in_flight: set[Tuple[str, ...]] = set()


def acquire(*key: str) -> bool:
    """Mark key as in flight. Returns False if it already is."""
    with _lock:
        if key in _in_flight:
            return False
        _in_flight.add(key)
        logger.debug(f"Acquired in-flight slot {key}")
        return True


def release(*key: str) -> None:
    with _lock:
        _in_flight.discard(key)
        logger.debug(f"Released in-flight slot {key}")


def is_in_flight(*key: str) -> bool:
    with _lock:
        return key in _in_flight


@contextmanager
def single_flight(*key: str) -> Iterator[None]:
    """Run the body unless the same key is already running; a duplicate gets 409."""
    if not acquire(*key):
        raise ConflictError("This action is already in progress")
    try:
        yield
    finally:
        release(*key)
