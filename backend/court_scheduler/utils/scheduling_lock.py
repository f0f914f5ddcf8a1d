"""
Per-event serialization of scheduling writes.

Court assignment and auto-scheduling read courts/encounters/blocks, then write
them back. Two concurrent runs for the same event would interleave and leave
inconsistent court assignments, so every write operation takes the event's
lock first. Divisions belong to exactly one event, so this also serializes
per-division runs.

Process-local only: multiple worker processes need a database-level lock.
"""

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Iterator

logger = logging.getLogger(__name__)

_registry_guard = threading.Lock()
_event_locks: Dict[int, threading.RLock] = defaultdict(threading.RLock)


def get_event_lock(event_id: int) -> threading.RLock:
    with _registry_guard:
        return _event_locks[event_id]


@contextmanager
def scheduling_lock(event_id: int) -> Iterator[None]:
    """Hold the event's scheduling lock for the duration of the block."""
    lock = get_event_lock(event_id)
    if not lock.acquire(blocking=False):
        logger.info("Waiting for scheduling lock on event %s", event_id)
        lock.acquire()
    try:
        yield
    finally:
        lock.release()
