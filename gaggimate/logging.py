import logging
import threading
from collections import deque
from typing import Deque, Dict, List

PACKAGE_LOGGER = "gaggimate"


class RingBufferHandler(logging.Handler):
    def __init__(self, max_entries: int = 200):
        super().__init__()
        self.max_entries = max_entries
        self._events: Deque[Dict] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        event = {
            "event": record.getMessage(),
            "level": record.levelname,
            "logger": record.name,
            "ts": record.created,
            "details": getattr(record, "details", {}),
        }
        with self._lock:
            self._events.append(event)

    def get_events(self) -> List[Dict]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


def create_logger(name: str = PACKAGE_LOGGER, ring_size: int = 200, level: str = "INFO") -> logging.Logger:
    """
    Attach a ``RingBufferHandler`` to ``name`` unless one is already there.

    Loggers below ``name`` (``gaggimate.parsing.shot.decode`` and friends)
    propagate into the same ring.
    """
    logger = logging.getLogger(name)
    if get_ring_handler(logger) is not None:
        return logger
    logger.setLevel(level.upper())
    handler = RingBufferHandler(max_entries=ring_size)
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_ring_handler(logger: logging.Logger) -> RingBufferHandler | None:
    for handler in logger.handlers:
        if isinstance(handler, RingBufferHandler):
            return handler
    return None
