"""In-process Navigator: tracks the current view path and notifies listeners on navigation."""
import logging
import threading
from typing import Callable, List

logger = logging.getLogger(__name__)


class HistoryNavigator:
    """Navigator for headless use and for view layers that poll `current_path()`."""

    def __init__(self, start_path: str = "/") -> None:
        self._history: List[str] = [start_path]
        self._listeners: List[Callable[[str], None]] = []
        self._lock = threading.Lock()

    def current_path(self) -> str:
        with self._lock:
            return self._history[-1]

    @property
    def history(self) -> List[str]:
        with self._lock:
            return list(self._history)

    def subscribe(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def navigate(self, path: str) -> None:
        with self._lock:
            self._history.append(path)
        logger.debug("Navigated to %s", path)
        for listener in list(self._listeners):
            listener(path)
