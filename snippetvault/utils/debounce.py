"""Debounce a callable on a timer thread: only the last call within `delay` seconds runs."""
import threading
from typing import Any, Callable, Optional, Tuple


class Debouncer:
    def __init__(self, func: Callable[..., Any], delay: float) -> None:
        self._func = func
        self.delay = delay
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Tuple[tuple, dict]] = None
        # Identifies the timer that owns the pending call
        self._token: Optional[object] = None

    def __call__(self, *args, **kwargs) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._token = token = object()
            self._timer = threading.Timer(self.delay, self._fire, args=(token,))
            self._timer.daemon = True
            self._timer.start()

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def _take(self, token: Optional[object] = None) -> Optional[Tuple[tuple, dict]]:
        with self._lock:
            if token is not None and token is not self._token:
                return None
            call, self._pending = self._pending, None
            self._token = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            return call

    def _fire(self, token: object) -> None:
        # A timer superseded after it started firing must not run the newer call early
        call = self._take(token)
        if call is not None:
            self._func(*call[0], **call[1])

    def flush(self) -> bool:
        """Run the pending call now on the caller's thread."""
        call = self._take()
        if call is None:
            return False
        self._func(*call[0], **call[1])
        return True

    def cancel(self) -> None:
        self._take()
