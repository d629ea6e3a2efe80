"""
Structured request logging: method, path, status_code, latency_ms for every API call.
"""
import json
import logging
import threading
import time
from pathlib import Path

from snippetvault.core.settings import get_settings

_lock = threading.Lock()
_request_logger: logging.Logger | None = None


def setup_request_logger(log_path: Path | None) -> logging.Logger:
    """Configure and return a logger for request logs. Stream handler when log_path is None."""
    logger = logging.getLogger("snippetvault.requests")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    if not logger.handlers:
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(log_path, encoding="utf-8")
        else:
            handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger


def get_request_logger() -> logging.Logger:
    """Request logger, configured from settings on first use so importing writes nothing to disk."""
    global _request_logger
    with _lock:
        if _request_logger is None:
            _request_logger = setup_request_logger(get_settings().log_path)
        return _request_logger


def log_request(method: str, path: str, status_code: int | None, latency_ms: float, error: str | None = None) -> None:
    """Emit one structured JSON log line. status_code is None for transport failures."""
    payload = {
        "method": method,
        "path": path,
        "status_code": status_code,
        "latency_ms": round(latency_ms, 2),
        "timestamp": time.time(),
    }
    if error:
        payload["error"] = error
    get_request_logger().info(json.dumps(payload))
