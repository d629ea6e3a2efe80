"""Repository protocols (interfaces) for testability and clear boundaries."""
from typing import Optional, Protocol


class LocalStorage(Protocol):
    """Durable string key/value storage that survives restarts (browser localStorage semantics)."""

    def get_item(self, key: str) -> Optional[str]:
        """Return stored string for key, or None if absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store value under key and persist."""
        ...

    def remove_item(self, key: str) -> None:
        """Delete key if present and persist. Missing keys are ignored."""
        ...
