"""Repository layer: durable storage abstractions and implementations."""

from snippetvault.repositories.protocols import LocalStorage
from snippetvault.repositories.storage_repository import FileLocalStorage

__all__ = [
    "LocalStorage",
    "FileLocalStorage",
]
