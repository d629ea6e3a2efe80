"""Service protocols (interfaces) for view-side collaborators. Enables mocking and swapping implementations."""
from typing import Protocol


class Navigator(Protocol):
    """Routing chrome owned by the view layer: where the user is, and how to send them elsewhere."""

    def current_path(self) -> str:
        """Return the path of the view currently shown (e.g. "/dashboard")."""
        ...

    def navigate(self, path: str) -> None:
        """Replace the current view with the one at path."""
        ...


class SystemThemeProvider(Protocol):
    """OS-level color scheme lookup used when the theme mode is "auto"."""

    def __call__(self) -> str:
        """Return "dark" or "light"."""
        ...
