from .navigation import HistoryNavigator
from .preferences_service import ThemePreferences
from .profile_service import ProfileService
from .search_service import SearchHistory, SnippetSearch
from .session_service import SessionStore
from .snippet_service import SnippetStore

__all__ = [
    "HistoryNavigator",
    "ProfileService",
    "SearchHistory",
    "SessionStore",
    "SnippetSearch",
    "SnippetStore",
    "ThemePreferences",
]
