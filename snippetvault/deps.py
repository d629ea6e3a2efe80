"""Composition root: construct settings, storage, transport and stores once and thread them explicitly."""
from dataclasses import dataclass
from typing import Optional

import requests

from snippetvault.api_client import ApiClient
from snippetvault.core.settings import Settings, get_settings
from snippetvault.repositories import FileLocalStorage
from snippetvault.repositories.protocols import LocalStorage
from snippetvault.services.navigation import HistoryNavigator
from snippetvault.services.preferences_service import ThemePreferences
from snippetvault.services.profile_service import ProfileService
from snippetvault.services.protocols import Navigator, SystemThemeProvider
from snippetvault.services.search_service import SearchHistory, SnippetSearch
from snippetvault.services.session_service import SessionStore
from snippetvault.services.snippet_service import SnippetStore


def get_storage(settings: Settings) -> LocalStorage:
    return FileLocalStorage(settings.storage_path)


def get_api_client(
    settings: Settings,
    storage: LocalStorage,
    navigator: Navigator,
    http_session: Optional[requests.Session] = None,
) -> ApiClient:
    return ApiClient(storage, navigator=navigator, settings=settings, session=http_session)


@dataclass
class Services:
    settings: Settings
    storage: LocalStorage
    navigator: Navigator
    client: ApiClient
    session: SessionStore
    snippets: SnippetStore
    profile: ProfileService
    preferences: ThemePreferences
    search_history: SearchHistory
    search: SnippetSearch

    def close(self) -> None:
        self.search.cancel()
        self.client.close()


def build_services(
    settings: Optional[Settings] = None,
    storage: Optional[LocalStorage] = None,
    navigator: Optional[Navigator] = None,
    http_session: Optional[requests.Session] = None,
    system_theme: Optional[SystemThemeProvider] = None,
    rehydrate: bool = True,
) -> Services:
    """Wire every service. Rehydrates the session from storage unless told not to."""
    settings = settings or get_settings()
    storage = storage if storage is not None else get_storage(settings)
    navigator = navigator if navigator is not None else HistoryNavigator()
    client = get_api_client(settings, storage, navigator, http_session)
    session = SessionStore(client, storage)
    snippets = SnippetStore(client)
    history = SearchHistory(storage, limit=settings.search_history_limit)
    services = Services(
        settings=settings,
        storage=storage,
        navigator=navigator,
        client=client,
        session=session,
        snippets=snippets,
        profile=ProfileService(client, session),
        preferences=ThemePreferences(storage, system_theme),
        search_history=history,
        search=SnippetSearch(snippets, history, delay_ms=settings.search_debounce_ms),
    )
    if rehydrate:
        session.rehydrate()
    return services
