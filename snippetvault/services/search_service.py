"""
Search history (most recent first, capped) and debounced search-as-you-type over the snippet store.
"""
import json
import logging
import threading
from typing import List

from snippetvault.repositories.protocols import LocalStorage
from snippetvault.services.snippet_service import SnippetStore
from snippetvault.utils.debounce import Debouncer

logger = logging.getLogger(__name__)

HISTORY_KEY = "snippet_search_history"


class SearchHistory:
    """Past search terms persisted under snippet_search_history."""

    def __init__(self, storage: LocalStorage, limit: int = 8) -> None:
        self._storage = storage
        self.limit = limit
        self._lock = threading.Lock()

    def items(self) -> List[str]:
        raw = self._storage.get_item(HISTORY_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt %s record", HISTORY_KEY)
            return []
        if not isinstance(data, list):
            return []
        return [t for t in data if isinstance(t, str)][: self.limit]

    def _save(self, terms: List[str]) -> None:
        self._storage.set_item(HISTORY_KEY, json.dumps(terms[: self.limit]))

    def add(self, term: str) -> List[str]:
        term = (term or "").strip()
        with self._lock:
            terms = self.items()
            if not term:
                return terms
            terms = [term] + [t for t in terms if t != term]
            self._save(terms)
            return terms[: self.limit]

    def remove(self, term: str) -> List[str]:
        with self._lock:
            terms = [t for t in self.items() if t != term]
            self._save(terms)
            return terms

    def clear(self) -> None:
        with self._lock:
            self._storage.remove_item(HISTORY_KEY)


class SnippetSearch:
    """
    Search-as-you-type: each keystroke restarts the timer; when it fires the term is recorded
    and page 1 is fetched. Only the timer is cancelled, never a request already issued.
    """

    def __init__(self, store: SnippetStore, history: SearchHistory, delay_ms: int = 250, limit: int = 6) -> None:
        self._store = store
        self._history = history
        self._limit = limit
        self._debouncer = Debouncer(self._run, delay_ms / 1000.0)

    def search(self, term: str, **filters) -> None:
        self._debouncer(term, **filters)

    def flush(self) -> bool:
        """Run a pending search immediately. Returns False if none was pending."""
        return self._debouncer.flush()

    def cancel(self) -> None:
        self._debouncer.cancel()

    def _run(self, term: str, **filters) -> None:
        self._history.add(term)
        filters.setdefault("limit", self._limit)
        self._store.get_snippets(page=1, search=term, **filters)
