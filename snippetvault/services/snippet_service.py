"""
Snippet store: the current page of the user's snippets plus pagination, loading and error state.

Merge policy:
- list fetches (get_snippets, get_favorite_snippets) replace the list wholesale, in server order;
- create / update / delete / toggle_favorite patch the list in place once the server confirms;
- public reads, fork, single reads and stats never touch the list.

List fetches take a ticket from a monotonic counter; a response that is no longer the latest
request is dropped so a slow stale search cannot overwrite a newer one.
"""
import itertools
import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Union

from pydantic import ValidationError

from snippetvault.api_client import ApiClient, ApiError
from snippetvault.models import FavoriteStatus, Pagination, Snippet, SnippetPage, SnippetPayload

logger = logging.getLogger(__name__)

DateLike = Union[date, str, None]


def _format_date(value: DateLike) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return value


def _join_tags(tags: Union[Iterable[str], str, None]) -> str:
    if tags is None:
        return ""
    if isinstance(tags, str):
        return tags
    return ",".join(tags)


def list_params(
    page: int,
    limit: int,
    search: str = "",
    tags: Union[Iterable[str], str, None] = None,
    language: str = "",
    from_: DateLike = None,
    to: DateLike = None,
) -> dict:
    """Query string for /snippets and /snippets/public. Tags comma-joined; from/to bound createdAt."""
    return {
        "page": page,
        "limit": limit,
        "search": search,
        "tags": _join_tags(tags),
        "language": language,
        "from": _format_date(from_),
        "to": _format_date(to),
    }


class SnippetStore:
    """Owned-snippet list state and every /snippets operation."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client
        self._lock = threading.Lock()
        self._snippets: List[Snippet] = []
        self._pagination = Pagination()
        self._in_flight = 0
        self._error: Optional[str] = None
        self._tickets = itertools.count(1)
        self._latest_ticket = 0

    # ----- state -----

    @property
    def snippets(self) -> List[Snippet]:
        with self._lock:
            return list(self._snippets)

    @property
    def pagination(self) -> Pagination:
        return self._pagination

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    @property
    def error(self) -> Optional[str]:
        return self._error

    @contextmanager
    def _operation(self, fallback: str, ticket: Optional[int] = None) -> Iterator[None]:
        """Track loading, reset error, and turn API/validation failures into `error`.

        A ticketed list fetch that is no longer the latest request leaves `error` alone.
        """
        with self._lock:
            self._in_flight += 1
            self._error = None
        try:
            yield
        except ApiError as e:
            logger.warning("%s: %s", fallback, e)
            self._set_error(e.user_message(fallback), ticket)
        except ValidationError as e:
            logger.warning("%s: %s", fallback, e)
            self._set_error(fallback, ticket)
        finally:
            with self._lock:
                self._in_flight -= 1

    def _set_error(self, message: str, ticket: Optional[int]) -> None:
        with self._lock:
            if ticket is not None and ticket != self._latest_ticket:
                logger.debug("Dropping stale list failure (ticket %s, latest %s)", ticket, self._latest_ticket)
                return
            self._error = message

    def _next_ticket(self) -> int:
        with self._lock:
            self._latest_ticket = next(self._tickets)
            return self._latest_ticket

    def _replace_page(self, ticket: int, data: Any) -> None:
        if not isinstance(data, dict) or data.get("snippets") is None:
            return
        page = SnippetPage.model_validate(data)
        with self._lock:
            if ticket != self._latest_ticket:
                logger.debug("Dropping stale list response (ticket %s, latest %s)", ticket, self._latest_ticket)
                return
            self._snippets = page.snippets
            if page.pagination is not None:
                self._pagination = page.pagination

    @staticmethod
    def _payload(payload: Union[SnippetPayload, Mapping]) -> SnippetPayload:
        if isinstance(payload, SnippetPayload):
            return payload
        return SnippetPayload.model_validate(payload)

    # ----- owned snippets -----

    def create_snippet(self, payload: Union[SnippetPayload, Mapping]) -> Optional[Snippet]:
        created = None
        with self._operation("Creating snippet failed!"):
            body = self._payload(payload).to_wire()
            resp = self._client.post("/snippets/create", json=body)
            if resp.data:
                created = Snippet.model_validate(resp.data)
                with self._lock:
                    self._snippets = [created, *self._snippets]
        return created

    def get_snippets(
        self,
        page: int = 1,
        limit: int = 6,
        search: str = "",
        tags: Union[Iterable[str], str, None] = None,
        language: str = "",
        from_: DateLike = None,
        to: DateLike = None,
    ) -> None:
        ticket = self._next_ticket()
        with self._operation("Snippet fetching failed!", ticket):
            resp = self._client.get(
                "/snippets",
                params=list_params(page, limit, search, tags, language, from_, to),
            )
            self._replace_page(ticket, resp.data)

    def get_snippet_by_id(self, snippet_id: str) -> Optional[Snippet]:
        found = None
        with self._operation("SnippetByID fetching failed!"):
            resp = self._client.get(f"/snippets/{snippet_id}")
            if resp.data:
                found = Snippet.model_validate(resp.data)
        return found

    def update_snippet(self, snippet_id: str, payload: Union[SnippetPayload, Mapping]) -> Optional[Snippet]:
        updated = None
        with self._operation("Update snippet failed!"):
            body = self._payload(payload).to_wire()
            resp = self._client.put(f"/snippets/{snippet_id}", json=body)
            if resp.data:
                updated = Snippet.model_validate(resp.data)
                with self._lock:
                    self._snippets = [updated if s.id == snippet_id else s for s in self._snippets]
        return updated

    def delete_snippet(self, snippet_id: str) -> bool:
        deleted = False
        with self._operation("Deleting snippet failed!"):
            resp = self._client.delete(f"/snippets/{snippet_id}")
            if resp.success:
                with self._lock:
                    for i, s in enumerate(self._snippets):
                        if s.id == snippet_id:
                            del self._snippets[i]
                            break
                deleted = True
        return deleted

    def toggle_favorite(self, snippet_id: str) -> Optional[FavoriteStatus]:
        """Flip favorite status; only is_favorited and favorite_count change on the matching entry."""
        status = None
        with self._operation("Updating favorite failed!"):
            resp = self._client.post(f"/snippets/{snippet_id}/favorite")
            data = dict(resp.data or {})
            data.setdefault("snippetID", snippet_id)
            status = FavoriteStatus.model_validate(data)
            patch = {"is_favorited": status.is_favorited, "favorite_count": status.favorite_count}
            with self._lock:
                self._snippets = [
                    s.model_copy(update=patch) if s.id == status.snippet_id else s
                    for s in self._snippets
                ]
        return status

    def get_favorite_snippets(self, page: int = 1, limit: int = 10) -> None:
        ticket = self._next_ticket()
        with self._operation("Fetching favorites failed!", ticket):
            resp = self._client.get("/snippets/favorites", params={"page": page, "limit": limit})
            self._replace_page(ticket, resp.data)

    # ----- decorative reads: never touch state, degrade to empty -----

    def get_all_tags(self) -> List[str]:
        try:
            data = self._client.get("/snippets/tags").data
        except ApiError as e:
            logger.warning("Tag list unavailable: %s", e)
            return []
        tags = data.get("tags") if isinstance(data, dict) else None
        return list(tags) if isinstance(tags, list) else []

    def get_tag_stats(self) -> List[dict]:
        try:
            data = self._client.get("/snippets/tags/stats").data
        except ApiError as e:
            logger.warning("Tag stats unavailable: %s", e)
            return []
        stats = data.get("stats") if isinstance(data, dict) else None
        return list(stats) if isinstance(stats, list) else []

    def get_snippet_stats(self) -> dict:
        try:
            data = self._client.get("/snippets/stats").data
        except ApiError as e:
            logger.warning("Snippet stats unavailable: %s", e)
            return {}
        return dict(data) if isinstance(data, dict) else {}

    # ----- public snippets -----

    def get_public_snippets(
        self,
        page: int = 1,
        limit: int = 12,
        search: str = "",
        tags: Union[Iterable[str], str, None] = None,
        language: str = "",
        from_: DateLike = None,
        to: DateLike = None,
    ) -> Optional[SnippetPage]:
        """Browse public snippets. Returned to the caller; the owned list is left alone."""
        result = None
        with self._operation("Failed to load public snippets"):
            resp = self._client.get(
                "/snippets/public",
                params=list_params(page, limit, search, tags, language, from_, to),
            )
            result = SnippetPage.model_validate(resp.data or {})
        return result

    def get_public_snippet_by_id(self, snippet_id: str) -> Optional[Snippet]:
        found = None
        with self._operation("Failed to load snippet"):
            resp = self._client.get(f"/snippets/public/{snippet_id}")
            if resp.data:
                found = Snippet.model_validate(resp.data)
        return found

    def fork_public_snippet(self, snippet_id: str) -> Optional[Snippet]:
        """Create an owned copy of a public snippet and return it for editing."""
        fork = None
        with self._operation("Forking snippet failed!"):
            resp = self._client.post(f"/snippets/{snippet_id}/fork")
            if resp.data:
                fork = Snippet.model_validate(resp.data)
        return fork
