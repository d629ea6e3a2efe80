"""
Form state for creating and editing snippets.
Language follows the code (auto-detected) until the user picks one by hand.
"""
from typing import Iterable, Optional

from snippetvault.models import Snippet, SnippetPayload
from snippetvault.utils.language import detect_language
from snippetvault.utils.tags import TagSet

DEFAULT_LANGUAGE = "javascript"


class SnippetDraft:
    def __init__(
        self,
        title: str = "",
        code: str = "",
        code_language: str = DEFAULT_LANGUAGE,
        description: str = "",
        tags: Optional[Iterable[str]] = None,
        is_public: bool = False,
    ) -> None:
        self.title = title
        self.code = code
        self.code_language = code_language or DEFAULT_LANGUAGE
        self.description = description
        self.is_public = is_public
        self.tags = TagSet(tags)
        self.language_manually_set = False

    @classmethod
    def from_snippet(cls, snippet: Snippet) -> "SnippetDraft":
        """Edit form for an existing snippet; its stored language counts as chosen."""
        draft = cls(
            title=snippet.title,
            code=snippet.code,
            code_language=snippet.code_language,
            description=snippet.description,
            tags=snippet.tags,
            is_public=snippet.is_public,
        )
        draft.language_manually_set = True
        return draft

    def set_code(self, code: str) -> None:
        self.code = code
        if self.language_manually_set:
            return
        detected = detect_language(code)
        if detected:
            self.code_language = detected

    def set_language(self, language: str) -> None:
        self.code_language = language
        self.language_manually_set = True

    def add_tag(self, tag: str) -> bool:
        return self.tags.add(tag)

    def remove_tag(self, tag: str) -> None:
        self.tags.remove(tag)

    def to_payload(self) -> SnippetPayload:
        """Validated request body. Raises pydantic ValidationError for blank title/code."""
        return SnippetPayload(
            title=self.title,
            code=self.code,
            code_language=self.code_language,
            description=self.description,
            tags=self.tags.to_list(),
            is_public=self.is_public,
        )
