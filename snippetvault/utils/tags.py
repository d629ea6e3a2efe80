"""
Tag normalization for snippets: trimmed, lower-cased, unique, at most MAX_TAGS.
"""
from typing import Iterable, List

MAX_TAGS = 10


def sanitize_tag(raw: object) -> str:
    return str(raw).strip().lower()


def normalize_tags(raw: Iterable[object] | None) -> List[str]:
    """Sanitize each tag, drop blanks and duplicates (first occurrence wins). Does not truncate."""
    out: List[str] = []
    for item in raw or []:
        tag = sanitize_tag(item)
        if tag and tag not in out:
            out.append(tag)
    return out


class TagSet:
    """Ordered tag collection used while editing a snippet."""

    def __init__(self, initial: Iterable[object] | None = None, limit: int = MAX_TAGS) -> None:
        self.limit = limit
        self._tags: List[str] = normalize_tags(initial)[:limit]

    def add(self, raw: object) -> bool:
        """Add one tag. Returns False when blank, already present, or the limit is reached."""
        tag = sanitize_tag(raw)
        if not tag or tag in self._tags or len(self._tags) >= self.limit:
            return False
        self._tags.append(tag)
        return True

    def add_many(self, text: str) -> List[str]:
        """Add comma-separated tags (as typed into a tag input). Returns the tags accepted."""
        return [t for t in (sanitize_tag(p) for p in text.split(",")) if self.add(t)]

    def remove(self, raw: object) -> None:
        tag = sanitize_tag(raw)
        if tag in self._tags:
            self._tags.remove(tag)

    def __contains__(self, raw: object) -> bool:
        return sanitize_tag(raw) in self._tags

    def __iter__(self):
        return iter(list(self._tags))

    def __len__(self) -> int:
        return len(self._tags)

    def to_list(self) -> List[str]:
        return list(self._tags)
