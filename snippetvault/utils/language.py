"""
Guess a snippet's language from its code with Pygments. Returns None when no confident guess.
"""
import logging
from typing import Optional

from pygments.lexers import guess_lexer
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

# Lexers Pygments falls back to when it has nothing better; not a real detection.
_FALLBACK_LEXERS = {"text", "text only", "plain text"}

# Pygments lexer name -> language id used by the API
_NAME_MAP = {
    "python": "python",
    "python 2.x": "python",
    "python console session": "python",
    "javascript": "javascript",
    "typescript": "typescript",
    "jsx": "javascript",
    "java": "java",
    "c": "c",
    "c++": "cpp",
    "c#": "csharp",
    "go": "go",
    "rust": "rust",
    "ruby": "ruby",
    "php": "php",
    "html": "html",
    "html+php": "php",
    "css": "css",
    "json": "json",
    "yaml": "yaml",
    "sql": "sql",
    "bash": "bash",
    "bash session": "bash",
    "kotlin": "kotlin",
    "swift": "swift",
    "markdown": "markdown",
    "xml": "xml",
}


def detect_language(code: str) -> Optional[str]:
    text = str(code or "")
    if not text.strip():
        return None
    try:
        lexer = guess_lexer(text)
    except ClassNotFound:
        return None
    name = lexer.name.lower()
    if name in _FALLBACK_LEXERS:
        return None
    detected = _NAME_MAP.get(name)
    if detected is None:
        aliases = getattr(lexer, "aliases", None) or []
        detected = aliases[0] if aliases else name
    logger.debug("Detected language %s (lexer %s)", detected, lexer.name)
    return detected
