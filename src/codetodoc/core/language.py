# SPDX-License-Identifier: Apache-2.0
"""Source language detection from file names."""

from __future__ import annotations

from typing import Optional

# File extension (lowercase, without dot) -> highlighter language tag
EXTENSION_LANGUAGES: dict[str, str] = {
    "js": "javascript",
    "jsx": "jsx",
    "ts": "typescript",
    "tsx": "tsx",
    "py": "python",
    "java": "java",
    "c": "c",
    "cpp": "cpp",
    "cs": "csharp",
    "html": "html",
    "css": "css",
    "php": "php",
    "rb": "ruby",
    "go": "go",
    "rs": "rust",
    "swift": "swift",
    "kt": "kotlin",
    "sh": "bash",
    "json": "json",
    "xml": "xml",
    "yml": "yaml",
    "yaml": "yaml",
    "md": "markdown",
    "sql": "sql",
}


def _extension(filename: str) -> Optional[str]:
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    stem, dot, ext = name.rpartition(".")
    # ".bashrc" is a dotfile, not an extension
    if not dot or not stem or not ext:
        return None
    return ext.lower()


class LanguageClassifier:
    """Map file names to language tags.

    Args:
        extra: Additional extension mappings; override the built-in table.
    """

    def __init__(self, extra: Optional[dict[str, str]] = None) -> None:
        self._table = dict(EXTENSION_LANGUAGES)
        if extra:
            self._table.update({k.lower().lstrip("."): v for k, v in extra.items()})

    def classify(self, filename: str) -> Optional[str]:
        """Return the language tag for ``filename``, or None if unknown."""
        ext = _extension(filename or "")
        if ext is None:
            return None
        return self._table.get(ext)


_DEFAULT_CLASSIFIER = LanguageClassifier()


def classify(filename: str) -> Optional[str]:
    """Classify ``filename`` with the built-in extension table."""
    return _DEFAULT_CLASSIFIER.classify(filename)


def resolve_language(filename: str, fallback: str) -> str:
    """Classify ``filename``, keeping ``fallback`` when it is unrecognized."""
    return classify(filename) or fallback
