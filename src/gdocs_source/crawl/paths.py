"""Slug and path helpers for folder and document names."""

from __future__ import annotations

import re
import unicodedata

PATH_SEPARATOR = "/"

_APOSTROPHES = re.compile(r"['’]")
_WORDS = re.compile(
    r"[A-Z]+(?=[A-Z][a-z])"  # acronym before a capitalised word: "HTMLParser"
    r"|[A-Z]?[a-z]+"
    r"|[A-Z]+"
    r"|[0-9]+"
    r"|[^\W\d_A-Za-z]+"
)


def _deburr(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def slugify(name: str) -> str:
    """Kebab-case a display name: "Getting Started" -> "getting-started".

    Accents are stripped, apostrophes dropped, and camelCase, acronym and
    letter/digit boundaries become word breaks.
    """
    words = _WORDS.findall(_APOSTROPHES.sub("", _deburr(name)))
    return "-".join(word.lower() for word in words)


def child_path(parent_path: str, name: str) -> str:
    return f"{parent_path}{PATH_SEPARATOR}{slugify(name)}"


def path_segments(path: str) -> list[str]:
    """Non-empty segments of a slash separated path."""
    return [segment for segment in path.split(PATH_SEPARATOR) if segment]
