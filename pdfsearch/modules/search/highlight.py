"""Query-term highlighting for search result previews."""

import re
from typing import List

MARK_OPEN = "<mark>"
MARK_CLOSE = "</mark>"


def highlight_terms(text: str, query: str, min_length: int = 3) -> str:
    """Wrap every whole-word, case-insensitive occurrence of a query word in ``<mark>``.

    Words shorter than ``min_length`` are not highlighted. All words are
    matched in a single pass, longest first, so a mark is never nested inside
    another one.

    Example:
        >>> highlight_terms("Machine learning at scale", "machine learning")
        '<mark>Machine</mark> <mark>learning</mark> at scale'
    """
    if not text or not query:
        return text

    words: List[str] = list(dict.fromkeys(word for word in query.split() if len(word) >= min_length))
    if not words:
        return text

    words.sort(key=len, reverse=True)
    pattern = re.compile(r"\b(" + "|".join(re.escape(word) for word in words) + r")\b", re.IGNORECASE)
    return pattern.sub(rf"{MARK_OPEN}\1{MARK_CLOSE}", text)
