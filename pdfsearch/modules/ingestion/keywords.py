"""Frequency-ranked keyword extraction for chunk display and lexical matching."""

import re
from collections import Counter
from typing import List

# Spanish and English function words.
STOP_WORDS = frozenset(
    {
        "el", "la", "de", "que", "y", "a", "en", "un", "es", "se", "no", "te", "lo", "le",
        "da", "su", "por", "son", "con", "para", "al", "una", "los", "las", "del", "como",
        "más", "pero", "sus", "este", "esta", "entre", "cuando", "muy", "sin", "sobre",
        "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "from", "that", "this", "these", "those", "have", "has", "was", "were", "been",
        "are", "will", "would", "could", "should", "their", "there", "which", "what",
        "into", "than", "then", "also", "about",
    }
)

MIN_TOKEN_LENGTH = 4

_PUNCTUATION = re.compile(r"[^\w\s]")


def extract_keywords(text: str, limit: int = 20) -> List[str]:
    """Return up to ``limit`` distinct keywords, most frequent first.

    Tokens shorter than four characters and stop words are ignored. Ties keep
    the order in which the tokens first appear.
    """
    if not text:
        return []

    tokens = _PUNCTUATION.sub(" ", text.lower()).split()
    counts = Counter(token for token in tokens if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS)
    return [token for token, _ in counts.most_common(limit)]
