"""Vector helpers: storage text encoding and cosine similarity."""

import math
from typing import List, Sequence


def format_vector(vector: Sequence[float]) -> str:
    """Encode a vector as ``[a,b,c]`` using the shortest round-tripping repr.

    Example:
        >>> format_vector([0.25, -1.0, 3e-05])
        '[0.25,-1.0,3e-05]'
    """
    return "[" + ",".join(repr(float(value)) for value in vector) + "]"


def parse_vector(encoded: str) -> List[float]:
    """Decode the output of :func:`format_vector`.

    Raises:
        ValueError: If ``encoded`` is not a bracketed list of numbers.
    """
    stripped = encoded.strip()
    if not (stripped.startswith("[") and stripped.endswith("]")):
        raise ValueError(f"Not a bracketed vector: {encoded[:50]!r}")

    body = stripped[1:-1].strip()
    if not body:
        return []
    return [float(part) for part in body.split(",")]


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """Cosine similarity, ``(A · B) / (||A|| ||B||)``; 0.0 when either vector is zero."""
    if len(vec1) != len(vec2):
        raise ValueError(f"Vector lengths differ: {len(vec1)} != {len(vec2)}")

    dot_product = sum(a * b for a, b in zip(vec1, vec2))
    magnitude1 = math.sqrt(sum(a * a for a in vec1))
    magnitude2 = math.sqrt(sum(b * b for b in vec2))

    if magnitude1 == 0.0 or magnitude2 == 0.0:
        return 0.0

    return dot_product / (magnitude1 * magnitude2)
