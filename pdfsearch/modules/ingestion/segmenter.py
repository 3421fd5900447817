"""Text normalization and size-bounded segmentation into pages."""

import re
from typing import List

# Known mis-decodings of UTF-8 accented characters read as Latin-1.
MOJIBAKE_REPAIRS = (
    ("Ãras", "érase"),
    ("Ã±", "ñ"),
    ("Ã©", "é"),
    ("Ã¡", "á"),
    ("Ãº", "ú"),
    ("Ã³", "ó"),
    ("Ã\xad", "í"),
)
# Hex byte placeholders some extractors emit instead of the character.
BYTE_PLACEHOLDERS = ("<E2>", "<C3>", "<A9>", "<AA>", "<BB>")

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_HORIZONTAL_SPACE = re.compile(r"[ \t]+")
_SPACE_AROUND_NEWLINE = re.compile(r" *\n *")
_EXCESS_BLANK_LINES = re.compile(r"\n{4,}")
_PARAGRAPH_GAP = re.compile(r"\n\s*\n\s*\n")
_PARAGRAPH_BREAK = "\n\n"


def normalize_text(text: str) -> str:
    """Clean extracted text while keeping its line structure.

    Horizontal whitespace collapses to one space, three or more blank lines
    collapse to exactly two, control characters are stripped and known
    encoding artefacts are repaired. Newlines survive because paragraph
    detection depends on them.
    """
    if not text:
        return ""

    for placeholder in BYTE_PLACEHOLDERS:
        text = text.replace(placeholder, "")
    for broken, fixed in MOJIBAKE_REPAIRS:
        text = text.replace(broken, fixed)

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS.sub("", text)
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE.sub("\n", text)
    text = _EXCESS_BLANK_LINES.sub("\n\n\n", text)
    return text.strip()


class TextSegmenter:
    """Splits normalized text into chunks of at most ``max_chars`` characters.

    Text that fits in one chunk is returned whole. Longer text is split on
    paragraph gaps (two or more blank lines); blocks that are still too long
    are packed greedily from their paragraphs. Chunks whose trimmed length is
    ``min_chars`` or less are dropped as noise.

    A single paragraph longer than ``max_chars`` is hard-wrapped on word
    boundaries when ``split_oversized`` is set, and emitted whole otherwise.

    Example:
        ```python
        segmenter = TextSegmenter(max_chars=2000)
        pages = segmenter.segment(raw_text)
        ```
    """

    def __init__(self, max_chars: int = 2000, min_chars: int = 10, split_oversized: bool = True):
        if max_chars <= min_chars:
            raise ValueError("max_chars must be greater than min_chars")
        self.max_chars = max_chars
        self.min_chars = min_chars
        self.split_oversized = split_oversized

    def segment(self, raw_text: str) -> List[str]:
        text = normalize_text(raw_text)
        if not text:
            return []
        if len(text) <= self.max_chars:
            return [text]

        chunks: List[str] = []
        for block in _PARAGRAPH_GAP.split(text):
            block = block.strip()
            if not block:
                continue
            if len(block) <= self.max_chars:
                chunks.append(block)
            else:
                chunks.extend(self._pack_paragraphs(block))

        return [chunk for chunk in chunks if len(chunk.strip()) > self.min_chars]

    def _pack_paragraphs(self, block: str) -> List[str]:
        packed: List[str] = []
        buffer = ""
        for paragraph in block.split(_PARAGRAPH_BREAK):
            paragraph = paragraph.strip()
            if not paragraph:
                continue

            candidate = f"{buffer}{_PARAGRAPH_BREAK}{paragraph}" if buffer else paragraph
            if len(candidate) <= self.max_chars:
                buffer = candidate
                continue

            if buffer:
                packed.append(buffer)
            if len(paragraph) > self.max_chars and self.split_oversized:
                *full, buffer = self._wrap(paragraph)
                packed.extend(full)
            else:
                buffer = paragraph

        if buffer:
            packed.append(buffer)
        return packed

    def _wrap(self, paragraph: str) -> List[str]:
        """Hard-wrap an oversized paragraph into pieces of at most ``max_chars``."""
        pieces: List[str] = []
        rest = paragraph
        while len(rest) > self.max_chars:
            cut = rest.rfind(" ", 0, self.max_chars + 1)
            if cut <= 0:
                cut = self.max_chars
            pieces.append(rest[:cut].rstrip())
            rest = rest[cut:].lstrip()
        if rest:
            pieces.append(rest)
        return pieces
