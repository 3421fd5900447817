"""Document ingestion: segmentation, keywords, embedding and status."""

from .keywords import extract_keywords
from .pipeline import IngestionPipeline, IngestionReport
from .segmenter import TextSegmenter, normalize_text
from .services import IngestionService
from .status import classify

__all__ = [
    "IngestionPipeline",
    "IngestionReport",
    "IngestionService",
    "TextSegmenter",
    "classify",
    "extract_keywords",
    "normalize_text",
]
