"""PDF ingestion and hybrid retrieval service."""

__version__ = "0.1.0"
