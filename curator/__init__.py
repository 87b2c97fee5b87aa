"""Digest curation core: hybrid ranking, diversity selection, focus re-ranking."""

__version__ = "0.1.0"
