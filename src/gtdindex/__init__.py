"""gtdindex - ENEX note ingestion and hybrid search for a GTD document store."""

__version__ = "1.0.0"
