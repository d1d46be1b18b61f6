"""IPTV playlist ingestion and content classification engine."""

__version__ = "0.1.0"
