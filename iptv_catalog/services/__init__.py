"""
Services package for the IPTV catalog engine

This package contains the parsing pipeline and catalog merging logic.
"""
from iptv_catalog.services.catalog_merger import (
    CatalogMergePipeline,
    merge_results,
    merge_sources,
    parse_source,
)
from iptv_catalog.services.playlist_writer import render_playlist

__all__ = [
    'CatalogMergePipeline',
    'merge_results',
    'merge_sources',
    'parse_source',
    'render_playlist',
]
