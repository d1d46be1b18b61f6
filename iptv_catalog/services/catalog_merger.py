"""
Catalog Merging Service

Parses playlist sources independently and merges their output into one catalog.
A failing source never aborts the others.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from iptv_catalog.config import CustomSettings, settings
from iptv_catalog.services.catalog_types import (
    KIND_ORDER,
    Catalog,
    ClassifiedEntry,
    ContentItem,
    Diagnostic,
    EpisodeEntry,
    SourceResult,
    SourceText,
)
from iptv_catalog.services.content_classifier import classify_entry
from iptv_catalog.services.diagnostics import record_diagnostic
from iptv_catalog.services.directive_parser import parse_directives
from iptv_catalog.services.line_tokenizer import iter_lines
from iptv_catalog.services.series_aggregator import aggregate_entries
from iptv_catalog.utils.logging_helpers import (
    log_merge_summary,
    log_section_end,
    log_section_start,
    log_source_processing,
)


logger = logging.getLogger(__name__)


def parse_source(
    text: str,
    *,
    source_index: int = 1,
    name: str | None = None,
    config: CustomSettings | None = None,
) -> SourceResult:
    """
    Run tokenizer, directive parser, classifier and aggregator over one source.

    Args:
        text: Raw playlist text
        source_index: 1-based position of the source in the merge call
        name: Optional label used in logs and summaries
        config: Settings override (defaults to global settings)

    Returns:
        SourceResult with status 'success', 'empty' or 'failed'
    """
    config = config or settings
    diagnostics: list[Diagnostic] = []

    try:
        lines = iter_lines(
            text,
            source_index=source_index,
            config=config,
            diagnostics=diagnostics,
        )
        entries = parse_directives(
            lines,
            source_index=source_index,
            config=config,
            diagnostics=diagnostics,
        )

        classified: list[ClassifiedEntry] = []
        groups: set[str] = set()
        for entry in entries:
            result = classify_entry(entry, config=config)
            if result is None:
                record_diagnostic(
                    logger,
                    diagnostics,
                    source_index,
                    "empty_title",
                    "Entry without a resolvable title dropped",
                    line_number=entry.line_number,
                )
                continue
            classified.append(result)
            groups.add(entry.group)

        items = aggregate_entries(classified)
    except Exception as exc:
        logger.error(
            "[Source %s] Failed to parse %s: %s",
            source_index,
            name or "source",
            exc,
            exc_info=True,
        )
        record_diagnostic(
            logger,
            diagnostics,
            source_index,
            "source_failed",
            f"Source could not be parsed: {exc}",
        )
        return SourceResult(
            index=source_index,
            status="failed",
            diagnostics=diagnostics,
            name=name,
            error=str(exc),
        )

    if not items:
        record_diagnostic(
            logger,
            diagnostics,
            source_index,
            "source_empty",
            "Source produced no content items",
            level=logging.WARNING,
        )
        return SourceResult(
            index=source_index,
            status="empty",
            diagnostics=diagnostics,
            entries_parsed=len(entries),
            name=name,
        )

    episodes = sum(1 for entry in classified if isinstance(entry, EpisodeEntry))
    logger.info(
        "[Source %s] Parsed %s entries into %s items (%s episodes, %s groups)",
        source_index,
        len(entries),
        len(items),
        episodes,
        len(groups),
    )

    return SourceResult(
        index=source_index,
        status="success",
        items=items,
        groups=groups,
        diagnostics=diagnostics,
        entries_parsed=len(entries),
        name=name,
    )


def merge_results(results: Iterable[SourceResult]) -> Catalog:
    """
    Combine per-source results in the given order.

    Items are concatenated without cross-source series unification, then
    stable-sorted by kind and title so earlier sources win ties.
    """
    results = list(results)
    items: list[ContentItem] = []
    groups: set[str] = set()
    diagnostics: list[Diagnostic] = []

    for result in results:
        items.extend(result.items)
        groups.update(result.groups)
        diagnostics.extend(result.diagnostics)

    items.sort(key=_catalog_sort_key)

    catalog = Catalog(
        items=items,
        groups=sorted(groups),
        sources=results,
        diagnostics=diagnostics,
    )

    if catalog.is_empty:
        record_diagnostic(
            logger,
            catalog.diagnostics,
            0,
            "catalog_empty",
            f"No content items found across {len(results)} source(s)",
            level=logging.WARNING,
        )

    log_merge_summary(logger, len(catalog.items), len(catalog.groups), catalog.counts())
    return catalog


def merge_sources(
    sources: Sequence[str | SourceText],
    *,
    config: CustomSettings | None = None,
) -> Catalog:
    """
    Parse every source sequentially and merge the results.

    Args:
        sources: Playlist texts in caller-defined order
        config: Settings override (defaults to global settings)

    Returns:
        Merged Catalog; check Catalog.is_empty before using it for playback
    """
    log_section_start(logger, "catalog merge")
    normalized = _normalize_sources(sources)

    results = []
    for index, source in enumerate(normalized, start=1):
        log_source_processing(logger, index, len(normalized), source.name)
        results.append(
            parse_source(source.content, source_index=index, name=source.name, config=config)
        )

    catalog = merge_results(results)
    log_section_end(logger, "catalog merge")
    return catalog


class CatalogMergePipeline:
    """Parses sources on worker threads and merges them in submission order."""

    def __init__(
        self,
        sources: Sequence[str | SourceText],
        *,
        max_concurrency: int | None = None,
        config: CustomSettings | None = None,
    ) -> None:
        self.config = config or settings
        self.sources = _normalize_sources(sources)
        self.total_sources = len(self.sources)
        self._concurrency = max(
            1,
            min(max_concurrency or self.config.merge_max_concurrency, self.total_sources or 1),
        )
        self._semaphore = asyncio.Semaphore(self._concurrency)

    async def run(self) -> Catalog:
        log_section_start(logger, "catalog merge")
        logger.info(
            "Parsing %s source(s) with concurrency %s",
            self.total_sources,
            self._concurrency,
        )

        tasks = [
            asyncio.create_task(self._process_source(index, source))
            for index, source in enumerate(self.sources, start=1)
        ]
        results = list(await asyncio.gather(*tasks))
        results.sort(key=lambda result: result.index)

        catalog = merge_results(results)
        log_section_end(logger, "catalog merge")
        return catalog

    async def _process_source(self, index: int, source: SourceText) -> SourceResult:
        async with self._semaphore:
            log_source_processing(logger, index, self.total_sources, source.name)
            return await asyncio.to_thread(
                parse_source,
                source.content,
                source_index=index,
                name=source.name,
                config=self.config,
            )


def _normalize_sources(sources: Sequence[str | SourceText]) -> list[SourceText]:
    return [
        source if isinstance(source, SourceText) else SourceText(content=source)
        for source in sources
    ]


def _catalog_sort_key(item: ContentItem) -> tuple[int, str, str]:
    return KIND_ORDER[item.kind], item.title.casefold(), item.title
