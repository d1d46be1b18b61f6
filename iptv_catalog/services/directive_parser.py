"""
Directive Parser

Pairs #EXTINF directive lines with the stream URL line that follows them.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, replace

from iptv_catalog.config import CustomSettings, settings
from iptv_catalog.services.catalog_types import Diagnostic, RawEntry
from iptv_catalog.services.diagnostics import record_diagnostic


logger = logging.getLogger(__name__)

DIRECTIVE_PREFIX = "#EXTINF"
GROUP_DIRECTIVE_PREFIX = "#EXTGRP:"

# Attribute values may contain commas, so the title comma is the first one outside quotes
EXTINF_RE = re.compile(
    r'^#EXTINF:\s*(?P<duration>-?\d+(?:\.\d+)?)?(?P<attrs>(?:[^,"]|"[^"]*")*),(?P<title>.*)$',
    re.IGNORECASE,
)
ATTR_RE = re.compile(r'([A-Za-z0-9_\-]+)\s*=\s*"([^"]*)"')


@dataclass(slots=True, frozen=True)
class PendingEntry:
    """Directive fields waiting for their URL line."""
    title: str
    group: str | None
    logo: str | None
    name: str | None
    channel_id: str | None
    line_number: int


def parse_attributes(attr_str: str) -> dict[str, str]:
    """Extract key="value" attributes, lowercasing keys. Later duplicates win."""
    return {key.lower(): value.strip() for key, value in ATTR_RE.findall(attr_str)}


def parse_directives(
    lines: Iterable[str] | Iterable[tuple[int, str]],
    *,
    source_index: int = 0,
    config: CustomSettings | None = None,
    diagnostics: list[Diagnostic] | None = None,
) -> list[RawEntry]:
    """
    Walk tokenized lines and emit one RawEntry per directive + URL pair.

    Args:
        lines: Stripped lines, or (line_number, line) pairs from iter_lines
        source_index: Source index used in diagnostics
        config: Settings override (defaults to global settings)
        diagnostics: Optional collector for recoverable conditions

    Returns:
        Entries in source order. Orphaned or malformed directives are dropped.
    """
    config = config or settings
    entries: list[RawEntry] = []
    pending: PendingEntry | None = None
    group_hint: str | None = None

    for line_number, line in _numbered(lines):
        if line[:len(DIRECTIVE_PREFIX)].upper() == DIRECTIVE_PREFIX:
            if pending is not None:
                _record_orphan(diagnostics, source_index, pending)
            pending = _parse_directive(line, line_number, group_hint, source_index, diagnostics)
            group_hint = None
            continue

        if line[:len(GROUP_DIRECTIVE_PREFIX)].upper() == GROUP_DIRECTIVE_PREFIX:
            group = line[len(GROUP_DIRECTIVE_PREFIX):].strip() or None
            if pending is not None and pending.group is None:
                pending = replace(pending, group=group)
            elif pending is None:
                group_hint = group
            continue

        if line.startswith("#"):
            continue

        if pending is None:
            logger.debug("[Source %s] line %s: URL without directive ignored", source_index, line_number)
            continue

        entries.append(_finalize(pending, line, config, source_index, diagnostics))
        pending = None

    if pending is not None:
        _record_orphan(diagnostics, source_index, pending)

    return entries


def _numbered(lines: Iterable[str] | Iterable[tuple[int, str]]) -> Iterable[tuple[int, str]]:
    """Accept plain lines or already numbered ones."""
    for position, line in enumerate(lines, start=1):
        if isinstance(line, tuple):
            yield line
        else:
            yield position, line


def _parse_directive(
    line: str,
    line_number: int,
    group_hint: str | None,
    source_index: int,
    diagnostics: list[Diagnostic] | None,
) -> PendingEntry | None:
    """Parse a single #EXTINF line into a pending entry"""
    match = EXTINF_RE.match(line)
    split = (match.group("attrs") or "", match.group("title")) if match else _split_unbalanced(line)
    if split is None:
        record_diagnostic(
            logger,
            diagnostics,
            source_index,
            "malformed_directive",
            "Directive without title separator skipped",
            line_number=line_number,
        )
        return None

    attr_str, title = split
    attrs = parse_attributes(attr_str)

    return PendingEntry(
        title=title.strip(),
        group=attrs.get("group-title") or group_hint,
        logo=attrs.get("tvg-logo") or None,
        name=attrs.get("tvg-name") or None,
        channel_id=attrs.get("tvg-id") or None,
        line_number=line_number,
    )


def _split_unbalanced(line: str) -> tuple[str, str] | None:
    """Unbalanced quotes: the title starts after the first comma past the last attribute opening."""
    attr_start = line.rfind('="')
    comma = line.find(",", attr_start + 2 if attr_start >= 0 else 0)
    if comma < 0:
        return None
    return line[:comma], line[comma + 1:]


def _finalize(
    pending: PendingEntry,
    url: str,
    config: CustomSettings,
    source_index: int,
    diagnostics: list[Diagnostic] | None,
) -> RawEntry:
    """Complete a pending entry with its URL, capping every field"""

    def cap(value: str | None, limit: int, field_name: str) -> str | None:
        if value is None or len(value) <= limit:
            return value
        record_diagnostic(
            logger,
            diagnostics,
            source_index,
            "field_truncated",
            f"{field_name} of {len(value)} characters truncated to {limit}",
            line_number=pending.line_number,
        )
        return value[:limit]

    return RawEntry(
        title=cap(pending.title, config.max_title_length, "title").strip(),
        group=pending.group or config.default_group,
        url=cap(url, config.max_url_length, "url"),
        logo=cap(pending.logo, config.max_logo_length, "logo"),
        name=_strip_or_none(cap(pending.name, config.max_title_length, "name")),
        channel_id=pending.channel_id,
        line_number=pending.line_number,
    )


def _strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def _record_orphan(
    diagnostics: list[Diagnostic] | None,
    source_index: int,
    pending: PendingEntry,
) -> None:
    record_diagnostic(
        logger,
        diagnostics,
        source_index,
        "orphaned_directive",
        f"Directive '{pending.title[:80]}' has no stream URL, dropped",
        line_number=pending.line_number,
    )
