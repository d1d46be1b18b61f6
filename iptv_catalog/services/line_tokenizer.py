"""
Line Tokenizer

Splits raw playlist text into bounded, trimmed, non-blank lines.
"""
from __future__ import annotations

import io
import logging
from collections.abc import Iterator

from iptv_catalog.config import CustomSettings, settings
from iptv_catalog.services.catalog_types import Diagnostic
from iptv_catalog.services.diagnostics import record_diagnostic


logger = logging.getLogger(__name__)

BOM = "\ufeff"


def iter_lines(
    text: str,
    *,
    source_index: int = 0,
    config: CustomSettings | None = None,
    diagnostics: list[Diagnostic] | None = None,
) -> Iterator[tuple[int, str]]:
    """
    Yield (line_number, line) pairs for the non-blank lines of a source.

    Lines longer than max_line_length are dropped. Scanning stops once
    max_lines lines were yielded and another non-blank line shows up.

    Args:
        text: Raw playlist text
        source_index: Source index used in diagnostics
        config: Settings override (defaults to global settings)
        diagnostics: Optional collector for recoverable conditions

    Yields:
        1-based line number and the stripped line
    """
    config = config or settings
    kept = 0

    for line_number, raw_line in enumerate(io.StringIO(text, newline=None), start=1):
        line = raw_line.strip()
        if line_number == 1:
            line = line.lstrip(BOM).strip()
        if not line:
            continue

        if kept >= config.max_lines:
            record_diagnostic(
                logger,
                diagnostics,
                source_index,
                "source_truncated",
                f"Source exceeds {config.max_lines} lines, remaining input ignored",
                line_number=line_number,
                level=logging.WARNING,
            )
            return

        if len(line) > config.max_line_length:
            record_diagnostic(
                logger,
                diagnostics,
                source_index,
                "line_too_long",
                f"Line of {len(line)} characters exceeds {config.max_line_length}, skipped",
                line_number=line_number,
            )
            continue

        kept += 1
        yield line_number, line


def tokenize_lines(
    text: str,
    *,
    source_index: int = 0,
    config: CustomSettings | None = None,
    diagnostics: list[Diagnostic] | None = None,
) -> list[str]:
    """Return the bounded list of trimmed, non-blank lines of a source."""
    return [
        line
        for _, line in iter_lines(
            text,
            source_index=source_index,
            config=config,
            diagnostics=diagnostics,
        )
    ]
