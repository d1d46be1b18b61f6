"""
Diagnostics collection

Recoverable conditions are logged and collected, never raised.
"""
import logging

from iptv_catalog.services.catalog_types import Diagnostic, DiagnosticCode


def record_diagnostic(
    logger: logging.Logger,
    diagnostics: list[Diagnostic] | None,
    source_index: int,
    code: DiagnosticCode,
    message: str,
    line_number: int | None = None,
    level: int = logging.DEBUG,
) -> Diagnostic:
    """
    Log a recoverable condition and append it to the diagnostics list.

    Args:
        logger: Logger instance
        diagnostics: Collector list, or None to only log
        source_index: Source the condition belongs to
        code: Diagnostic code
        message: Human-readable description
        line_number: 1-based line in the source, when known
        level: Logging level for the log line

    Returns:
        The recorded Diagnostic
    """
    diagnostic = Diagnostic(
        source_index=source_index,
        code=code,
        message=message,
        line_number=line_number,
    )
    if line_number is not None:
        logger.log(level, "[Source %s] line %s: %s", source_index, line_number, message)
    else:
        logger.log(level, "[Source %s] %s", source_index, message)
    if diagnostics is not None:
        diagnostics.append(diagnostic)
    return diagnostic
