"""
Structured logging helpers for consistent log formatting.

Provides utilities for structured, clean logging without excessive decorative separators.
"""
import logging


def log_section_start(logger: logging.Logger, section_name: str) -> None:
    """
    Log the start of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being started
    """
    logger.info(f"Starting: {section_name}")


def log_section_end(logger: logging.Logger, section_name: str) -> None:
    """
    Log the end of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being ended
    """
    logger.info(f"Completed: {section_name}")


def log_source_processing(logger: logging.Logger, idx: int, total: int, name: str | None) -> None:
    """
    Log source processing header.

    Args:
        logger: Logger instance
        idx: Current source index (1-based)
        total: Total number of sources
        name: Optional source label
    """
    logger.info(f"Processing source {idx}/{total}: {name or 'unnamed'}")


def log_merge_summary(
    logger: logging.Logger,
    items_count: int,
    groups_count: int,
    counts: dict[str, int],
) -> None:
    """
    Log merge operation summary.

    Args:
        logger: Logger instance
        items_count: Number of merged items
        groups_count: Number of distinct groups
        counts: Items per content kind
    """
    breakdown = ", ".join(f"{kind}={count}" for kind, count in counts.items())
    logger.info(
        f"Merge summary - Items: {items_count} ({breakdown}), Groups: {groups_count}"
    )
