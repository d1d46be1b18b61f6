"""
Series Aggregator

Collapses episode entries that share a show name and group into Series items.
"""
from __future__ import annotations

import bisect
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from iptv_catalog.services.catalog_types import (
    ClassifiedEntry,
    ContentItem,
    Episode,
    EpisodeEntry,
    LiveChannel,
    Movie,
    Series,
)
from iptv_catalog.services.content_classifier import normalize_series_title, series_key


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _SeriesBuilder:
    """Mutable accumulator for one show while entries stream in."""
    title: str
    group: str
    logo: str | None
    episodes: list[Episode] = field(default_factory=list)

    def add(self, episode: Episode) -> None:
        # Inserts after equal (season, episode) pairs, same order a stable re-sort gives
        bisect.insort_right(self.episodes, episode, key=lambda item: item.sort_key)

    def build(self) -> Series:
        return Series(
            key=series_key(self.title, self.group),
            title=self.title,
            group=self.group,
            episodes=tuple(self.episodes),
            logo=self.logo,
        )


def aggregate_entries(entries: Iterable[ClassifiedEntry]) -> list[ContentItem]:
    """
    Group classified entries into catalog items.

    Movies and live channels pass through in arrival order. Episodes are keyed
    by (normalized show name, group); the first episode of a key fixes the
    series title, group and logo.

    Args:
        entries: Classifier output for one source

    Returns:
        Non-episode items followed by Series items in first-seen order
    """
    passthrough: list[ContentItem] = []
    builders: dict[tuple[str, str], _SeriesBuilder] = {}

    for entry in entries:
        if isinstance(entry, EpisodeEntry):
            key = (normalize_series_title(entry.series_title), entry.group)
            builder = builders.get(key)
            if builder is None:
                builder = _SeriesBuilder(
                    title=entry.series_title,
                    group=entry.group,
                    logo=entry.logo,
                )
                builders[key] = builder
            builder.add(entry.episode)
        elif isinstance(entry, (LiveChannel, Movie)):
            passthrough.append(entry)
        else:
            raise TypeError(f"Unexpected entry type: {type(entry).__name__}")

    series = [builder.build() for builder in builders.values()]
    logger.debug(
        "Aggregated %s episodes into %s series",
        sum(len(item.episodes) for item in series),
        len(series),
    )

    return passthrough + series
