"""
Content Classifier

Decides whether a parsed entry is a live channel, a movie, or a series episode.
Classification is driven by group-title keywords; the season/episode marker in
the title only matters for groups that look like series.
"""
from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass

from iptv_catalog.config import CustomSettings, settings
from iptv_catalog.services.catalog_types import (
    ClassifiedEntry,
    Episode,
    EpisodeEntry,
    LiveChannel,
    Movie,
    RawEntry,
)


logger = logging.getLogger(__name__)

# S01E02 / T01E02 (temporada), optional spaces between the parts
LETTER_MARKER_RE = re.compile(
    r"(?<![A-Za-z0-9])[ST]\s?(?P<season>\d{1,3})\s?E\s?(?P<episode>\d{1,4})(?!\d)",
    re.IGNORECASE,
)
# 1x02
NUMERIC_MARKER_RE = re.compile(
    r"(?<![A-Za-z0-9])(?P<season>\d{1,3})x(?P<episode>\d{1,4})(?!\d)",
    re.IGNORECASE,
)
MARKER_PATTERNS = (LETTER_MARKER_RE, NUMERIC_MARKER_RE)

SEPARATORS = " \t-_:|.,"
OPENING_BRACKETS = "([{"
CLOSING_BRACKETS = ")]}"
EMPTY_BRACKETS_RE = re.compile(r"[(\[{]\s*[)\]}]")


@dataclass(slots=True, frozen=True)
class EpisodeMarker:
    """Season/episode token found in a title."""
    season: int
    episode: int
    start: int
    end: int


def find_episode_marker(title: str) -> EpisodeMarker | None:
    """Return the first season/episode marker, letter notation taking precedence."""
    for pattern in MARKER_PATTERNS:
        match = pattern.search(title)
        if match:
            return EpisodeMarker(
                season=int(match.group("season")),
                episode=int(match.group("episode")),
                start=match.start(),
                end=match.end(),
            )
    return None


def group_matches(group: str, keywords: list[str]) -> bool:
    """Case-insensitive substring match of any keyword in the group label."""
    lowered = group.lower()
    return any(keyword in lowered for keyword in keywords)


def derive_series_title(raw_title: str, name: str | None, marker: EpisodeMarker) -> str:
    """
    Work out the show name an episode belongs to.

    The name attribute wins when present. Whatever the base is, a marker token
    inside it is cut together with everything after it.
    """
    if name:
        base = name
        base_marker = find_episode_marker(name)
    else:
        base = raw_title
        base_marker = marker

    if base_marker is not None:
        base = base[:base_marker.start]

    return _trim(base)


def derive_episode_description(
    raw_title: str,
    series_title: str,
    marker: EpisodeMarker,
) -> str:
    """Strip the show name and marker from the raw title; synthesize a label if nothing is left."""
    remainder = _collapse(f"{raw_title[:marker.start]} {raw_title[marker.end:]}")

    if series_title:
        match = re.search(re.escape(series_title), remainder, re.IGNORECASE)
        if match:
            remainder = remainder[:match.start()] + remainder[match.end():]

    remainder = EMPTY_BRACKETS_RE.sub(" ", remainder)
    remainder = _collapse(remainder).strip(SEPARATORS).lstrip(CLOSING_BRACKETS)
    remainder = _trim(remainder)

    return remainder or f"Season {marker.season}, Episode {marker.episode}"


def classify_entry(
    entry: RawEntry,
    *,
    config: CustomSettings | None = None,
) -> ClassifiedEntry | None:
    """
    Classify a finalized entry.

    Args:
        entry: Entry produced by the directive parser
        config: Settings override (defaults to global settings)

    Returns:
        EpisodeEntry, Movie or LiveChannel, or None when no title can be resolved
    """
    config = config or settings

    marker = find_episode_marker(entry.title)
    if marker is not None and group_matches(entry.group, config.keywords_for("series")):
        return _classify_episode(entry, marker, config)

    title = entry.name or entry.title
    if not title:
        return None

    if group_matches(entry.group, config.keywords_for("movie")):
        return Movie(
            key=_item_key("movie", entry),
            title=title,
            group=entry.group,
            url=entry.url,
            description=entry.title[:config.max_description_length],
            logo=entry.logo,
            channel_id=entry.channel_id,
        )

    return LiveChannel(
        key=_item_key("live", entry),
        title=title,
        group=entry.group,
        url=entry.url,
        logo=entry.logo,
        channel_id=entry.channel_id,
    )


def series_key(series_title: str, group: str) -> str:
    """Deterministic identity key for a series aggregate."""
    digest = hashlib.sha1(
        f"{normalize_series_title(series_title)}\x1f{group}".encode("utf-8")
    ).hexdigest()
    return f"series-{digest[:12]}"


def normalize_series_title(title: str) -> str:
    return title.strip().lower()


def _classify_episode(
    entry: RawEntry,
    marker: EpisodeMarker,
    config: CustomSettings,
) -> EpisodeEntry | None:
    series_title = derive_series_title(entry.title, entry.name, marker)
    if not series_title:
        logger.debug("Episode on line %s has no series title", entry.line_number)
        return None

    description = derive_episode_description(entry.title, series_title, marker)

    episode = Episode(
        series_title=series_title,
        season=marker.season,
        episode=marker.episode,
        description=description[:config.max_description_length],
        group=entry.group,
        url=entry.url,
        logo=entry.logo,
    )
    return EpisodeEntry(
        series_title=series_title,
        episode=episode,
        group=entry.group,
        logo=entry.logo,
    )


def _item_key(kind: str, entry: RawEntry) -> str:
    if entry.channel_id:
        return entry.channel_id
    digest = hashlib.sha1(entry.url.encode("utf-8")).hexdigest()
    return f"{kind}-{digest[:12]}"


def _collapse(value: str) -> str:
    return " ".join(value.split())


def _trim(value: str) -> str:
    """Strip separators and dangling opening brackets from both ends."""
    value = _collapse(value).strip(SEPARATORS)
    return value.rstrip(OPENING_BRACKETS).strip(SEPARATORS)
