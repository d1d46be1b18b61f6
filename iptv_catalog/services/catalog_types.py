"""
Shared dataclasses used across the catalog pipeline.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Literal, Union


DiagnosticCode = Literal[
    "line_too_long",
    "source_truncated",
    "orphaned_directive",
    "malformed_directive",
    "empty_title",
    "field_truncated",
    "source_failed",
    "source_empty",
    "catalog_empty",
]

SourceStatus = Literal["success", "empty", "failed"]

ContentKind = Literal["live", "movie", "series"]

# Catalog ordering of the variants
KIND_ORDER: dict[str, int] = {"live": 0, "movie": 1, "series": 2}


@dataclass(slots=True, frozen=True)
class Diagnostic:
    """Recoverable condition observed while parsing or merging."""
    source_index: int
    code: DiagnosticCode
    message: str
    line_number: int | None = None

    def to_dict(self) -> dict:
        payload = {
            "source_index": self.source_index,
            "code": self.code,
            "message": self.message,
        }
        if self.line_number is not None:
            payload["line_number"] = self.line_number
        return payload


@dataclass(slots=True, frozen=True)
class SourceText:
    """Playlist text fetched by the caller, with an optional label for logs."""
    content: str
    name: str | None = None


@dataclass(slots=True, frozen=True)
class RawEntry:
    """One directive + URL pair before classification."""
    title: str
    group: str
    url: str
    logo: str | None = None
    name: str | None = None
    channel_id: str | None = None
    line_number: int = 0


@dataclass(slots=True, frozen=True)
class Episode:
    series_title: str
    season: int
    episode: int
    description: str
    group: str
    url: str
    logo: str | None = None

    @property
    def sort_key(self) -> tuple[int, int]:
        return self.season, self.episode


@dataclass(slots=True, frozen=True)
class EpisodeEntry:
    """Classifier output for an entry that belongs to a series."""
    series_title: str
    episode: Episode
    group: str
    logo: str | None = None


@dataclass(slots=True, frozen=True)
class LiveChannel:
    key: str
    title: str
    group: str
    url: str
    logo: str | None = None
    channel_id: str | None = None
    kind: ContentKind = field(default="live", init=False)


@dataclass(slots=True, frozen=True)
class Movie:
    key: str
    title: str
    group: str
    url: str
    description: str
    logo: str | None = None
    channel_id: str | None = None
    kind: ContentKind = field(default="movie", init=False)


@dataclass(slots=True, frozen=True)
class Series:
    key: str
    title: str
    group: str
    episodes: tuple[Episode, ...]
    logo: str | None = None
    kind: ContentKind = field(default="series", init=False)

    def __post_init__(self) -> None:
        if not self.episodes:
            raise ValueError(f"Series '{self.title}' must contain at least one episode")

    def seasons(self) -> dict[int, list[Episode]]:
        """Group episodes by season number, seasons ascending."""
        grouped: dict[int, list[Episode]] = {}
        for episode in self.episodes:
            grouped.setdefault(episode.season, []).append(episode)
        return dict(sorted(grouped.items()))


ContentItem = Union[LiveChannel, Movie, Series]
ClassifiedEntry = Union[LiveChannel, Movie, EpisodeEntry]


@dataclass(slots=True)
class SourceResult:
    """Per-source parse output."""
    index: int
    status: SourceStatus
    items: list[ContentItem] = field(default_factory=list)
    groups: set[str] = field(default_factory=set)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    entries_parsed: int = 0
    name: str | None = None
    error: str | None = None


@dataclass(slots=True)
class Catalog:
    """Merged output of one or more sources."""
    items: list[ContentItem] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    sources: list[SourceResult] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def counts(self) -> dict[str, int]:
        """Number of items per content kind."""
        counter = Counter(item.kind for item in self.items)
        return {kind: counter.get(kind, 0) for kind in KIND_ORDER}

    def filter(
        self,
        *,
        group: str | None = None,
        kind: ContentKind | None = None,
        query: str | None = None,
    ) -> list[ContentItem]:
        """
        Browse the catalog.

        Args:
            group: Exact group label to keep
            kind: Content kind to keep
            query: Case-insensitive substring of the title

        Returns:
            Matching items in catalog order
        """
        needle = query.strip().lower() if query else ""
        return [
            item
            for item in self.items
            if (group is None or item.group == group)
            and (kind is None or item.kind == kind)
            and (not needle or needle in item.title.lower())
        ]


__all__ = [
    "Catalog",
    "ClassifiedEntry",
    "ContentItem",
    "ContentKind",
    "Diagnostic",
    "DiagnosticCode",
    "Episode",
    "EpisodeEntry",
    "KIND_ORDER",
    "LiveChannel",
    "Movie",
    "RawEntry",
    "Series",
    "SourceResult",
    "SourceStatus",
    "SourceText",
]
