from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator

from iptv_catalog.services.catalog_types import (
    Catalog,
    ContentItem,
    Episode,
    LiveChannel,
    Movie,
    Series,
)


class SourceRequest(BaseModel):
    """Single playlist source already fetched by the caller"""
    name: str | None = Field(None, max_length=200, description="Optional label used in logs and summaries")
    content: str = Field(..., description="Raw extended M3U text")


class CatalogRequest(BaseModel):
    """Catalog build request"""
    sources: list[SourceRequest] = Field(..., min_length=1, description="Sources in merge order")

    @field_validator('sources')
    @classmethod
    def validate_sources(cls, v: list[SourceRequest]) -> list[SourceRequest]:
        """Reject requests where every source is blank"""
        if not any(source.content.strip() for source in v):
            raise ValueError("At least one source must contain playlist text")
        return v


class EpisodeResponse(BaseModel):
    """Single episode of a series"""
    season: int
    episode: int
    description: str
    url: str
    logo: str | None = None


class LiveChannelResponse(BaseModel):
    kind: Literal["live"] = "live"
    key: str
    title: str
    group: str
    url: str
    logo: str | None = None


class MovieResponse(BaseModel):
    kind: Literal["movie"] = "movie"
    key: str
    title: str
    group: str
    url: str
    description: str
    logo: str | None = None


class SeriesResponse(BaseModel):
    kind: Literal["series"] = "series"
    key: str
    title: str
    group: str
    logo: str | None = None
    episodes: list[EpisodeResponse] = Field(..., min_length=1, description="Episodes ordered by season then episode")


ContentItemResponse = Annotated[
    Union[LiveChannelResponse, MovieResponse, SeriesResponse],
    Field(discriminator="kind"),
]


class DiagnosticResponse(BaseModel):
    """Recoverable condition reported while building the catalog"""
    source_index: int = Field(..., description="1-based source index, 0 for catalog-level conditions")
    code: str
    message: str
    line_number: int | None = None


class SourceSummaryResponse(BaseModel):
    source_index: int
    name: str | None = None
    status: Literal["success", "empty", "failed"]
    entries_parsed: int
    items: int
    error: str | None = None


class CatalogResponse(BaseModel):
    """Merged catalog response"""
    status: Literal["ok", "empty"] = Field(..., description="'empty' when no source produced any content")
    total_items: int
    counts: dict[str, int] = Field(..., description="Items per content kind")
    groups: list[str] = Field(..., description="Sorted, deduplicated group labels")
    items: list[ContentItemResponse]
    sources: list[SourceSummaryResponse]
    diagnostics: list[DiagnosticResponse]


def episode_to_response(episode: Episode) -> EpisodeResponse:
    return EpisodeResponse(
        season=episode.season,
        episode=episode.episode,
        description=episode.description,
        url=episode.url,
        logo=episode.logo,
    )


def item_to_response(item: ContentItem) -> LiveChannelResponse | MovieResponse | SeriesResponse:
    if isinstance(item, Series):
        return SeriesResponse(
            key=item.key,
            title=item.title,
            group=item.group,
            logo=item.logo,
            episodes=[episode_to_response(episode) for episode in item.episodes],
        )
    if isinstance(item, Movie):
        return MovieResponse(
            key=item.key,
            title=item.title,
            group=item.group,
            url=item.url,
            description=item.description,
            logo=item.logo,
        )
    if isinstance(item, LiveChannel):
        return LiveChannelResponse(
            key=item.key,
            title=item.title,
            group=item.group,
            url=item.url,
            logo=item.logo,
        )
    raise TypeError(f"Unexpected content item: {type(item).__name__}")


def catalog_to_response(catalog: Catalog) -> CatalogResponse:
    return CatalogResponse(
        status="empty" if catalog.is_empty else "ok",
        total_items=len(catalog.items),
        counts=catalog.counts(),
        groups=catalog.groups,
        items=[item_to_response(item) for item in catalog.items],
        sources=[
            SourceSummaryResponse(
                source_index=result.index,
                name=result.name,
                status=result.status,
                entries_parsed=result.entries_parsed,
                items=len(result.items),
                error=result.error,
            )
            for result in catalog.sources
        ],
        diagnostics=[DiagnosticResponse(**diagnostic.to_dict()) for diagnostic in catalog.diagnostics],
    )
