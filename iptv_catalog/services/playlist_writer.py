"""
Playlist Writer

Renders a catalog back to extended M3U text. Parsing the output again yields
an equivalent catalog.
"""
from __future__ import annotations

from iptv_catalog.services.catalog_types import Catalog, Episode, LiveChannel, Movie, Series


def render_playlist(catalog: Catalog) -> str:
    """
    Render every playable entry of the catalog as #EXTINF + URL pairs.

    Series are flattened to one entry per episode, titled so the classifier
    recognizes them again. The episode that carries the series logo goes first.
    """
    lines = ["#EXTM3U"]

    for item in catalog.items:
        if isinstance(item, Series):
            for episode in _episodes_in_render_order(item):
                lines.extend(_render_entry(episode_title(episode), episode.group, episode.url, logo=episode.logo))
        elif isinstance(item, Movie):
            # Raw title stays the display title so the description survives
            lines.extend(_render_entry(
                item.description,
                item.group,
                item.url,
                logo=item.logo,
                name=item.title,
                channel_id=item.channel_id,
            ))
        elif isinstance(item, LiveChannel):
            lines.extend(_render_entry(item.title, item.group, item.url, logo=item.logo, channel_id=item.channel_id))

    return "\n".join(lines) + "\n"


def episode_title(episode: Episode) -> str:
    """Display title like 'Show S01E02 Pilot'."""
    marker = f"S{episode.season:02d}E{episode.episode:02d}"
    title = f"{episode.series_title} {marker}"
    synthesized = f"Season {episode.season}, Episode {episode.episode}"
    if episode.description and episode.description != synthesized:
        title = f"{title} {episode.description}"
    return title


def _episodes_in_render_order(series: Series) -> list[Episode]:
    """
    Move the episode that set the series title and logo to the front.

    Only the first episode of a (season, episode) run can be that episode,
    which keeps duplicates in their original relative order.
    """
    episodes = list(series.episodes)
    previous_key = None
    for position, episode in enumerate(episodes):
        is_run_start = episode.sort_key != previous_key
        previous_key = episode.sort_key
        if is_run_start and episode.logo == series.logo and episode.series_title == series.title:
            if position:
                episodes.insert(0, episodes.pop(position))
            break
    return episodes


def _render_entry(
    title: str,
    group: str,
    url: str,
    *,
    logo: str | None = None,
    name: str | None = None,
    channel_id: str | None = None,
) -> list[str]:
    attrs = []
    if channel_id:
        attrs.append(f'tvg-id="{_attr(channel_id)}"')
    if name and name != title:
        attrs.append(f'tvg-name="{_attr(name)}"')
    if logo:
        attrs.append(f'tvg-logo="{_attr(logo)}"')
    attrs.append(f'group-title="{_attr(group)}"')
    return [f"#EXTINF:-1 {' '.join(attrs)},{_single_line(title)}", url]


def _attr(value: str) -> str:
    return _single_line(value).replace('"', "'")


def _single_line(value: str) -> str:
    return " ".join(value.split())
