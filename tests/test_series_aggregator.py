import unittest
from pathlib import Path
import sys

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_DIR = TESTS_DIR.parent
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from iptv_catalog.services.catalog_types import Episode, EpisodeEntry, LiveChannel, Movie, Series
from iptv_catalog.services.series_aggregator import aggregate_entries


def episode_entry(title, season, number, group="Series", logo=None, description=None):
    episode = Episode(
        series_title=title,
        season=season,
        episode=number,
        description=description or f"{season}x{number}",
        group=group,
        url=f"http://x/{title}/{season}/{number}.ts",
        logo=logo,
    )
    return EpisodeEntry(series_title=title, episode=episode, group=group, logo=logo)


class SeriesAggregatorTests(unittest.TestCase):
    def test_episodes_are_grouped_and_sorted(self):
        items = aggregate_entries([
            episode_entry("Show", 2, 1, logo="first.png"),
            episode_entry("Show", 1, 3, logo="second.png"),
            episode_entry("Show", 1, 1),
        ])

        self.assertEqual(1, len(items))
        series = items[0]
        self.assertIsInstance(series, Series)
        self.assertEqual("Show", series.title)
        self.assertEqual("first.png", series.logo)
        self.assertEqual([(1, 1), (1, 3), (2, 1)], [(e.season, e.episode) for e in series.episodes])

    def test_title_normalization_merges_case_and_whitespace_variants(self):
        items = aggregate_entries([
            episode_entry("The Show", 1, 2),
            episode_entry("the show ", 1, 1),
        ])
        self.assertEqual(1, len(items))
        self.assertEqual("The Show", items[0].title)
        self.assertEqual(2, len(items[0].episodes))

    def test_same_title_in_different_groups_stays_separate(self):
        items = aggregate_entries([
            episode_entry("Show", 1, 1, group="Series EN"),
            episode_entry("Show", 1, 1, group="Series PT"),
        ])
        self.assertEqual(["Series EN", "Series PT"], [item.group for item in items])
        self.assertNotEqual(items[0].key, items[1].key)

    def test_duplicate_episode_numbers_keep_arrival_order(self):
        items = aggregate_entries([
            episode_entry("Show", 1, 2, description="first"),
            episode_entry("Show", 1, 1, description="pilot"),
            episode_entry("Show", 1, 2, description="second"),
        ])
        self.assertEqual(["pilot", "first", "second"], [e.description for e in items[0].episodes])

    def test_movies_and_channels_pass_through_before_series(self):
        channel = LiveChannel(key="c", title="News", group="News", url="http://x/n.ts")
        movie = Movie(key="m", title="Film", group="Movies", url="http://x/f.mp4", description="Film")
        items = aggregate_entries([episode_entry("Show", 1, 1), channel, movie])

        self.assertEqual([channel, movie], items[:2])
        self.assertIsInstance(items[2], Series)

    def test_unknown_entry_type_is_rejected(self):
        with self.assertRaises(TypeError):
            aggregate_entries(["not an entry"])

    def test_series_requires_episodes(self):
        with self.assertRaises(ValueError):
            Series(key="s", title="Empty", group="Series", episodes=())

    def test_seasons_groups_episodes(self):
        series = aggregate_entries([
            episode_entry("Show", 2, 1),
            episode_entry("Show", 1, 2),
            episode_entry("Show", 1, 1),
        ])[0]
        seasons = series.seasons()
        self.assertEqual([1, 2], list(seasons))
        self.assertEqual([1, 2], [e.episode for e in seasons[1]])


if __name__ == "__main__":
    unittest.main()
