import asyncio
import unittest
from pathlib import Path
from unittest import mock
import sys

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_DIR = TESTS_DIR.parent
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from iptv_catalog.config import CustomSettings
from iptv_catalog.services.catalog_merger import (
    CatalogMergePipeline,
    merge_results,
    merge_sources,
    parse_source,
)
from iptv_catalog.services.catalog_types import LiveChannel, Movie, Series, SourceText


SERIES_SOURCE = '#EXTINF:-1 tvg-logo="L" group-title="Series",Show Name S01E02\nhttp://x/ep.ts'
MOVIE_SOURCE = '#EXTINF:-1 group-title="Movies",Cool Movie (2020)\nhttp://x/m.ts'

MIXED_SOURCE = """#EXTM3U
#EXTINF:-1 tvg-id="bbc" group-title="News",BBC News
http://x/bbc.ts
#EXTINF:-1 group-title="Series",Show S01E02 Second
http://x/s1e2.ts
#EXTINF:-1 group-title="Movies",Alpha
http://x/alpha.mp4
#EXTINF:-1 group-title="Series",Show S01E01 First
http://x/s1e1.ts
#EXTINF:-1 group-title="News",Al Jazeera
http://x/aj.ts
"""


def channel_source(title, group):
    return f'#EXTINF:-1 group-title="{group}",{title}\nhttp://x/{title}.ts'


class ParseSourceTests(unittest.TestCase):
    def test_series_scenario(self):
        result = parse_source(SERIES_SOURCE)

        self.assertEqual("success", result.status)
        self.assertEqual(1, len(result.items))
        series = result.items[0]
        self.assertIsInstance(series, Series)
        self.assertEqual("Show Name", series.title)
        self.assertEqual("L", series.logo)
        self.assertEqual(1, len(series.episodes))
        self.assertEqual((1, 2), (series.episodes[0].season, series.episodes[0].episode))

    def test_movie_scenario(self):
        result = parse_source(MOVIE_SOURCE)
        self.assertEqual(1, len(result.items))
        self.assertIsInstance(result.items[0], Movie)
        self.assertEqual("Cool Movie (2020)", result.items[0].title)

    def test_orphaned_directive_yields_empty_source(self):
        result = parse_source('#EXTINF:-1 group-title="News",News')
        self.assertEqual("empty", result.status)
        self.assertEqual([], result.items)
        self.assertEqual(["orphaned_directive", "source_empty"], [d.code for d in result.diagnostics])

    def test_empty_title_recorded(self):
        result = parse_source('#EXTINF:-1 group-title="News",\nhttp://x/a.ts')
        self.assertEqual("empty", result.status)
        self.assertIn("empty_title", [d.code for d in result.diagnostics])
        self.assertEqual(set(), result.groups)

    def test_mixed_source(self):
        result = parse_source(MIXED_SOURCE)

        self.assertEqual(5, result.entries_parsed)
        self.assertEqual({"News", "Series", "Movies"}, result.groups)
        self.assertEqual(
            ["BBC News", "Alpha", "Al Jazeera", "Show"],
            [item.title for item in result.items],
        )
        self.assertEqual(["First", "Second"], [e.description for e in result.items[-1].episodes])

    def test_parsing_is_deterministic(self):
        first = parse_source(MIXED_SOURCE)
        second = parse_source(MIXED_SOURCE)
        self.assertEqual(first.items, second.items)
        self.assertEqual(first.groups, second.groups)

    def test_line_limit_truncates_without_raising(self):
        config = CustomSettings(max_lines=4)
        result = parse_source(MIXED_SOURCE, config=config)

        # First four lines: header, BBC directive + URL, series directive (orphaned)
        self.assertEqual(["BBC News"], [item.title for item in result.items])
        codes = [d.code for d in result.diagnostics]
        self.assertIn("source_truncated", codes)
        self.assertIn("orphaned_directive", codes)

    def test_unexpected_error_marks_source_failed(self):
        with mock.patch(
            "iptv_catalog.services.catalog_merger.parse_directives",
            side_effect=RuntimeError("boom"),
        ):
            result = parse_source(MIXED_SOURCE, source_index=3)

        self.assertEqual("failed", result.status)
        self.assertEqual("boom", result.error)
        self.assertEqual(["source_failed"], [d.code for d in result.diagnostics])
        self.assertEqual(3, result.diagnostics[0].source_index)


class MergeTests(unittest.TestCase):
    def test_two_sources_union_groups(self):
        catalog = merge_sources([
            channel_source("Zeta", "Sports"),
            channel_source("Alpha", "News"),
        ])

        self.assertEqual(2, len(catalog.items))
        self.assertEqual(["News", "Sports"], catalog.groups)
        self.assertEqual(["Alpha", "Zeta"], [item.title for item in catalog.items])
        self.assertFalse(catalog.is_empty)

    def test_items_sorted_by_kind_then_title(self):
        catalog = merge_sources([MIXED_SOURCE, MOVIE_SOURCE])
        self.assertEqual(
            [
                (LiveChannel, "Al Jazeera"),
                (LiveChannel, "BBC News"),
                (Movie, "Alpha"),
                (Movie, "Cool Movie (2020)"),
                (Series, "Show"),
            ],
            [(type(item), item.title) for item in catalog.items],
        )
        self.assertEqual({"live": 2, "movie": 2, "series": 1}, catalog.counts())

    def test_source_order_breaks_ties_and_series_are_not_unified(self):
        source_a = '#EXTINF:-1 group-title="Series",Show S01E01\nhttp://a/1.ts'
        source_b = '#EXTINF:-1 group-title="Series",Show S01E02\nhttp://b/2.ts'

        forward = merge_sources([source_a, source_b])
        backward = merge_sources([source_b, source_a])

        self.assertEqual(2, len(forward.items))
        self.assertEqual(["http://a/1.ts", "http://b/2.ts"], [s.episodes[0].url for s in forward.items])
        self.assertEqual(["http://b/2.ts", "http://a/1.ts"], [s.episodes[0].url for s in backward.items])
        self.assertEqual([1, 2], [result.index for result in forward.sources])

        for catalog, texts in ((forward, [source_a, source_b]), (backward, [source_b, source_a])):
            for index, text in enumerate(texts, start=1):
                self.assertEqual(
                    parse_source(text, source_index=index).items,
                    catalog.sources[index - 1].items,
                )

    def test_failed_source_does_not_abort_merge(self):
        real_parse = parse_source

        def flaky(text, **kwargs):
            if kwargs["source_index"] == 1:
                failed = real_parse("", **kwargs)
                failed.status = "failed"
                failed.error = "unreadable"
                return failed
            return real_parse(text, **kwargs)

        with mock.patch("iptv_catalog.services.catalog_merger.parse_source", side_effect=flaky):
            catalog = merge_sources(["garbage", MOVIE_SOURCE])

        self.assertEqual(["failed", "success"], [result.status for result in catalog.sources])
        self.assertEqual(["Cool Movie (2020)"], [item.title for item in catalog.items])

    def test_empty_catalog_is_reported_not_raised(self):
        catalog = merge_sources(["", "#EXTM3U\n# just a comment"])

        self.assertTrue(catalog.is_empty)
        self.assertEqual([], catalog.groups)
        self.assertEqual("catalog_empty", catalog.diagnostics[-1].code)
        self.assertEqual(0, catalog.diagnostics[-1].source_index)

    def test_source_text_names_are_kept(self):
        catalog = merge_sources([SourceText(content=MOVIE_SOURCE, name="vod.m3u")])
        self.assertEqual("vod.m3u", catalog.sources[0].name)

    def test_merge_results_accepts_preparsed_output(self):
        results = [parse_source(MOVIE_SOURCE, source_index=1), parse_source(SERIES_SOURCE, source_index=2)]
        catalog = merge_results(results)
        self.assertEqual(["Cool Movie (2020)", "Show Name"], [item.title for item in catalog.items])
        self.assertEqual(["Movies", "Series"], catalog.groups)

    def test_filter(self):
        catalog = merge_sources([MIXED_SOURCE])
        self.assertEqual(["Al Jazeera", "BBC News"], [i.title for i in catalog.filter(group="News")])
        self.assertEqual(["Alpha"], [i.title for i in catalog.filter(kind="movie")])
        self.assertEqual(["Al Jazeera", "Alpha"], [i.title for i in catalog.filter(query=" AL")])
        self.assertEqual([], catalog.filter(group="News", kind="series"))


class CatalogMergePipelineTests(unittest.TestCase):
    def test_async_pipeline_matches_sequential_merge(self):
        sources = [
            MIXED_SOURCE,
            channel_source("Zeta", "Sports"),
            SERIES_SOURCE,
            MOVIE_SOURCE,
        ]
        expected = merge_sources(sources)
        catalog = asyncio.run(CatalogMergePipeline(sources, max_concurrency=2).run())

        self.assertEqual(expected.items, catalog.items)
        self.assertEqual(expected.groups, catalog.groups)
        self.assertEqual([1, 2, 3, 4], [result.index for result in catalog.sources])

    def test_pipeline_with_no_sources(self):
        catalog = asyncio.run(CatalogMergePipeline([]).run())
        self.assertTrue(catalog.is_empty)


if __name__ == "__main__":
    unittest.main()
