"""
Crawl loop: batching, delays, depth-bounded discovery and recording.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from appstore_leads.config import CrawlSettings
from appstore_leads.scraping.engine import AppStoreCrawlEngine
from appstore_leads.scraping.storage import ResultStorage
from appstore_leads.scraping.types import CrawlStats, ScrapedRecord
from appstore_leads.scraping.urls import app_id_from_url


def _url(app_id: str) -> str:
    return f"https://apps.apple.com/us/app/app-{app_id}/{app_id}"


class GraphScraper:
    """
    Serves records from an in-memory "customers also bought" graph.
    """

    def __init__(self, graph: dict[str, list[str]], emails: dict[str, tuple[str, ...]] | None = None) -> None:
        self.graph = graph
        self.emails = emails or {}
        self.scraped: list[str] = []

    async def scrape(self, url: str) -> ScrapedRecord:
        self.scraped.append(url)
        await asyncio.sleep(0)
        app_id = app_id_from_url(url)
        if app_id not in self.graph:
            return ScrapedRecord.minimal(url)
        return ScrapedRecord(
            id=app_id,
            url=url,
            title=f"App {app_id}",
            emails_by_url={url: self.emails.get(app_id, ())},
            other_apps=tuple(_url(other) for other in self.graph[app_id]),
        )


class MemoryStorage(ResultStorage):
    def __init__(self) -> None:
        self.batches: list[list[str]] = []

    def store(self, records: Sequence[ScrapedRecord]) -> int:
        self.batches.append([record.id for record in records])
        return len(records)


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


GRAPH = {
    "id1": ["id2", "id3"],
    "id2": ["id1", "id4"],
    "id3": ["id4"],
    "id4": ["id5"],
    "id5": [],
}


@pytest.fixture()
def settings() -> CrawlSettings:
    return CrawlSettings(batch_size=2, batch_delay_seconds=3.0, batch_delay_jitter_seconds=2.0)


def _engine(settings: CrawlSettings, scraper: GraphScraper, storage: MemoryStorage, sleep: SleepRecorder):
    return AppStoreCrawlEngine(settings=settings, storage=storage, scraper=scraper, sleep=sleep)  # type: ignore[arg-type]


def test_depth_zero_scrapes_only_input_in_batches(settings: CrawlSettings) -> None:
    scraper, storage, sleep = GraphScraper(GRAPH), MemoryStorage(), SleepRecorder()

    stats = asyncio.run(
        _engine(settings, scraper, storage, sleep).run(urls=[_url("id1"), _url("id2"), _url("id3")])
    )

    assert storage.batches == [["id1", "id2"], ["id3"]]
    assert stats.apps_scraped == 3
    assert len(sleep.delays) == 2
    assert all(3.0 <= delay <= 5.0 for delay in sleep.delays)


def test_depth_expands_frontier_without_rescraping(settings: CrawlSettings) -> None:
    scraper, storage, sleep = GraphScraper(GRAPH), MemoryStorage(), SleepRecorder()

    asyncio.run(_engine(settings, scraper, storage, sleep).run(urls=[_url("id1")], depth=2))

    scraped_ids = [app_id_from_url(url) for url in scraper.scraped]
    assert scraped_ids == ["id1", "id2", "id3", "id4"]
    assert len(scraped_ids) == len(set(scraped_ids))


def test_ignore_list_is_never_scraped(settings: CrawlSettings) -> None:
    scraper, storage, sleep = GraphScraper(GRAPH), MemoryStorage(), SleepRecorder()

    asyncio.run(
        _engine(settings, scraper, storage, sleep).run(
            urls=[_url("id1"), _url("id3")],
            ignore_ids=["id3", "id2"],
            depth=3,
        )
    )

    scraped_ids = {app_id_from_url(url) for url in scraper.scraped}
    assert "id2" not in scraped_ids
    assert "id3" not in scraped_ids


def test_first_step_can_be_excluded_from_output(settings: CrawlSettings) -> None:
    scraper, storage, sleep = GraphScraper(GRAPH), MemoryStorage(), SleepRecorder()

    stats = asyncio.run(
        _engine(settings, scraper, storage, sleep).run(
            urls=[_url("id1")],
            depth=1,
            record_first_step=False,
        )
    )

    assert storage.batches == [["id2", "id3"]]
    assert stats.apps_scraped == 3


def test_stats_count_emails_and_degraded_pages(settings: CrawlSettings) -> None:
    scraper = GraphScraper(GRAPH, emails={"id1": ("a@x.example", "b@x.example")})
    storage, sleep = MemoryStorage(), SleepRecorder()

    stats = asyncio.run(
        _engine(settings, scraper, storage, sleep).run(urls=[_url("id1"), _url("id404")])
    )

    assert stats == CrawlStats(
        apps_scraped=2,
        apps_with_emails=1,
        apps_without_emails=1,
        emails_found=2,
    )


def test_empty_input_does_nothing(settings: CrawlSettings) -> None:
    scraper, storage, sleep = GraphScraper(GRAPH), MemoryStorage(), SleepRecorder()

    stats = asyncio.run(_engine(settings, scraper, storage, sleep).run(urls=[], depth=5))

    assert stats == CrawlStats()
    assert scraper.scraped == []
    assert sleep.delays == []


def test_iter_batches_yields_lazily(settings: CrawlSettings) -> None:
    scraper, storage, sleep = GraphScraper(GRAPH), MemoryStorage(), SleepRecorder()
    engine = _engine(settings, scraper, storage, sleep)

    async def first_batch() -> list[ScrapedRecord]:
        async for batch in engine.iter_batches([_url("id1"), _url("id2"), _url("id3")]):
            return batch
        return []

    batch = asyncio.run(first_batch())

    assert [record.id for record in batch] == ["id1", "id2"]
    assert [app_id_from_url(url) for url in scraper.scraped] == ["id1", "id2"]
