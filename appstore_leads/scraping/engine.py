"""
App Store crawl engine: batched scraping with depth-bounded discovery.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Sequence

import requests

from appstore_leads.config import CrawlSettings
from appstore_leads.scraping.fetcher import PageFetcher
from appstore_leads.scraping.logging_utils import log_event
from appstore_leads.scraping.scraper import AppPageScraper
from appstore_leads.scraping.storage import ResultStorage
from appstore_leads.scraping.types import CrawlStats, Frontier, ScrapedRecord

logger = logging.getLogger(__name__)


class AppStoreCrawlEngine:
    """
    Orchestrates batched page scrapes, frontier expansion and persistence.
    """

    def __init__(
        self,
        *,
        settings: CrawlSettings,
        storage: ResultStorage,
        scraper: AppPageScraper | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._storage = storage
        self._scraper = scraper or AppPageScraper(
            fetcher=PageFetcher(
                session=session,
                user_agent=settings.user_agent,
                timeout_seconds=settings.timeout_seconds,
            )
        )
        self._sleep = sleep

    async def run(
        self,
        *,
        urls: Iterable[str],
        ignore_ids: Iterable[str] = (),
        depth: int = 0,
        record_first_step: bool = True,
    ) -> CrawlStats:
        """
        Crawl `urls`, then up to `depth` rounds of related apps.

        Depth 0 scrapes only the given URLs. Results are stored batch by
        batch; with `record_first_step` off the first round only seeds
        discovery.
        """

        frontier = Frontier.initial(urls, ignore_ids)
        stats = CrawlStats()
        log_event(
            logger,
            logging.INFO,
            "crawl_started",
            depth=depth,
            pending_urls=len(frontier.urls),
            ignored_ids=len(frontier.ignore_ids),
        )

        while not frontier.exhausted:
            record = record_first_step or frontier.step > 0
            results: list[ScrapedRecord] = []
            async for batch in self.iter_batches(frontier.urls):
                results.extend(batch)
                self._report_degraded(batch)
                if record:
                    self._storage.store(batch)

            stats = stats.add(results)
            frontier = frontier.advance(results, depth=depth)
            log_event(
                logger,
                logging.INFO,
                "crawl_step_completed",
                step=frontier.step,
                depth=depth,
                scraped=len(results),
                recorded=record,
                next_urls=len(frontier.urls),
            )

        log_event(
            logger,
            logging.INFO,
            "crawl_completed",
            apps_scraped=stats.apps_scraped,
            apps_with_emails=stats.apps_with_emails,
            apps_without_emails=stats.apps_without_emails,
            emails_found=stats.emails_found,
        )
        return stats

    async def iter_batches(self, urls: Sequence[str]) -> AsyncIterator[list[ScrapedRecord]]:
        """
        Yield scrape results one fixed-size batch at a time.

        Pages in a batch are scraped concurrently; a randomized delay follows
        every batch.
        """

        batch_size = max(1, self._settings.batch_size)
        batches = (len(urls) + batch_size - 1) // batch_size
        for index in range(batches):
            batch = urls[index * batch_size : (index + 1) * batch_size]
            log_event(
                logger,
                logging.INFO,
                "crawl_batch_started",
                batch=index + 1,
                batches=batches,
                pages=len(batch),
            )
            results = await asyncio.gather(*(self._scraper.scrape(url) for url in batch))
            yield list(results)
            await self._sleep(self._batch_delay())

    def _batch_delay(self) -> float:
        return (
            self._settings.batch_delay_seconds
            + random.random() * self._settings.batch_delay_jitter_seconds
        )

    @staticmethod
    def _report_degraded(batch: Sequence[ScrapedRecord]) -> None:
        for result in batch:
            if result.is_degraded:
                log_event(
                    logger,
                    logging.WARNING,
                    "page_degraded",
                    app_id=result.id,
                    page_url=result.url,
                )
