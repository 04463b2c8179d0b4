"""
Per-page App Store scrape orchestration.
"""

from __future__ import annotations

import logging
from typing import Any

from bs4 import BeautifulSoup

from appstore_leads.scraping.fetcher import PageFetcher
from appstore_leads.scraping.logging_utils import log_event
from appstore_leads.scraping.parsing import AppPageParsingLayer, EmailHarvester
from appstore_leads.scraping.types import ScrapedRecord
from appstore_leads.scraping.urls import app_id_from_url

logger = logging.getLogger(__name__)

HTML_PARSER = "html.parser"


class AppPageScraper:
    """
    Scrapes one listing page plus the developer pages it links to.

    `scrape` never raises: a page that cannot be fetched or parsed comes
    back as a record carrying only its id and url.
    """

    def __init__(
        self,
        *,
        fetcher: PageFetcher,
        parser: type[AppPageParsingLayer] = AppPageParsingLayer,
        harvester: type[EmailHarvester] = EmailHarvester,
    ) -> None:
        self.fetcher = fetcher
        self.parser = parser
        self.harvester = harvester

    async def scrape(self, url: str) -> ScrapedRecord:
        raw_html = await self._fetch(url)
        if not raw_html:
            return ScrapedRecord.minimal(url)

        try:
            soup = BeautifulSoup(raw_html, HTML_PARSER)
            fields = self._extract(url=url, soup=soup)
            page_emails = self.harvester.harvest(soup)
            links = self.parser.links(soup)
        except Exception as exc:
            log_event(
                logger,
                logging.WARNING,
                "page_parse_failed",
                page_url=url,
                error=str(exc),
            )
            return ScrapedRecord.minimal(url)

        emails_by_url = {url: page_emails}
        for link in links:
            emails_by_url[link] = await self.emails_from_url(link)

        return ScrapedRecord(**fields, emails_by_url=emails_by_url)

    async def emails_from_url(self, url: str) -> tuple[str, ...]:
        raw_html = await self._fetch(url)
        if not raw_html:
            return ()
        try:
            return self.harvester.harvest(BeautifulSoup(raw_html, HTML_PARSER))
        except Exception as exc:
            log_event(
                logger,
                logging.WARNING,
                "linked_page_parse_failed",
                page_url=url,
                error=str(exc),
            )
            return ()

    async def _fetch(self, url: str) -> str | None:
        try:
            return await self.fetcher.fetch(url)
        except Exception as exc:
            log_event(
                logger,
                logging.WARNING,
                "page_fetch_failed",
                page_url=url,
                error=str(exc),
            )
            return None

    def _extract(self, *, url: str, soup: BeautifulSoup) -> dict[str, Any]:
        parser = self.parser
        return {
            "id": app_id_from_url(url),
            "url": url,
            "title": parser.title(soup),
            "developer": parser.developer(soup),
            "last_updated_date": parser.last_updated_date(soup),
            "rating": parser.rating(soup),
            "number_of_ratings": parser.number_of_ratings(soup),
            "website": parser.website(soup),
            "price": parser.price(soup),
            "in_app_purchases": parser.in_app_purchases(soup),
            "category": parser.category(soup),
            "other_apps": parser.other_apps(soup),
        }
