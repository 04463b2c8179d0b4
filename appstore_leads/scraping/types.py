"""
Shared crawl runtime data models.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType

from appstore_leads.scraping.urls import app_id_from_url, canonicalize_app_url


@dataclass(frozen=True)
class InAppPurchase:
    name: str
    price: str


@dataclass(frozen=True)
class ScrapedRecord:
    """
    Structured result for one App Store listing page.
    """

    id: str
    url: str
    title: str | None = None
    developer: str | None = None
    last_updated_date: date | None = None
    rating: str | None = None
    number_of_ratings: str | None = None
    website: str | None = None
    price: str | None = None
    in_app_purchases: tuple[InAppPurchase, ...] = ()
    category: str | None = None
    emails_by_url: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    other_apps: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Detach from the caller's mapping so the record stays read-only.
        emails_by_url = {source: tuple(emails) for source, emails in self.emails_by_url.items()}
        object.__setattr__(self, "emails_by_url", MappingProxyType(emails_by_url))
        object.__setattr__(self, "in_app_purchases", tuple(self.in_app_purchases))
        object.__setattr__(self, "other_apps", tuple(self.other_apps))

    @property
    def all_emails(self) -> tuple[str, ...]:
        """
        Deduplicated union of every source URL's emails, in discovery order.
        """

        merged: dict[str, None] = {}
        for emails in self.emails_by_url.values():
            merged.update(dict.fromkeys(emails))
        return tuple(merged)

    @property
    def is_degraded(self) -> bool:
        """
        True when nothing beyond id and url could be scraped.
        """

        return (
            self.title is None
            and self.developer is None
            and self.price is None
            and not self.emails_by_url
            and not self.other_apps
        )

    @classmethod
    def minimal(cls, url: str) -> "ScrapedRecord":
        return cls(id=app_id_from_url(url), url=url)


@dataclass(frozen=True)
class Frontier:
    """
    URLs still to scrape plus IDs that must never be scraped again.
    """

    urls: tuple[str, ...] = ()
    ignore_ids: frozenset[str] = frozenset()
    step: int = 0

    @classmethod
    def initial(cls, urls: Iterable[str], ignore_ids: Iterable[str]) -> "Frontier":
        ignored = frozenset(item.strip() for item in ignore_ids if item.strip())
        return cls(urls=_pending_urls(urls, ignored), ignore_ids=ignored)

    @property
    def exhausted(self) -> bool:
        return not self.urls

    def advance(self, results: Sequence[ScrapedRecord], *, depth: int) -> "Frontier":
        """
        Return the frontier for the next round after scraping `results`.

        Related apps are followed while the completed round count stays
        within `depth`; otherwise the returned frontier is empty.
        """

        ignored = self.ignore_ids | {app_id_from_url(result.url) for result in results}
        step = self.step + 1
        if step > depth:
            return Frontier(urls=(), ignore_ids=ignored, step=step)

        discovered = (url for result in results for url in result.other_apps)
        return Frontier(urls=_pending_urls(discovered, ignored), ignore_ids=ignored, step=step)


def _pending_urls(urls: Iterable[str], ignore_ids: frozenset[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    pending: list[str] = []
    for raw_url in urls:
        url = canonicalize_app_url(raw_url.strip())
        if not url:
            continue
        app_id = app_id_from_url(url)
        if app_id in ignore_ids or app_id in seen:
            continue
        seen.add(app_id)
        pending.append(url)
    return tuple(pending)


@dataclass(frozen=True)
class CrawlStats:
    """
    Running totals for one crawl.
    """

    apps_scraped: int = 0
    apps_with_emails: int = 0
    apps_without_emails: int = 0
    emails_found: int = 0

    def add(self, results: Sequence[ScrapedRecord]) -> "CrawlStats":
        with_emails = sum(1 for result in results if result.all_emails)
        return CrawlStats(
            apps_scraped=self.apps_scraped + len(results),
            apps_with_emails=self.apps_with_emails + with_emails,
            apps_without_emails=self.apps_without_emails + len(results) - with_emails,
            emails_found=self.emails_found + sum(len(result.all_emails) for result in results),
        )
