"""
BeautifulSoup-based field extraction for App Store listing pages.
"""

from __future__ import annotations

import copy
import json
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from bs4 import BeautifulSoup, Tag

from appstore_leads.scraping.normalization import clean_text
from appstore_leads.scraping.types import InAppPurchase

EXTENSION_LINKS_SELECTOR = "ul.inline-list.inline-list--app-extensions > li > a"
RATING_CAPTION_SELECTOR = "figcaption.we-rating-count"
IAP_ROWS_SELECTOR = 'dd.information-list__item__definition > ol[role="table"] > div > li'
RELATED_APPS_SHELF = "shelfCustomersAlsoBoughtApps"
COUNT_MULTIPLIERS = {"K": Decimal(1_000), "M": Decimal(1_000_000)}
NUMERIC_PREFIX = re.compile(r"\d+(?:\.\d+)?")


class AppPageParsingLayer:
    """
    Independent extraction rules, one per listing attribute.

    Every rule tolerates missing markup and returns None or an empty tuple.
    """

    @staticmethod
    def title(soup: BeautifulSoup) -> str | None:
        heading = soup.find("h1")
        if heading is None:
            return None
        # Badges such as "4+" live in nested spans; strip them on a copy.
        heading = copy.copy(heading)
        for badge in heading.find_all("span"):
            badge.decompose()
        return clean_text(heading)

    @staticmethod
    def developer(soup: BeautifulSoup) -> str | None:
        return clean_text(soup.select_one("h2.product-header__identity > a"))

    @classmethod
    def website(cls, soup: BeautifulSoup) -> str | None:
        for link in soup.select(EXTENSION_LINKS_SELECTOR):
            metrics = cls._metrics_payload(link, "data-metrics-click")
            action = metrics.get("actionDetails")
            if isinstance(action, dict) and action.get("type") == "developer":
                return cls._href(link)
        return None

    @classmethod
    def links(cls, soup: BeautifulSoup) -> tuple[str, ...]:
        hrefs = (cls._href(link) for link in soup.select(EXTENSION_LINKS_SELECTOR))
        return tuple(href for href in hrefs if href)

    @staticmethod
    def rating(soup: BeautifulSoup) -> str | None:
        caption = clean_text(soup.select_one(RATING_CAPTION_SELECTOR))
        if not caption:
            return None
        return caption.replace(",", ".").split(" ")[0].strip()

    @classmethod
    def number_of_ratings(cls, soup: BeautifulSoup) -> str | None:
        caption = clean_text(soup.select_one(RATING_CAPTION_SELECTOR))
        if not caption:
            return None
        tokens = caption.split(" ")
        if len(tokens) < 3:
            return None
        return cls._expand_count(tokens[1])

    @staticmethod
    def last_updated_date(soup: BeautifulSoup) -> date | None:
        for element in soup.find_all("time"):
            if "class" not in element.attrs or "".join(element.get("class") or []).strip():
                continue
            raw = element.get("datetime")
            if not isinstance(raw, str) or len(raw) < 10:
                return None
            try:
                return date.fromisoformat(raw[:10])
            except ValueError:
                return None
        return None

    @classmethod
    def other_apps(cls, soup: BeautifulSoup) -> tuple[str, ...]:
        urls: list[str] = []
        for anchor in soup.select("a[href^='https://apps.apple.com/']"):
            location = cls._metrics_payload(anchor, "data-metrics-location")
            if location.get("locationType") != RELATED_APPS_SHELF:
                continue
            href = cls._href(anchor)
            if href:
                urls.append(href)
        return tuple(urls)

    @classmethod
    def category(cls, soup: BeautifulSoup) -> str | None:
        for link in soup.select("a.link"):
            if cls._metrics_payload(link, "data-metrics-click").get("targetId") == "GenrePage":
                return clean_text(link)
        return None

    @staticmethod
    def price(soup: BeautifulSoup) -> str | None:
        return clean_text(soup.select_one("li.app-header__list__item--price"))

    @staticmethod
    def in_app_purchases(soup: BeautifulSoup) -> tuple[InAppPurchase, ...]:
        purchases: list[InAppPurchase] = []
        for row in soup.select(IAP_ROWS_SELECTOR):
            spans = row.find_all("span")[-2:]
            if len(spans) < 2:
                continue
            name = clean_text(spans[0])
            price = clean_text(spans[1])
            if not name or not price:
                continue
            purchases.append(InAppPurchase(name=name, price=price))
        return tuple(purchases)

    @staticmethod
    def _metrics_payload(element: Tag, attribute: str) -> dict[str, Any]:
        raw = element.get(attribute)
        if not isinstance(raw, str) or not raw:
            return {}
        try:
            payload = json.loads(raw)
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}

    @staticmethod
    def _href(element: Tag) -> str | None:
        href = element.get("href")
        if not isinstance(href, str):
            return None
        return href.strip() or None

    @staticmethod
    def _expand_count(token: str) -> str | None:
        """
        Turn "1.2K" into "1200" and "2M" into "2000000".

        With a suffix a comma is a decimal separator ("1,2K"); without one it
        separates thousands ("1,234").
        """

        suffix = token[-1:].upper()
        multiplier = COUNT_MULTIPLIERS.get(suffix)
        if multiplier is None:
            plain = token.replace(",", "")
            return plain if plain.isdigit() else None

        match = NUMERIC_PREFIX.match(token[:-1].replace(",", "."))
        if match is None:
            return None
        try:
            expanded = Decimal(match.group(0)) * multiplier
        except InvalidOperation:
            return None
        return str(int(expanded))
