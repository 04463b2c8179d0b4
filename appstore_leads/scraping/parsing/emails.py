"""
Email discovery on a single parsed page.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

from bs4 import BeautifulSoup

from appstore_leads.scraping.parsing.email_codec import decode_protected_email

EMAIL_REGEX = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
TEXT_ELEMENTS = "span, p, div, li, h1, h2, h3, h4, h5, h6, dd, dt, a"
PROTECTION_PATH = "/cdn-cgi/l/email-protection"


class EmailHarvester:
    """
    Collects addresses from mailto anchors, protected anchors and free text.
    """

    @classmethod
    def harvest(cls, soup: BeautifulSoup) -> tuple[str, ...]:
        """
        Return unique, trimmed addresses found on the page in discovery order.
        """

        found = [*cls.from_anchors(soup), *cls.from_text(soup)]
        return cls._dedupe(found)

    @classmethod
    def from_anchors(cls, soup: BeautifulSoup) -> tuple[str, ...]:
        return cls._dedupe([*cls._mailto(soup), *cls._protected(soup)])

    @classmethod
    def from_text(cls, soup: BeautifulSoup) -> tuple[str, ...]:
        matches: list[str] = []
        for element in soup.select(TEXT_ELEMENTS):
            text = element.get_text()
            if text:
                matches.extend(EMAIL_REGEX.findall(text))
        return cls._dedupe(matches)

    @staticmethod
    def _mailto(soup: BeautifulSoup) -> Iterator[str]:
        for anchor in soup.select("a[href^='mailto:']"):
            href = anchor.get("href")
            if isinstance(href, str):
                yield _strip_query(href.replace("mailto:", "", 1))

    @staticmethod
    def _protected(soup: BeautifulSoup) -> Iterator[str]:
        # Older markup carries the payload in the href fragment.
        for anchor in soup.select(f"a[href^='{PROTECTION_PATH}#']"):
            href = anchor.get("href")
            if isinstance(href, str):
                encoded = href.replace(f"{PROTECTION_PATH}#", "", 1)
                yield _strip_query(decode_protected_email(encoded))

        for anchor in soup.select(f"a[href^='{PROTECTION_PATH}']"):
            encoded = anchor.get("data-cfemail")
            if isinstance(encoded, str):
                yield _strip_query(decode_protected_email(encoded))

    @staticmethod
    def _dedupe(emails: Iterable[str]) -> tuple[str, ...]:
        unique = dict.fromkeys(email.strip() for email in emails)
        unique.pop("", None)
        return tuple(unique)


def _strip_query(value: str) -> str:
    return value.split("?", 1)[0].strip()
