"""
App Store URL helpers.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

APP_STORE_PREFIX = "https://apps.apple.com/"
DEFAULT_REGION = "us"

_REGION_SEGMENT = re.compile(r"^[a-z]{2}$", flags=re.IGNORECASE)


def app_id_from_url(url: str) -> str:
    """
    Return the trailing path segment of `url`, e.g. `id123456789`.

    Query string and fragment are ignored, as is a trailing slash.
    """

    path = url.split("?", 1)[0].split("#", 1)[0].rstrip("/")
    return path.rsplit("/", 1)[-1]


def canonicalize_app_url(url: str) -> str:
    """
    Rewrite an App Store URL to the US storefront.

    `https://apps.apple.com/gb/app/x/id1` becomes
    `https://apps.apple.com/us/app/x/id1`. URLs without a region segment get
    one inserted; anything outside apps.apple.com is returned untouched.
    """

    if not url.startswith(APP_STORE_PREFIX):
        return url

    remainder = url[len(APP_STORE_PREFIX) :]
    region, separator, rest = remainder.partition("/")
    if region == DEFAULT_REGION:
        return url
    if _REGION_SEGMENT.match(region) and separator:
        return f"{APP_STORE_PREFIX}{DEFAULT_REGION}/{rest}"
    if region == "app":
        return f"{APP_STORE_PREFIX}{DEFAULT_REGION}/{remainder}"
    return url


def canonicalize_app_urls(urls: Iterable[str]) -> list[str]:
    return [canonicalize_app_url(url) for url in urls]
