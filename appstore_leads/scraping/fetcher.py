"""
HTTP page retrieval that fails soft.
"""

from __future__ import annotations

import asyncio

import requests

from appstore_leads.config import DEFAULT_USER_AGENT


class PageFetcher:
    """
    Fetches page HTML with a desktop browser identity.

    Any network error or non-2xx response is reported as None so callers
    can degrade instead of aborting. No retries happen at this layer.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_seconds: float = 15.0,
    ) -> None:
        self.session = session or requests.Session()
        self.request_headers = {"User-Agent": user_agent}
        self.timeout_seconds = timeout_seconds

    async def fetch(self, url: str) -> str | None:
        return await asyncio.to_thread(self.fetch_sync, url)

    def fetch_sync(self, url: str) -> str | None:
        try:
            response = self.session.get(
                url,
                headers=self.request_headers,
                timeout=self.timeout_seconds,
                allow_redirects=True,
            )
        except requests.RequestException:
            return None
        if not 200 <= response.status_code < 300:
            return None
        return response.text
