"""
Shared fixtures for crawler tests.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest
import requests
from bs4 import BeautifulSoup

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeResponse:
    def __init__(self, *, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text


class FakeSession:
    """
    Stand-in for `requests.Session` serving canned responses by URL.

    A mapped `Exception` instance is raised instead of returned; unknown URLs
    answer 404.
    """

    def __init__(self, responses: Mapping[str, FakeResponse | Exception]) -> None:
        self.responses = dict(responses)
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        response = self.responses.get(url, FakeResponse(status_code=404))
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture()
def app_page_html() -> str:
    return (FIXTURES_DIR / "app_page.html").read_text(encoding="utf-8")


@pytest.fixture()
def app_page_soup(app_page_html: str) -> BeautifulSoup:
    return BeautifulSoup(app_page_html, "html.parser")


@pytest.fixture()
def empty_soup() -> BeautifulSoup:
    return BeautifulSoup("<html><body><p>Nothing here</p></body></html>", "html.parser")


@pytest.fixture()
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")
