"""
Output sink contract for the crawl loop.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from appstore_leads.scraping.types import ScrapedRecord


class ResultStorage(ABC):
    """
    Receives each finished batch of scraped listings as soon as it completes.

    Implementations must tolerate repeated calls over one crawl; the crawl
    loop never buffers batches on their behalf.
    """

    @abstractmethod
    def store(self, records: Sequence[ScrapedRecord]) -> int:
        """
        Write one batch and report how many records were written.
        """
