"""
Storage layer exports.
"""

from appstore_leads.scraping.storage.base import ResultStorage
from appstore_leads.scraping.storage.csv_storage import CSVResultStorage, read_first_column

__all__ = ["CSVResultStorage", "ResultStorage", "read_first_column"]
