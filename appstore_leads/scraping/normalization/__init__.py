"""
Text normalization exports.
"""

from appstore_leads.scraping.normalization.text import clean_text

__all__ = ["clean_text"]
