"""
Parsing layer exports.
"""

from appstore_leads.scraping.parsing.email_codec import decode_protected_email, encode_protected_email
from appstore_leads.scraping.parsing.emails import EmailHarvester
from appstore_leads.scraping.parsing.html_parsers import AppPageParsingLayer

__all__ = [
    "AppPageParsingLayer",
    "EmailHarvester",
    "decode_protected_email",
    "encode_protected_email",
]
