"""
Append-only CSV storage for scraped listings, plus the CSV input reader.
"""

from __future__ import annotations

import csv
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from appstore_leads.scraping.storage.base import ResultStorage
from appstore_leads.scraping.types import ScrapedRecord

BASE_HEADERS = [
    "ID",
    "URL",
    "App Name",
    "Developer",
    "Last updated",
    "Rating",
    "Ratings count",
    "Website",
    "Price",
    "IAPs",
    "Category",
]


def read_first_column(csv_path: str | Path) -> list[str]:
    """
    Return the trimmed, non-empty first cell of every row.

    A missing file reads as an empty list.
    """

    path = Path(csv_path)
    if not path.exists():
        return []

    values: list[str] = []
    with path.open(newline="", encoding="utf-8-sig") as handle:
        for row in csv.reader(handle):
            if not row:
                continue
            value = row[0].strip()
            if value:
                values.append(value)
    return values


class CSVResultStorage(ResultStorage):
    """
    Routes each record to a found-emails or no-emails file for the run date.

    The output format has no escaping contract, so commas inside cells are
    replaced with spaces before writing.
    """

    def __init__(
        self,
        *,
        output_dir: str | Path,
        run_date: date | None = None,
        email_columns: int = 10,
    ) -> None:
        stamp = (run_date or date.today()).isoformat()
        self.output_dir = Path(output_dir)
        self.email_columns = max(1, email_columns)
        self.emails_path = self.output_dir / f"found-emails {stamp}.csv"
        self.no_emails_path = self.output_dir / f"no-emails {stamp}.csv"

    @property
    def headers(self) -> list[str]:
        return [*BASE_HEADERS, *(f"Email {index}" for index in range(1, self.email_columns + 1))]

    def store(self, records: Sequence[ScrapedRecord]) -> int:
        with_emails = [record for record in records if record.all_emails]
        without_emails = [record for record in records if not record.all_emails]
        written = self._append(self.emails_path, with_emails)
        written += self._append(self.no_emails_path, without_emails)
        return written

    def to_row(self, record: ScrapedRecord) -> list[str]:
        emails = list(record.all_emails[: self.email_columns])
        emails.extend([""] * (self.email_columns - len(emails)))
        cells = [
            record.id,
            record.url,
            record.title,
            record.developer,
            record.last_updated_date.isoformat() if record.last_updated_date else None,
            record.rating,
            record.number_of_ratings,
            record.website,
            record.price,
            "Yes" if record.in_app_purchases else "No",
            record.category,
            *emails,
        ]
        return [_cell(value) for value in cells]

    def _append(self, path: Path, records: Sequence[ScrapedRecord]) -> int:
        if not records:
            return 0

        path.parent.mkdir(parents=True, exist_ok=True)
        needs_header = not _has_header(path)
        with path.open("a", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            if needs_header:
                writer.writerow(self.headers)
            writer.writerows(self.to_row(record) for record in records)
        return len(records)


def _cell(value: str | None) -> str:
    if value is None:
        return ""
    return value.replace(",", " ")


def _has_header(path: Path) -> bool:
    if not path.exists():
        return False
    with path.open(encoding="utf-8") as handle:
        return bool(handle.readline().strip())
