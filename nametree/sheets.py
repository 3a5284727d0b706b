"""Spreadsheet adapter: a shared Google Sheet or CSV export to input lines.

The sheet supplies one full name per row plus optional dates and a picture.
Names become descent lines for the resolver; the remaining columns become
metadata merged onto the resolved people afterwards.
"""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import MissingDataSourceError
from .http import HTTPClient, HTTPError
from .resolver import normalize_name
from .utils import logger

SHEET_ID_PATTERN = re.compile(r"/d/([a-zA-Z0-9-_]+)")
GID_PATTERN = re.compile(r"gid=(\d+)")
CSV_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv&id={sheet_id}&gid={gid}"

COLUMNS = {
    "full_name": "full names",
    "birth_date": "birth date",
    "end_date": "end date",
    "picture_url": "person picture",
    "root_name": "root name",
}


@dataclass
class SheetRow:
    full_name: str
    birth_date: Optional[str] = None
    end_date: Optional[str] = None
    picture_url: Optional[str] = None
    root_name: Optional[str] = None


@dataclass
class SheetImport:
    rows: List[SheetRow] = field(default_factory=list)

    @property
    def lines(self) -> List[str]:
        return [row.full_name for row in self.rows]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def metadata(self) -> Dict[str, Dict[str, Optional[str]]]:
        # Root names are recomputed by the resolver, never taken from the sheet.
        return {
            row.full_name: {
                "birth_date": row.birth_date,
                "end_date": row.end_date,
                "picture_url": row.picture_url,
            }
            for row in self.rows
        }


def is_sheet_url(text: str) -> bool:
    text = text.strip()
    return text.startswith("http") and "docs.google.com" in text


def sheet_csv_url(url: str) -> str:
    sheet_match = SHEET_ID_PATTERN.search(url)
    if not sheet_match:
        return url
    gid_match = GID_PATTERN.search(url)
    gid = gid_match.group(1) if gid_match else "0"
    return CSV_EXPORT_URL.format(sheet_id=sheet_match.group(1), gid=gid)


def parse_sheet_csv(text: str, source: str = "<csv>") -> List[SheetRow]:
    reader = (cols for cols in csv.reader(io.StringIO(text)) if any(col.strip() for col in cols))
    header_row = next(reader, None)
    if header_row is None:
        return []
    headers = [header.strip().lower() for header in header_row]
    index = {key: headers.index(label) for key, label in COLUMNS.items() if label in headers}
    if "full_name" not in index:
        raise MissingDataSourceError(source, "no 'Full Names' column")

    def cell(cols: List[str], key: str) -> Optional[str]:
        position = index.get(key)
        if position is None or position >= len(cols):
            return None
        value = cols[position].strip()
        if key == "full_name":
            value = normalize_name(value)
        return value or None

    rows: List[SheetRow] = []
    for cols in reader:
        full_name = cell(cols, "full_name")
        if not full_name:
            continue
        rows.append(
            SheetRow(
                full_name=full_name,
                birth_date=cell(cols, "birth_date"),
                end_date=cell(cols, "end_date"),
                root_name=cell(cols, "root_name"),
            )
        )
    return rows


class SheetClient:
    def __init__(self, http: HTTPClient) -> None:
        self.http = http

    def fetch(self, url: str) -> SheetImport:
        csv_url = sheet_csv_url(url)
        logger.info("Fetching sheet %s", csv_url)
        try:
            text = self.http.get_text(csv_url)
        except HTTPError as exc:
            raise MissingDataSourceError(url, str(exc)) from exc
        return SheetImport(rows=parse_sheet_csv(text, source=url))


def read_csv_file(path: str) -> SheetImport:
    try:
        with open(path, "r", encoding="utf-8", newline="") as fh:
            text = fh.read()
    except OSError as exc:
        raise MissingDataSourceError(path, str(exc)) from exc
    return SheetImport(rows=parse_sheet_csv(text, source=path))


__all__ = [
    "SheetClient",
    "SheetImport",
    "SheetRow",
    "is_sheet_url",
    "parse_sheet_csv",
    "read_csv_file",
    "sheet_csv_url",
]
