import pytest

from nametree.api import generate_tree
from nametree.errors import MissingDataSourceError
from nametree.http import HTTPClient, HTTPError
from nametree.sheets import SheetClient, SheetImport, is_sheet_url, parse_sheet_csv, read_csv_file, sheet_csv_url

SHEET_URL = "https://docs.google.com/spreadsheets/d/abc123/edit#gid=42"
CSV_TEXT = (
    "Full Names,Birth Date,End Date,Root Name\n"
    "John Smith,01-01-1950,,Smith\n"
    ",,,\n"
    "Sarah John Smith,02-03-1980,,Smith\n"
)


class DummyHTTP(HTTPClient):
    def __init__(self, payload=None, error=None):
        super().__init__(session=object())
        self.payload = payload
        self.error = error
        self.urls = []

    def get_text(self, url, params=None, headers=None):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.payload


def test_sheet_csv_url():
    assert sheet_csv_url(SHEET_URL) == (
        "https://docs.google.com/spreadsheets/d/abc123/export?format=csv&id=abc123&gid=42"
    )
    assert sheet_csv_url("https://docs.google.com/spreadsheets/d/abc123/edit").endswith("gid=0")
    assert sheet_csv_url("https://example.com/no-id") == "https://example.com/no-id"


def test_is_sheet_url():
    assert is_sheet_url("  " + SHEET_URL)
    assert not is_sheet_url("John Smith + Mary Jones")
    assert not is_sheet_url("https://example.com/family.csv")


def test_parse_sheet_csv_rows():
    rows = parse_sheet_csv(CSV_TEXT)
    assert [row.full_name for row in rows] == ["John Smith", "Sarah John Smith"]
    assert rows[0].birth_date == "01-01-1950"
    assert rows[0].end_date is None
    assert rows[0].root_name == "Smith"
    assert rows[0].picture_url is None


def test_parse_sheet_csv_requires_name_column():
    with pytest.raises(MissingDataSourceError):
        parse_sheet_csv("Name,Birth Date\nJohn Smith,01-01-1950\n", source="upload.csv")
    assert parse_sheet_csv("") == []


def test_sheet_client_fetches_export():
    http = DummyHTTP(payload=CSV_TEXT)
    sheet = SheetClient(http).fetch(SHEET_URL)
    assert http.urls == [sheet_csv_url(SHEET_URL)]
    assert sheet.text == "John Smith\nSarah John Smith"
    metadata = sheet.metadata()
    assert metadata["John Smith"] == {"birth_date": "01-01-1950", "end_date": None, "picture_url": None}
    assert "root_name" not in metadata["John Smith"]


def test_sheet_client_wraps_http_errors():
    client = SheetClient(DummyHTTP(error=HTTPError("Request failed with status 403")))
    with pytest.raises(MissingDataSourceError) as excinfo:
        client.fetch(SHEET_URL)
    assert excinfo.value.source == SHEET_URL


def test_read_csv_file(tmp_path):
    path = tmp_path / "family.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    assert read_csv_file(str(path)).lines == ["John Smith", "Sarah John Smith"]
    with pytest.raises(MissingDataSourceError):
        read_csv_file(str(tmp_path / "missing.csv"))


def test_sheet_names_are_normalized_like_input_lines():
    rows = parse_sheet_csv("Full Names,Birth Date\n  John   Smith ,01-01-1950\n")
    assert rows[0].full_name == "John Smith"
    sheet = SheetImport(rows=rows)
    result = generate_tree(sheet.text, metadata=sheet.metadata())
    assert result.people["John Smith"].birth_date == "01-01-1950"
