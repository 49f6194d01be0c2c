"""Integration tests for CSV / Excel decoding and CSV export."""

from __future__ import annotations

import io
from datetime import datetime, timezone

import pandas as pd
import pytest

from analytics.table import Table
from utils.table_io import TableParseError, data_filename, parse_csv, parse_excel, parse_table, to_csv

pytestmark = pytest.mark.integration


def _workbook(*frames: pd.DataFrame) -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for i, df in enumerate(frames):
            df.to_excel(writer, sheet_name=f"Sheet{i + 1}", index=False)
    return buf.getvalue()


def test_parse_csv_types_cells() -> None:
    """Numeric text becomes numbers, empty cells None, other text stays text."""

    table = parse_csv(b"name,amount,code\nA,10,007x\nB,2.5,\n\nC,,x\n")
    assert table.columns == ("name", "amount", "code")
    assert len(table) == 3
    assert table.records[0] == {"name": "A", "amount": 10, "code": "007x"}
    assert table.records[1]["amount"] == 2.5
    assert table.records[1]["code"] is None
    assert table.records[2]["amount"] is None


def test_parse_csv_quoted_fields() -> None:
    """Quoted delimiters stay inside the field."""

    table = parse_csv(b'city,note\n"Paris, FR","said ""hi"""\n')
    assert table.records[0] == {"city": "Paris, FR", "note": 'said "hi"'}


@pytest.mark.parametrize("data", [b"", b"a,b\n"])
def test_parse_csv_empty_raises(data: bytes) -> None:
    """No rows is an ingestion error."""

    with pytest.raises(TableParseError):
        parse_csv(data)


def test_parse_csv_malformed_raises() -> None:
    """Rows with too many fields cannot be parsed."""

    with pytest.raises(TableParseError):
        parse_csv(b"a,b\n1,2\n3,4,5,6\n")


def test_parse_table_dispatches_on_extension() -> None:
    """.tsv uses tabs; other text extensions use commas."""

    assert parse_table(b"a\tb\n1\tx\n", "data.tsv").records[0] == {"a": 1, "b": "x"}
    assert parse_table(b"a,b\n1,x\n", "data.CSV").records[0] == {"a": 1, "b": "x"}


def test_parse_excel_concatenates_sheets() -> None:
    """Every sheet is read and appended."""

    data = _workbook(
        pd.DataFrame({"region": ["North", "South"], "amount": [10, 20]}),
        pd.DataFrame({"region": ["East"], "amount": [1.5]}),
    )
    table = parse_table(data, "book.xlsx")
    assert table.columns == ("region", "amount")
    assert [r["region"] for r in table] == ["North", "South", "East"]
    assert table.records[0]["amount"] == 10
    assert table.records[2]["amount"] == 1.5


def test_parse_excel_missing_cells_are_none() -> None:
    """NaN cells decode to None."""

    data = _workbook(pd.DataFrame({"a": [1, None], "b": ["x", "y"]}))
    table = parse_excel(data)
    assert table.records[1]["a"] is None


def test_parse_excel_invalid_bytes_raise() -> None:
    """Bytes that are not a workbook raise TableParseError."""

    with pytest.raises(TableParseError):
        parse_excel(b"definitely not a workbook")


def test_to_csv_serialises_cells() -> None:
    """None becomes an empty cell and integral numbers drop the decimal point."""

    table = Table.from_records([{"a": 1.0, "b": None}, {"a": 2.5, "b": "x, y"}])
    assert to_csv(table) == 'a,b\n1,\n2.5,"x, y"\n'


def test_to_csv_round_trip() -> None:
    """Exported CSV parses back to the same records."""

    table = parse_csv(b"name,amount\nA,10\nB,2.5\nC,\n")
    assert parse_csv(to_csv(table).encode()).records == table.records


def test_to_csv_empty() -> None:
    """No table, no text."""

    assert to_csv(None) == ""
    assert to_csv(Table()) == ""


def test_data_filename_uses_epoch_millis() -> None:
    """Raw data exports are named by epoch milliseconds."""

    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert data_filename(now) == "codelense-data-1704067200000.csv"


def test_to_csv_normalises_numeric_text() -> None:
    """Numeric text is typed on import, so export drops padding zeros but keeps the value."""

    table = parse_csv(b"item,price,code\na,19.90,007\nb,2.5,12\n")
    assert table.records[0]["price"] == 19.9
    assert to_csv(table) == "item,price,code\na,19.9,7\nb,2.5,12\n"
