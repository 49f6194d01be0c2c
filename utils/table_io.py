"""
Table decoding/encoding with pandas.
Supports delimited text (.csv, .tsv, .txt) and Excel (.xlsx, .xls); Excel reads all
sheets and concatenates them (same columns assumed).
"""
import csv
import io
import logging
import math
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from analytics.cells import format_number
from analytics.table import Table

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = (".xlsx", ".xls")

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

Source = Union[str, bytes, io.IOBase]


class TableParseError(ValueError):
    """The uploaded file could not be decoded into a table."""


def _typed(text: str) -> Any:
    """Dynamic typing of one text cell: '' -> None, numeric text -> int/float."""
    if text == "":
        return None
    s = text.strip()
    if _INT_RE.match(s):
        return int(s)
    if _FLOAT_RE.match(s):
        n = float(s)
        return n if math.isfinite(n) else text
    return text


def _serialize_value(v: Any) -> Any:
    """Convert NaN/NaT/pandas and numpy scalars to plain Python cell values."""
    if v is None:
        return None
    if v is pd.NaT:
        return None
    if isinstance(v, float) and math.isnan(v):
        return None
    if isinstance(v, pd.Timestamp):
        if v.hour == 0 and v.minute == 0 and v.second == 0 and v.microsecond == 0:
            return v.strftime("%Y-%m-%d")
        return v.isoformat()
    if hasattr(v, "item") and not isinstance(v, (str, bytes)):
        v = v.item()
        if isinstance(v, float) and math.isnan(v):
            return None
    if isinstance(v, (int, float, str)):
        return v
    return str(v)


def _to_buffer(data: Source) -> Any:
    if isinstance(data, bytes):
        return io.BytesIO(data)
    return data


def _table_from_frame(df: pd.DataFrame, typed_text: bool) -> Table:
    columns = [str(c) for c in df.columns]
    records: List[Dict[str, Any]] = []
    for row in df.itertuples(index=False, name=None):
        if typed_text:
            values = [_typed(v) if isinstance(v, str) else _serialize_value(v) for v in row]
        else:
            values = [_serialize_value(v) for v in row]
        records.append(dict(zip(columns, values)))
    return Table(columns=tuple(columns), records=tuple(records))


def parse_csv(data: Source, delimiter: str = ",") -> Table:
    """
    Parse delimited text into a Table. Header row required; blank lines skipped.
    Raises TableParseError when the text cannot be parsed or holds no rows.
    """
    try:
        df = pd.read_csv(
            _to_buffer(data),
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError, csv.Error) as e:
        logger.warning("table_parse_failed: kind=csv error=%s", e)
        raise TableParseError(f"Failed to parse CSV: {e}") from e
    if df.empty:
        raise TableParseError("CSV is empty or invalid.")
    table = _table_from_frame(df, typed_text=True)
    logger.info("table_parsed: kind=csv rows=%d columns=%d", len(table), len(table.columns))
    return table


def parse_excel(data: Source) -> Table:
    """Parse an Excel workbook (all sheets concatenated) into a Table."""
    try:
        xl = pd.ExcelFile(_to_buffer(data))
        sheets = xl.sheet_names
        if not sheets:
            raise TableParseError("Workbook has no sheets.")
        if len(sheets) == 1:
            df = pd.read_excel(xl, sheet_name=sheets[0])
        else:
            df = pd.concat([pd.read_excel(xl, sheet_name=s) for s in sheets], ignore_index=True)
    except TableParseError:
        raise
    except Exception as e:
        logger.warning("table_parse_failed: kind=excel error=%s", e)
        raise TableParseError(f"Failed to parse Excel file: {e}") from e
    df = df.dropna(how="all")
    if df.empty:
        raise TableParseError("Excel file is empty or invalid.")
    table = _table_from_frame(df, typed_text=False)
    logger.info("table_parsed: kind=excel sheets=%d rows=%d columns=%d", len(sheets), len(table), len(table.columns))
    return table


def parse_table(data: Source, filename: str = "") -> Table:
    """Dispatch on file extension: Excel for .xlsx/.xls, delimited text otherwise."""
    name = (filename or "").strip().lower()
    if name.endswith(EXCEL_EXTENSIONS):
        return parse_excel(data)
    if name.endswith(".tsv"):
        return parse_csv(data, delimiter="\t")
    return parse_csv(data)


def _export_value(v: Any) -> Any:
    if v is None:
        return None
    if isinstance(v, bool):
        return str(v).lower()
    if isinstance(v, (int, float)):
        return format_number(v) if math.isfinite(v) else None
    return v


def to_csv(table: Optional[Table]) -> str:
    """Serialize a Table back to CSV text (None -> empty cell, '\\n' line endings)."""
    if table is None or not table.columns:
        return ""
    rows = [[_export_value(r.get(c)) for c in table.columns] for r in table.records]
    df = pd.DataFrame(rows, columns=list(table.columns), dtype=object)
    return df.to_csv(index=False, lineterminator="\n", na_rep="")


def data_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"codelense-data-{int(now.timestamp() * 1000)}.csv"
