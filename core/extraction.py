"""
Response Extraction
Pull cleaned per-respondent answers for a question group out of a raw table
"""

import math
from typing import Iterable, List, Sequence, Tuple

import pandas as pd

from config import RESPONSE_SEPARATOR
from .models import CellValue, RawTable


def clean_cell(value: CellValue) -> str:
    """Render a cell as trimmed text; empty string for blank/None/NaN cells"""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def extract_rows(
    table: RawTable,
    column_indices: Iterable[int],
    separator: str = RESPONSE_SEPARATOR
) -> List[Tuple[int, str]]:
    """
    Build one response per respondent row from the selected columns.

    Row 0 is the header and is skipped. Non-empty cells of a row are joined
    with ``separator``; rows with no non-empty cell are dropped.

    Returns:
        List of (row_index, response_text) in table order
    """
    columns = list(column_indices)
    rows = []
    for row_index in range(1, len(table)):
        row = table[row_index] or []
        parts = []
        for col in columns:
            if col < 0 or col >= len(row):
                continue
            text = clean_cell(row[col])
            if text:
                parts.append(text)
        if parts:
            rows.append((row_index, separator.join(parts)))
    return rows


def extract_responses(
    table: RawTable,
    column_indices: Iterable[int],
    separator: str = RESPONSE_SEPARATOR
) -> List[str]:
    """Response texts only, in table order"""
    return [text for _, text in extract_rows(table, column_indices, separator)]


def column_names(table: RawTable, column_indices: Sequence[int]) -> List[str]:
    """Header labels for the given columns (falls back to 'Column N')"""
    header = table[0] if table else []
    names = []
    for col in column_indices:
        name = clean_cell(header[col]) if 0 <= col < len(header) else ""
        names.append(name or f"Column {col + 1}")
    return names


def table_from_dataframe(df: pd.DataFrame) -> RawTable:
    """Convert a DataFrame into the raw table shape (header row first)"""
    header = [str(c) for c in df.columns]
    body = df.astype(object).where(pd.notna(df), None).values.tolist()
    return [header] + body
