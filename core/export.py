"""
Export
Spreadsheet views of finalized codeframes and coded responses
"""

import io
import logging
from typing import Dict, List, Mapping, Sequence

import pandas as pd

from errors import InvalidStateTransitionError
from .models import Codeframe, CodedResponse

logger = logging.getLogger(__name__)

CODEFRAME_COLUMNS = [
    "Code_ID", "Numeric", "Label", "Definition", "Examples", "Parent_Code",
    "Is_Parent", "Is_Alias", "Percentage", "Question_Group", "Question_Type", "Date_Modified",
]
RESPONSE_COLUMNS = ["Question_Group", "Row", "Column", "Response"]


def _finalized(codeframes: Sequence[Codeframe]) -> List[Codeframe]:
    finalized = [cf for cf in codeframes if cf.is_finalized]
    if not finalized:
        raise InvalidStateTransitionError("No finalized codeframes to export")
    skipped = len(codeframes) - len(finalized)
    if skipped:
        logger.info("Skipping %d codeframes that are not finalized", skipped)
    return finalized


def codeframe_sheet(codeframes: Sequence[Codeframe]) -> pd.DataFrame:
    """One row per code across every finalized codeframe"""
    rows = []
    for cf in _finalized(codeframes):
        modified = (cf.finalized_at or cf.generated_at).isoformat()
        for entry in cf.entries:
            rows.append({
                "Code_ID": entry.code,
                "Numeric": entry.numeric,
                "Label": entry.label,
                "Definition": entry.definition,
                "Examples": "; ".join(entry.examples),
                "Parent_Code": entry.parent_code or "",
                "Is_Parent": entry.is_parent,
                "Is_Alias": entry.is_alias,
                "Percentage": entry.percentage,
                "Question_Group": cf.group_name,
                "Question_Type": cf.question_type,
                "Date_Modified": modified,
            })
    return pd.DataFrame(rows, columns=CODEFRAME_COLUMNS)


def coded_responses_sheet(
    codeframes: Sequence[Codeframe],
    coded: Mapping[str, Sequence[CodedResponse]]
) -> pd.DataFrame:
    """
    One row per coded response with a 0/1 column per code.

    Args:
        codeframes: Codeframes; only finalized ones are exported
        coded: Coded responses keyed by group id
    """
    finalized = _finalized(codeframes)

    code_columns: List[str] = []
    for cf in finalized:
        for code in cf.codes():
            if code not in code_columns:
                code_columns.append(code)

    rows = []
    for cf in finalized:
        for response in coded.get(cf.group_id, []):
            assigned = set(response.codes_assigned)
            row: Dict[str, object] = {
                "Question_Group": cf.group_name,
                "Row": response.row_index,
                "Column": response.column_name or "",
                "Response": response.response_text,
            }
            for code in code_columns:
                row[code] = 1 if code in assigned else 0
            rows.append(row)

    return pd.DataFrame(rows, columns=RESPONSE_COLUMNS + code_columns)


def export_workbook(
    codeframes: Sequence[Codeframe],
    coded: Mapping[str, Sequence[CodedResponse]]
) -> bytes:
    """Codeframe and Coded_Responses sheets as XLSX bytes"""
    frames = codeframe_sheet(codeframes)
    responses = coded_responses_sheet(codeframes, coded)

    excel_buffer = io.BytesIO()
    with pd.ExcelWriter(excel_buffer, engine="openpyxl") as writer:
        frames.to_excel(writer, sheet_name="Codeframe", index=False)
        responses.to_excel(writer, sheet_name="Coded_Responses", index=False)
    excel_buffer.seek(0)
    return excel_buffer.getvalue()


def to_csv_bytes(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")
