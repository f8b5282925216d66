"""
Code Coverage
Share of coded responses carrying each code
"""

from dataclasses import replace
from typing import Dict, Sequence

from core.models import Codeframe, CodedResponse


def code_counts(coded_responses: Sequence[CodedResponse]) -> Dict[str, int]:
    """Number of responses each code was assigned to"""
    counts: Dict[str, int] = {}
    for response in coded_responses:
        for code in set(response.codes_assigned):
            counts[code] = counts.get(code, 0) + 1
    return counts


def compute_coverage(codeframe: Codeframe, coded_responses: Sequence[CodedResponse]) -> Codeframe:
    """Return a copy of the codeframe with each entry's percentage (0-100, one decimal) filled in"""
    total = len(coded_responses)
    counts = code_counts(coded_responses)
    entries = [
        replace(entry, percentage=round(counts.get(entry.code, 0) * 100.0 / total, 1) if total else 0.0)
        for entry in codeframe.entries
    ]
    return codeframe.with_entries(entries)
