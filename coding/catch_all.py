"""
Catch-all Codes
Make sure every codeframe carries Other, None/Nothing and Don't Know codes
"""

import logging
import re
from dataclasses import dataclass
from typing import FrozenSet, List, Optional

from core.models import Codeframe, CodeframeEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatchAllCategory:
    """A baseline code every finalized codeframe must contain"""
    key: str
    code: str
    label: str
    definition: str
    matches: FrozenSet[str]  # normalized labels that satisfy this category


CATCH_ALL_CATEGORIES = [
    CatchAllCategory(
        key="other",
        code="OTHER",
        label="Other",
        definition="Responses that do not fit any other code",
        matches=frozenset({"other", "others", "othermentions", "otherresponses"}),
    ),
    CatchAllCategory(
        key="none",
        code="NONE",
        label="None/Nothing",
        definition="Respondent states there is nothing or none",
        matches=frozenset({"none", "nothing", "nonenothing", "nothingnone"}),
    ),
    CatchAllCategory(
        key="dont_know",
        code="DK_NA",
        label="Don't Know",
        definition="Respondent does not know, is unsure, or gives no applicable answer",
        matches=frozenset({
            "dontknow", "donotknow", "idontknow", "dk", "na", "dkna",
            "dontknowna", "notsure", "notapplicable",
        }),
    ),
]


def normalize_label(label: str) -> str:
    """Lowercase and strip everything but letters and digits ("Don't Know" -> "dontknow")"""
    return re.sub(r"[^a-z0-9]", "", (label or "").lower())


def catch_all_category(entry: CodeframeEntry) -> Optional[CatchAllCategory]:
    """The catch-all category an entry satisfies, if any"""
    normalized = normalize_label(entry.label)
    for category in CATCH_ALL_CATEGORIES:
        if normalized in category.matches:
            return category
    return None


def is_catch_all(entry: CodeframeEntry) -> bool:
    return catch_all_category(entry) is not None


def _unique_code(base: str, taken: set) -> str:
    code = base
    suffix = 2
    while code in taken:
        code = f"{base}_{suffix}"
        suffix += 1
    return code


def ensure_catch_all(codeframe: Codeframe) -> Codeframe:
    """
    Append one entry per missing catch-all category.

    New entries get numeric ids above every existing numeric id so they sort
    last. Idempotent: applying it to its own output adds nothing. The input
    codeframe is not modified.
    """
    present = {c.key for c in filter(None, (catch_all_category(e) for e in codeframe.entries))}
    missing = [c for c in CATCH_ALL_CATEGORIES if c.key not in present]
    if not missing:
        return codeframe

    entries: List[CodeframeEntry] = list(codeframe.entries)
    taken = {e.code for e in entries}
    next_numeric = codeframe.max_numeric() + 1

    for category in missing:
        code = _unique_code(category.code, taken)
        taken.add(code)
        entries.append(CodeframeEntry(
            code=code,
            label=category.label,
            definition=category.definition,
            numeric=next_numeric,
        ))
        next_numeric += 1

    logger.info(
        "Added catch-all codes to group %s: %s",
        codeframe.group_id, ", ".join(c.label for c in missing)
    )
    return codeframe.with_entries(entries)
