"""
Model Output Parsing
Extract and validate the codeframe JSON returned by the completion service
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .models import CodeframeEntry


def extract_json(text: str) -> Optional[Any]:
    """Extract JSON from text that may contain extra content around it."""
    if not text:
        return None

    # Try direct parse first
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Look for ```json ... ``` blocks first
    json_block_match = re.search(r'```(?:json)?\s*([\s\S]*?)\s*```', text)
    if json_block_match:
        try:
            return json.loads(json_block_match.group(1))
        except json.JSONDecodeError:
            pass

    # Look for { ... } pattern
    brace_match = re.search(r'\{[\s\S]*\}', text)
    if brace_match:
        try:
            return json.loads(brace_match.group(0))
        except json.JSONDecodeError:
            pass

    return None


@dataclass
class CodeframeParseResult:
    """Outcome of parsing model output: entries on success, a reason on failure"""
    ok: bool
    entries: List[CodeframeEntry] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def success(cls, entries: List[CodeframeEntry]) -> "CodeframeParseResult":
        return cls(ok=True, entries=entries)

    @classmethod
    def failure(cls, reason: str) -> "CodeframeParseResult":
        return cls(ok=False, error=reason)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _parse_entry(index: int, item: Any, default_category: Optional[str]) -> CodeframeEntry:
    """Validate one element of the codeframe array; raises ValueError with the reason"""
    if not isinstance(item, dict):
        raise ValueError(f"entry {index} is not an object")
    if not _non_empty_str(item.get("code")):
        raise ValueError(f"entry {index} has no code")
    if not _non_empty_str(item.get("label")):
        raise ValueError(f"entry {index} ({item['code']}) has no label")

    definition = item.get("definition", "")
    if definition is None:
        definition = ""
    if not isinstance(definition, str):
        raise ValueError(f"entry {index} definition is not a string")

    examples = item.get("examples", [])
    if examples is None:
        examples = []
    if not isinstance(examples, list):
        raise ValueError(f"entry {index} examples is not a list")

    numeric = item.get("numeric")
    if numeric is None or isinstance(numeric, bool) or not isinstance(numeric, (int, str)):
        numeric = index + 1

    category = item.get("category")
    if not _non_empty_str(category):
        category = default_category

    return CodeframeEntry(
        code=item["code"].strip(),
        label=item["label"].strip(),
        definition=definition.strip(),
        examples=[str(e) for e in examples if e is not None],
        numeric=numeric,
        category=category,
    )


def parse_codeframe_response(text: str, default_category: Optional[str] = None) -> CodeframeParseResult:
    """
    Parse a completion into codeframe entries.

    Requires a top-level ``codeframe`` array whose elements carry non-empty
    ``code`` and ``label`` strings, with codes unique. Nothing is coerced into
    a required field: any violation fails the whole response.

    Args:
        text: Raw model output (may be wrapped in prose or code fences)
        default_category: Category for entries the model left untagged

    Returns:
        CodeframeParseResult
    """
    if not text or not text.strip():
        return CodeframeParseResult.failure("empty response")

    data = extract_json(text)
    if data is None:
        return CodeframeParseResult.failure("response is not valid JSON")
    if not isinstance(data, dict) or "codeframe" not in data:
        return CodeframeParseResult.failure("missing top-level 'codeframe'")

    items = data["codeframe"]
    if not isinstance(items, list):
        return CodeframeParseResult.failure("'codeframe' is not an array")
    if not items:
        return CodeframeParseResult.failure("'codeframe' is empty")

    entries = []
    seen: Dict[str, int] = {}
    for index, item in enumerate(items):
        try:
            entry = _parse_entry(index, item, default_category)
        except ValueError as e:
            return CodeframeParseResult.failure(str(e))
        if entry.code in seen:
            return CodeframeParseResult.failure(f"duplicate code {entry.code!r}")
        seen[entry.code] = index
        entries.append(entry)

    return CodeframeParseResult.success(entries)
