"""
Response Coder
Apply a finalized codeframe to every response of a question group
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from config import DEFAULT_CODING_BATCH_SIZE, DEFAULT_MAX_CONCURRENCY
from core.llm_client import CompletionService
from core.models import Codeframe, CodedResponse
from core.parsing import extract_json
from errors import GenerationServiceError, InvalidStateTransitionError

logger = logging.getLogger(__name__)


def build_coding_prompt(codeframe: Codeframe) -> str:
    """System prompt listing the codeframe and the expected answer format"""
    lines = [
        "You are a market research coder. Apply the following codeframe to each numbered response.",
        "",
        "## Codeframe",
        ""
    ]

    for entry in codeframe.entries:
        lines.append(f"**{entry.code}** - {entry.label}")
        if entry.definition:
            lines.append(f"Definition: {entry.definition}")
        if entry.examples:
            lines.append(f"Examples: {'; '.join(entry.examples[:3])}")
        lines.append("")

    lines.extend([
        "## Instructions",
        "For each response, identify ALL applicable codes from the codeframe above.",
        "Only use codes from the codeframe - do not create new codes.",
        "If nothing applies, use the Other code.",
        "",
        "Return valid JSON in this format:",
        '{"assignments": [{"id": 1, "codes": ["C001", "C002"]}]}'
    ])

    return "\n".join(lines)


def build_batch_prompt(batch: Sequence[Tuple[int, str]]) -> str:
    numbered = "\n".join(f"[{i + 1}] {text}" for i, (_, text) in enumerate(batch))
    return f"Code these {len(batch)} responses:\n\n{numbered}"


def parse_assignments(output: str, batch_size: int, valid_codes: set) -> Dict[int, List[str]]:
    """
    Map 1-based batch positions to valid codes.

    Unknown codes are dropped; positions without an assignment are absent.
    """
    data = extract_json(output)
    if not isinstance(data, dict) or not isinstance(data.get("assignments"), list):
        return {}

    assignments: Dict[int, List[str]] = {}
    for item in data["assignments"]:
        if not isinstance(item, dict):
            continue
        try:
            position = int(item.get("id"))
        except (TypeError, ValueError):
            continue
        if not 1 <= position <= batch_size:
            continue
        codes = item.get("codes") or []
        if isinstance(codes, str):
            codes = [c.strip() for c in codes.split(",")]
        kept = []
        for code in codes:
            code = str(code).strip()
            if code in valid_codes and code not in kept:
                kept.append(code)
            elif code not in valid_codes:
                logger.debug("Ignoring unknown code %r", code)
        assignments[position] = kept
    return assignments


class ResponseCoder:
    """Assigns codes from a codeframe to extracted responses"""

    def __init__(
        self,
        completion_service: CompletionService,
        batch_size: int = DEFAULT_CODING_BATCH_SIZE,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.completion_service = completion_service
        self.batch_size = batch_size
        self.max_concurrency = max_concurrency

    async def code_responses(
        self,
        codeframe: Codeframe,
        rows: Sequence[Tuple[int, str]],
        column_name: Optional[str] = None,
        column_index: Optional[int] = None,
        allow_draft: bool = False
    ) -> List[CodedResponse]:
        """
        Code every (row_index, text) pair against a finalized codeframe.

        With allow_draft a generated codeframe is accepted too; that is how a
        sample gets coded so compute_coverage can show which codes are in use
        before finalizing.

        Returns:
            One CodedResponse per input row, in input order

        Raises:
            InvalidStateTransitionError: the codeframe is not finalized and
                                         allow_draft is not set
            GenerationServiceError: the completion service failed
        """
        if not codeframe.is_finalized and not allow_draft:
            raise InvalidStateTransitionError(
                f"Codeframe for group {codeframe.group_id} must be finalized before coding",
                current_status=codeframe.status.value
            )

        system_prompt = build_coding_prompt(codeframe)
        valid_codes = set(codeframe.codes())
        batches = [rows[i:i + self.batch_size] for i in range(0, len(rows), self.batch_size)]
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def code_batch(batch: Sequence[Tuple[int, str]]) -> List[List[str]]:
            async with semaphore:
                try:
                    output = await self.completion_service.complete(system_prompt, build_batch_prompt(batch))
                except GenerationServiceError:
                    raise
                except Exception as e:
                    raise GenerationServiceError.from_exception(e) from e

            assignments = parse_assignments(output, len(batch), valid_codes)
            if not assignments:
                logger.warning(
                    "No usable assignments for a batch of %d responses in group %s",
                    len(batch), codeframe.group_id
                )
            return [assignments.get(i + 1, []) for i in range(len(batch))]

        batch_codes = await asyncio.gather(*(code_batch(b) for b in batches))

        coded = []
        for batch, codes_per_row in zip(batches, batch_codes):
            for (row_index, text), codes in zip(batch, codes_per_row):
                coded.append(CodedResponse(
                    response_text=text,
                    row_index=row_index,
                    codes_assigned=codes,
                    column_name=column_name,
                    column_index=column_index,
                ))
        logger.info("Coded %d responses for group %s", len(coded), codeframe.group_id)
        return coded
