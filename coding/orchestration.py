"""
Generation Orchestration
Column batching and bounded fan-out of codeframe generation across question groups
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from config import COLUMN_BATCH_SIZE, DEFAULT_MAX_CONCURRENCY
from core.models import Codeframe, QuestionGroup
from errors import GenerationServiceError, VerbatimCoderError, format_error_summary
from .generator import CodeframeGenerator

logger = logging.getLogger(__name__)


def chunk_columns(column_indices: Sequence[int], batch_size: int = COLUMN_BATCH_SIZE) -> List[List[int]]:
    """Split column indices into consecutive batches of at most batch_size"""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    columns = list(column_indices)
    return [columns[i:i + batch_size] for i in range(0, len(columns), batch_size)]


def split_group(group: QuestionGroup, batch_size: int = COLUMN_BATCH_SIZE) -> List[QuestionGroup]:
    """
    Split a wide question group into column batches.

    A group that already fits is returned as-is; otherwise batches are named
    ``<group_id>_b1``, ``<group_id>_b2``, ...
    """
    chunks = chunk_columns(group.column_indices, batch_size)
    if len(chunks) <= 1:
        return [group]
    return [
        QuestionGroup(
            group_id=f"{group.group_id}_b{n}",
            group_name=f"{group.group_name} (batch {n})",
            question_type=group.question_type,
            column_indices=chunk,
        )
        for n, chunk in enumerate(chunks, start=1)
    ]


@dataclass
class GroupGenerationResult:
    """Outcome of generating one group: a codeframe or the error that stopped it"""
    group_id: str
    codeframe: Optional[Codeframe] = None
    error: Optional[VerbatimCoderError] = None

    @property
    def success(self) -> bool:
        return self.codeframe is not None

    @property
    def is_retryable(self) -> bool:
        return self.error is not None and self.error.is_retryable


async def generate_many(
    generator: CodeframeGenerator,
    jobs: Sequence[Tuple[QuestionGroup, Sequence[str]]],
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
) -> List[GroupGenerationResult]:
    """
    Generate codeframes for several groups concurrently.

    At most max_concurrency generations are in flight. Each group's failure is
    captured in its result; one group failing never cancels the others.

    Args:
        generator: Shared generator
        jobs: (group, responses) pairs
        max_concurrency: Upper bound on simultaneous completion calls

    Returns:
        One result per job, in job order
    """
    semaphore = asyncio.Semaphore(max_concurrency)

    async def run(group: QuestionGroup, responses: Sequence[str]) -> GroupGenerationResult:
        async with semaphore:
            try:
                codeframe = await generator.generate(group, responses)
                return GroupGenerationResult(group_id=group.group_id, codeframe=codeframe)
            except VerbatimCoderError as e:
                logger.warning("Generation failed for group %s: %s", group.group_id, e)
                return GroupGenerationResult(group_id=group.group_id, error=e)

    results = await asyncio.gather(*(run(group, responses) for group, responses in jobs))

    failed = sum(1 for r in results if not r.success)
    logger.info("Generated %d of %d groups", len(results) - failed, len(results))
    return list(results)


def failed_groups(results: Sequence[GroupGenerationResult], retryable_only: bool = True) -> List[str]:
    """Group ids to hand back to generate_many for a 'retry failed' pass"""
    return [
        r.group_id for r in results
        if not r.success and (r.is_retryable or not retryable_only)
    ]


def summarize_failures(results: Sequence[GroupGenerationResult]) -> dict:
    """Failures grouped by error type, for display"""
    errors = []
    for r in results:
        if r.success:
            continue
        if isinstance(r.error, GenerationServiceError) and r.error.error_info is not None:
            error_type = r.error.error_info.error_type.value
            message = r.error.error_info.message
        else:
            error_type = type(r.error).__name__
            message = str(r.error)
        errors.append({"error_type": error_type, "error_message": message, "group_id": r.group_id})
    return format_error_summary(errors)
