"""
Codeframe Generator
Sample a question group's responses, ask the completion service for a codeframe,
and validate what comes back
"""

import logging
import random
from datetime import datetime
from typing import Callable, Optional, Sequence

from config import DEFAULT_SAMPLE_PERCENTAGE, DEFAULT_MINIMUM_SAMPLE, RESPONSE_SEPARATOR
from core.extraction import extract_responses
from core.llm_client import CompletionService
from core.models import Codeframe, CodeframeStatus, QuestionGroup, RawTable, utc_now
from core.parsing import parse_codeframe_response
from core.prompts import QuestionTypeRegistry, build_prompts
from core.sampling import sample_responses
from errors import (
    EmptyInputError, GenerationServiceError, MalformedCodeframeError
)

logger = logging.getLogger(__name__)


class CodeframeGenerator:
    """
    Generates a codeframe for one question group per call.

    Stateless between calls apart from its collaborators, so generations for
    different groups may run concurrently. No retries happen here: a retry is
    a fresh call to ``generate`` with a fresh sample.
    """

    def __init__(
        self,
        completion_service: CompletionService,
        sample_percentage: float = DEFAULT_SAMPLE_PERCENTAGE,
        minimum_floor: int = DEFAULT_MINIMUM_SAMPLE,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.completion_service = completion_service
        self.sample_percentage = sample_percentage
        self.minimum_floor = minimum_floor
        self.rng = rng
        self.clock = clock

    async def generate(
        self,
        group: QuestionGroup,
        responses: Sequence[str],
        sample_percentage: Optional[float] = None,
        minimum_floor: Optional[int] = None
    ) -> Codeframe:
        """
        Generate a codeframe from a group's extracted responses.

        Args:
            group: The question group being coded
            responses: All response texts for the group (blank ones are ignored)
            sample_percentage: Overrides the generator default
            minimum_floor: Overrides the generator default

        Returns:
            Codeframe with status "generated"

        Raises:
            EmptyInputError: no non-empty responses; the service is not called
            UnknownQuestionTypeError: group.question_type is not registered
            GenerationServiceError: the completion service failed
            MalformedCodeframeError: the output is not a valid codeframe
        """
        cleaned = [r.strip() for r in responses if r and r.strip()]
        if not cleaned:
            raise EmptyInputError(group.group_id)

        percentage = self.sample_percentage if sample_percentage is None else sample_percentage
        floor = self.minimum_floor if minimum_floor is None else minimum_floor
        sampled = sample_responses(cleaned, percentage, floor, rng=self.rng)

        prompts = build_prompts(group.question_type, sampled)
        template = QuestionTypeRegistry.require(group.question_type)

        logger.info(
            "Generating codeframe for group %s (%s): %d of %d responses sampled",
            group.group_id, group.question_type, len(sampled), len(cleaned)
        )

        try:
            output = await self.completion_service.complete(prompts.system_prompt, prompts.user_prompt)
        except GenerationServiceError:
            raise
        except Exception as e:
            raise GenerationServiceError.from_exception(e) from e

        result = parse_codeframe_response(output, default_category=template.category)
        if not result.ok:
            logger.warning("Malformed codeframe for group %s: %s", group.group_id, result.error)
            raise MalformedCodeframeError(result.error, raw_output=output)

        codeframe = Codeframe(
            group_id=group.group_id,
            group_name=group.group_name,
            question_type=group.question_type,
            column_indices=list(group.column_indices),
            entries=result.entries,
            sample_size=len(sampled),
            total_responses=len(cleaned),
            generated_at=self.clock(),
            status=CodeframeStatus.GENERATED,
        )

        logger.info("Generated %d codes for group %s", len(codeframe.entries), group.group_id)
        return codeframe

    async def generate_from_table(
        self,
        group: QuestionGroup,
        table: RawTable,
        separator: str = RESPONSE_SEPARATOR,
        **kwargs
    ) -> Codeframe:
        """Extract the group's responses from a raw table, then generate"""
        responses = extract_responses(table, group.column_indices, separator)
        return await self.generate(group, responses, **kwargs)
