"""
Response Sampling
Pick a representative subset of responses to send for codeframe generation
"""

import math
import random
from typing import List, Optional, Sequence

from config import DEFAULT_SAMPLE_PERCENTAGE, DEFAULT_MINIMUM_SAMPLE


def target_sample_size(total: int, percentage: float, minimum_floor: int) -> int:
    """min(total, max(floor, round(total * percentage / 100))), rounding half up"""
    if percentage < 0:
        raise ValueError(f"Sample percentage must be >= 0, got {percentage}")
    if minimum_floor < 0:
        raise ValueError(f"Minimum sample must be >= 0, got {minimum_floor}")
    by_percentage = int(math.floor(total * percentage / 100 + 0.5))
    return min(total, max(minimum_floor, by_percentage))


def sample_responses(
    responses: Sequence[str],
    percentage: float = DEFAULT_SAMPLE_PERCENTAGE,
    minimum_floor: int = DEFAULT_MINIMUM_SAMPLE,
    rng: Optional[random.Random] = None
) -> List[str]:
    """
    Uniform random sample of responses without replacement.

    When there are no more responses than the floor, all of them are returned
    in their original order. Pass a seeded ``random.Random`` for repeatable
    samples.
    """
    size = target_sample_size(len(responses), percentage, minimum_floor)
    if len(responses) <= minimum_floor:
        return list(responses)

    rng = rng or random.Random()
    shuffled = list(responses)
    rng.shuffle(shuffled)
    return shuffled[:size]
