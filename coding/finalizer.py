"""
Codeframe Finalizer
generated -> finalized -> (unlock) -> generated -> ...
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from core.models import Codeframe, CodeframeStatus, utc_now
from errors import InvalidStateTransitionError
from .catch_all import is_catch_all

logger = logging.getLogger(__name__)


def has_used_codes(codeframe: Codeframe) -> bool:
    """True if at least one non-catch-all entry has nonzero coverage"""
    return any(e.percentage > 0 and not is_catch_all(e) for e in codeframe.entries)


class CodeframeFinalizer:
    """Locks codeframes for full-dataset coding and export"""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def finalize(self, codeframe: Codeframe, override: bool = False) -> Codeframe:
        """
        Lock a generated codeframe.

        Args:
            codeframe: Codeframe in "generated" status
            override: Finalize even though no non-catch-all code is in use yet

        Returns:
            A new Codeframe with status "finalized" and a fresh finalized_at

        Raises:
            InvalidStateTransitionError: already finalized, or no code in use
                                         without override
        """
        if codeframe.status != CodeframeStatus.GENERATED:
            raise InvalidStateTransitionError(
                f"Cannot finalize group {codeframe.group_id}: already {codeframe.status.value}",
                current_status=codeframe.status.value
            )
        if not override and not has_used_codes(codeframe):
            raise InvalidStateTransitionError(
                f"Cannot finalize group {codeframe.group_id}: no codes have been applied yet "
                "(code a sample with allow_draft=True first, or finalize with override)",
                current_status=codeframe.status.value
            )

        finalized = replace(
            codeframe,
            entries=list(codeframe.entries),
            status=CodeframeStatus.FINALIZED,
            finalized_at=self.clock(),
        )
        logger.info("Finalized codeframe for group %s (%d codes)", codeframe.group_id, len(finalized.entries))
        return finalized

    def unlock(self, codeframe: Codeframe) -> Codeframe:
        """
        Re-open a finalized codeframe for editing.

        finalized_at is kept for audit; the next finalize overwrites it.

        Raises:
            InvalidStateTransitionError: the codeframe is not finalized
        """
        if codeframe.status != CodeframeStatus.FINALIZED:
            raise InvalidStateTransitionError(
                f"Cannot unlock group {codeframe.group_id}: it is not finalized",
                current_status=codeframe.status.value
            )
        logger.info("Unlocked codeframe for group %s", codeframe.group_id)
        return replace(codeframe, entries=list(codeframe.entries), status=CodeframeStatus.GENERATED)
