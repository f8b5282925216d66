"""
Tests for the Codeframe Finalizer
"""

import pytest
from dataclasses import replace
from datetime import datetime, timezone
from coding.finalizer import CodeframeFinalizer, has_used_codes
from core.models import CodeframeStatus
from errors import InvalidStateTransitionError


FINALIZED_AT = datetime(2024, 3, 5, 8, 0, tzinfo=timezone.utc)


def with_usage(codeframe, **percentages):
    return codeframe.with_entries([
        replace(e, percentage=percentages.get(e.code, e.percentage)) for e in codeframe.entries
    ])


@pytest.fixture
def finalizer():
    return CodeframeFinalizer(clock=lambda: FINALIZED_AT)


class TestHasUsedCodes:

    def test_no_usage(self, simple_codeframe):
        assert has_used_codes(simple_codeframe) is False

    def test_catch_all_usage_does_not_count(self, simple_codeframe):
        assert has_used_codes(with_usage(simple_codeframe, OTHER=80.0)) is False

    def test_theme_usage_counts(self, simple_codeframe):
        assert has_used_codes(with_usage(simple_codeframe, TASTE=12.5)) is True


class TestFinalize:

    def test_finalize_used_codeframe(self, finalizer, simple_codeframe):
        used = with_usage(simple_codeframe, TASTE=40.0)

        finalized = finalizer.finalize(used)

        assert finalized.status == CodeframeStatus.FINALIZED
        assert finalized.finalized_at == FINALIZED_AT
        assert finalized.is_finalized
        assert finalized.entries == used.entries

    def test_input_not_modified(self, finalizer, simple_codeframe):
        used = with_usage(simple_codeframe, TASTE=40.0)
        finalizer.finalize(used)
        assert used.status == CodeframeStatus.GENERATED
        assert used.finalized_at is None

    def test_unused_codeframe_rejected(self, finalizer, simple_codeframe):
        with pytest.raises(InvalidStateTransitionError, match="no codes have been applied"):
            finalizer.finalize(simple_codeframe)

    def test_only_catch_all_used_rejected(self, finalizer, simple_codeframe):
        with pytest.raises(InvalidStateTransitionError):
            finalizer.finalize(with_usage(simple_codeframe, OTHER=100.0))

    def test_override(self, finalizer, simple_codeframe):
        finalized = finalizer.finalize(simple_codeframe, override=True)
        assert finalized.status == CodeframeStatus.FINALIZED

    def test_finalize_twice_rejected(self, finalizer, simple_codeframe):
        finalized = finalizer.finalize(simple_codeframe, override=True)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            finalizer.finalize(finalized, override=True)

        assert exc_info.value.current_status == "finalized"

    def test_finalized_entries_are_a_new_list(self, finalizer, simple_codeframe):
        finalized = finalizer.finalize(simple_codeframe, override=True)
        assert finalized.entries is not simple_codeframe.entries


class TestUnlock:

    def test_unlock_keeps_finalized_at(self, finalizer, simple_codeframe):
        finalized = finalizer.finalize(simple_codeframe, override=True)

        unlocked = finalizer.unlock(finalized)

        assert unlocked.status == CodeframeStatus.GENERATED
        assert unlocked.finalized_at == FINALIZED_AT

    def test_unlock_generated_rejected(self, finalizer, simple_codeframe):
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            finalizer.unlock(simple_codeframe)

        assert exc_info.value.current_status == "generated"

    def test_refinalize_stamps_new_time(self, simple_codeframe):
        times = iter([
            datetime(2024, 3, 5, tzinfo=timezone.utc),
            datetime(2024, 3, 9, tzinfo=timezone.utc),
        ])
        finalizer = CodeframeFinalizer(clock=lambda: next(times))

        first = finalizer.finalize(simple_codeframe, override=True)
        second = finalizer.finalize(finalizer.unlock(first), override=True)

        assert second.finalized_at > first.finalized_at
