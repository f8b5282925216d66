"""
Tests for Generation Orchestration
"""

import pytest
from coding.generator import CodeframeGenerator
from coding.orchestration import (
    chunk_columns, split_group, generate_many, failed_groups, summarize_failures
)
from core.models import QuestionGroup
from errors import EmptyInputError, GenerationServiceError, MalformedCodeframeError
from tests.mocks.mock_llm_client import StubCompletionService, MockRateLimitError, MockAuthError


def group(group_id, question_type="miscellaneous", columns=None):
    return QuestionGroup(group_id, f"Group {group_id}", question_type, columns or [1])


class TestChunkColumns:

    def test_default_batch_of_three(self):
        assert chunk_columns([1, 2, 3, 4, 5, 6, 7]) == [[1, 2, 3], [4, 5, 6], [7]]

    def test_fewer_than_batch(self):
        assert chunk_columns([4, 5]) == [[4, 5]]

    def test_empty(self):
        assert chunk_columns([]) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            chunk_columns([1, 2], 0)


class TestSplitGroup:

    def test_small_group_unchanged(self):
        g = group("q1", columns=[1, 2, 3])
        assert split_group(g) == [g]

    def test_wide_group_split(self):
        g = group("q1", "unaided-awareness", columns=[1, 2, 3, 4, 5])

        batches = split_group(g)

        assert [b.group_id for b in batches] == ["q1_b1", "q1_b2"]
        assert [b.column_indices for b in batches] == [[1, 2, 3], [4, 5]]
        assert all(b.question_type == "unaided-awareness" for b in batches)

    def test_custom_batch_size(self):
        batches = split_group(group("q1", columns=[1, 2, 3, 4]), batch_size=1)
        assert len(batches) == 4
        assert batches[-1].group_id == "q1_b4"


class TestGenerateMany:
    """Tests for concurrent generation across groups"""

    @pytest.mark.asyncio
    async def test_all_groups_succeed(self, stub_service):
        generator = CodeframeGenerator(stub_service)
        jobs = [(group("q1"), ["a"]), (group("q2"), ["b"]), (group("q3"), ["c"])]

        results = await generate_many(generator, jobs)

        assert [r.group_id for r in results] == ["q1", "q2", "q3"]
        assert all(r.success for r in results)
        assert results[1].codeframe.group_id == "q2"

    @pytest.mark.asyncio
    async def test_partial_failure_is_data(self, brand_codeframe_json):
        service = StubCompletionService(default_response=brand_codeframe_json)
        generator = CodeframeGenerator(service)
        jobs = [
            (group("q1"), ["a"]),
            (group("q2"), ["", " "]),
            (group("q3", "nps-reasons"), ["c"]),
        ]

        results = await generate_many(generator, jobs)

        assert results[0].success
        assert isinstance(results[1].error, EmptyInputError)
        assert not results[2].success
        assert results[2].codeframe is None

    @pytest.mark.asyncio
    async def test_concurrency_bounded(self, brand_codeframe_json):
        service = StubCompletionService(default_response=brand_codeframe_json, delay=0.01)
        generator = CodeframeGenerator(service)
        jobs = [(group(f"q{i}"), ["a"]) for i in range(10)]

        results = await generate_many(generator, jobs, max_concurrency=3)

        assert len(results) == 10
        assert service.max_in_flight <= 3

    @pytest.mark.asyncio
    async def test_no_jobs(self, stub_service):
        assert await generate_many(CodeframeGenerator(stub_service), []) == []


class TestFailureReporting:

    @pytest.mark.asyncio
    async def test_failed_groups_and_summary(self, brand_codeframe_json):
        service = StubCompletionService(responses=[
            MockRateLimitError(),
            MockAuthError(),
            "not json",
            brand_codeframe_json,
        ])
        generator = CodeframeGenerator(service)
        jobs = [(group(f"q{i}"), ["a"]) for i in range(1, 5)]

        results = await generate_many(generator, jobs, max_concurrency=1)

        assert isinstance(results[0].error, GenerationServiceError)
        assert isinstance(results[2].error, MalformedCodeframeError)
        assert results[3].success

        # Auth failures need a fix, not a retry
        assert failed_groups(results) == ["q1", "q3"]
        assert failed_groups(results, retryable_only=False) == ["q1", "q2", "q3"]

        summary = summarize_failures(results)
        assert summary["rate_limit"]["groups"] == ["q1"]
        assert summary["invalid_api_key"]["groups"] == ["q2"]
        assert summary["MalformedCodeframeError"]["count"] == 1
