"""
Tests for the Response Coder
"""

import pytest
import json
from coding.coder import ResponseCoder, build_coding_prompt, build_batch_prompt, parse_assignments
from coding.finalizer import CodeframeFinalizer
from errors import GenerationServiceError, InvalidStateTransitionError
from tests.mocks.mock_llm_client import StubCompletionService, MockTimeoutError


def assignments(*code_lists):
    return json.dumps({"assignments": [
        {"id": i + 1, "codes": list(codes)} for i, codes in enumerate(code_lists)
    ]})


@pytest.fixture
def finalized_codeframe(simple_codeframe, fixed_clock):
    return CodeframeFinalizer(clock=fixed_clock).finalize(simple_codeframe, override=True)


ROWS = [(1, "tastes great"), (2, "too expensive"), (4, "great taste, bad price")]


class TestPrompts:

    def test_coding_prompt_lists_codes(self, simple_codeframe):
        prompt = build_coding_prompt(simple_codeframe)
        assert "**TASTE** - Taste" in prompt
        assert "**OTHER** - Other" in prompt
        assert '"assignments"' in prompt

    def test_batch_prompt_numbers_responses(self):
        prompt = build_batch_prompt(ROWS[:2])
        assert "Code these 2 responses" in prompt
        assert "[1] tastes great" in prompt
        assert "[2] too expensive" in prompt


class TestParseAssignments:

    def test_valid_output(self):
        result = parse_assignments(assignments(["TASTE"], ["PRICE"]), 2, {"TASTE", "PRICE"})
        assert result == {1: ["TASTE"], 2: ["PRICE"]}

    def test_unknown_codes_dropped(self):
        result = parse_assignments(assignments(["TASTE", "SMELL"]), 1, {"TASTE"})
        assert result == {1: ["TASTE"]}

    def test_comma_separated_codes(self):
        output = json.dumps({"assignments": [{"id": 1, "codes": "TASTE, PRICE"}]})
        assert parse_assignments(output, 1, {"TASTE", "PRICE"}) == {1: ["TASTE", "PRICE"]}

    def test_out_of_range_ids_ignored(self):
        output = json.dumps({"assignments": [{"id": 5, "codes": ["TASTE"]}, {"id": "x", "codes": []}]})
        assert parse_assignments(output, 2, {"TASTE"}) == {}

    def test_duplicates_removed(self):
        assert parse_assignments(assignments(["TASTE", "TASTE"]), 1, {"TASTE"}) == {1: ["TASTE"]}

    def test_garbage(self):
        assert parse_assignments("no idea", 3, {"TASTE"}) == {}
        assert parse_assignments('{"codes": []}', 3, {"TASTE"}) == {}


class TestResponseCoder:

    @pytest.mark.asyncio
    async def test_codes_every_row_in_order(self, finalized_codeframe):
        service = StubCompletionService(default_response=assignments(["TASTE"], ["PRICE"], ["TASTE", "PRICE"]))
        coder = ResponseCoder(service)

        coded = await coder.code_responses(finalized_codeframe, ROWS, column_name="Likes", column_index=3)

        assert [c.row_index for c in coded] == [1, 2, 4]
        assert [c.codes_assigned for c in coded] == [["TASTE"], ["PRICE"], ["TASTE", "PRICE"]]
        assert coded[0].response_text == "tastes great"
        assert coded[0].column_name == "Likes"
        assert coded[0].column_index == 3
        assert service.call_count == 1

    @pytest.mark.asyncio
    async def test_batches(self, finalized_codeframe):
        service = StubCompletionService(responses=[
            assignments(["TASTE"], ["PRICE"]),
            assignments(["OTHER"]),
        ])
        coder = ResponseCoder(service, batch_size=2)

        coded = await coder.code_responses(finalized_codeframe, ROWS)

        assert service.call_count == 2
        assert [c.codes_assigned for c in coded] == [["TASTE"], ["PRICE"], ["OTHER"]]

    @pytest.mark.asyncio
    async def test_unusable_batch_assigns_nothing(self, finalized_codeframe):
        service = StubCompletionService(default_response="sorry, I cannot help")
        coder = ResponseCoder(service)

        coded = await coder.code_responses(finalized_codeframe, ROWS)

        assert len(coded) == 3
        assert all(c.codes_assigned == [] for c in coded)

    @pytest.mark.asyncio
    async def test_requires_finalized_codeframe(self, simple_codeframe):
        service = StubCompletionService()
        coder = ResponseCoder(service)

        with pytest.raises(InvalidStateTransitionError):
            await coder.code_responses(simple_codeframe, ROWS)

        assert service.call_count == 0

    @pytest.mark.asyncio
    async def test_service_failure_wrapped(self, finalized_codeframe):
        service = StubCompletionService(error_to_raise=MockTimeoutError())
        coder = ResponseCoder(service)

        with pytest.raises(GenerationServiceError) as exc_info:
            await coder.code_responses(finalized_codeframe, ROWS)

        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_concurrency_bounded(self, finalized_codeframe):
        service = StubCompletionService(default_response=assignments(["TASTE"]), delay=0.01)
        coder = ResponseCoder(service, batch_size=1, max_concurrency=2)
        rows = [(i, f"response {i}") for i in range(1, 9)]

        coded = await coder.code_responses(finalized_codeframe, rows)

        assert len(coded) == 8
        assert service.call_count == 8
        assert service.max_in_flight <= 2

    @pytest.mark.asyncio
    async def test_no_rows(self, finalized_codeframe):
        service = StubCompletionService()
        coded = await ResponseCoder(service).code_responses(finalized_codeframe, [])
        assert coded == []
        assert service.call_count == 0

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            ResponseCoder(StubCompletionService(), batch_size=0)


class TestDraftCoding:
    """Coding a sample of a generated codeframe to measure coverage"""

    @pytest.mark.asyncio
    async def test_draft_codeframe_accepted_with_allow_draft(self, simple_codeframe):
        service = StubCompletionService(default_response=assignments(["TASTE"], ["PRICE"], ["TASTE", "PRICE"]))
        coder = ResponseCoder(service)

        coded = await coder.code_responses(simple_codeframe, ROWS, allow_draft=True)

        assert [c.codes_assigned for c in coded] == [["TASTE"], ["PRICE"], ["TASTE", "PRICE"]]
        assert simple_codeframe.status.value == "generated"

    @pytest.mark.asyncio
    async def test_generate_code_sample_then_finalize(self, awareness_group, brand_codeframe_json, fixed_clock):
        from coding.coverage import compute_coverage
        from coding.generator import CodeframeGenerator

        service = StubCompletionService(responses=[
            brand_codeframe_json,
            assignments(["C001"], ["C002"], ["C001", "C003"]),
        ])
        responses = ["Coke is great", "I love Pepsi", "Coke again"]

        generated = await CodeframeGenerator(service, clock=fixed_clock).generate(awareness_group, responses)
        coded = await ResponseCoder(service).code_responses(
            generated, list(enumerate(responses, start=1)), allow_draft=True
        )
        measured = compute_coverage(generated, coded)
        finalized = CodeframeFinalizer(clock=fixed_clock).finalize(measured)

        assert finalized.is_finalized
        assert finalized.get_entry("C001").percentage == 66.7
        assert finalized.get_entry("C002").percentage == 33.3
