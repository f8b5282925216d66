"""
Pytest Configuration and Shared Fixtures
"""

import pytest
import json
import os
import sys
from datetime import datetime, timezone

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tests.mocks.mock_llm_client import StubCompletionService
from core.models import Codeframe, CodeframeEntry, CodeframeStatus, QuestionGroup


FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW"""
    return lambda: FIXED_NOW


# ==========================================
# Verbatim Coding Fixtures
# ==========================================

@pytest.fixture
def brand_codeframe_json():
    """Valid model output for an unaided-awareness group"""
    return json.dumps({
        "codeframe": [
            {"code": "C001", "numeric": 1, "label": "Coca-Cola",
             "definition": "Mentions of Coca-Cola", "examples": ["coke", "coca cola"]},
            {"code": "C002", "numeric": 2, "label": "Pepsi",
             "definition": "Mentions of Pepsi", "examples": ["pepsi"]},
            {"code": "C003", "numeric": 3, "label": "Other",
             "definition": "Anything else", "examples": []},
        ]
    })


@pytest.fixture
def stub_service(brand_codeframe_json):
    """Completion service returning a valid codeframe"""
    return StubCompletionService(default_response=brand_codeframe_json)


@pytest.fixture
def awareness_group():
    return QuestionGroup(
        group_id="q1",
        group_name="Unaided soft drink awareness",
        question_type="unaided-awareness",
        column_indices=[1, 2],
    )


@pytest.fixture
def sample_table():
    """Raw spreadsheet: header row plus five respondents"""
    return [
        ["Respondent", "Brand 1", "Brand 2"],
        ["r1", "Coke", "Pepsi"],
        ["r2", "  Sprite ", None],
        ["r3", None, ""],
        ["r4", "Fanta", float("nan")],
        ["r5", 7.0, "Coke Zero"],
    ]


def make_entry(code, label, numeric=None, category=None, **kwargs):
    return CodeframeEntry(code=code, label=label, numeric=numeric, category=category, **kwargs)


@pytest.fixture
def simple_codeframe(fixed_clock):
    """Generated codeframe with two themes and one catch-all"""
    return Codeframe(
        group_id="q2",
        group_name="Likes",
        question_type="miscellaneous",
        column_indices=[3],
        entries=[
            make_entry("TASTE", "Taste", 1, "miscellaneous"),
            make_entry("PRICE", "Price", 2, "miscellaneous"),
            make_entry("OTHER", "Other", 3),
        ],
        sample_size=10,
        total_responses=40,
        generated_at=fixed_clock(),
        status=CodeframeStatus.GENERATED,
    )


@pytest.fixture
def brand_codeframe(fixed_clock):
    """Unaided-awareness codeframe as produced by the generator"""
    return Codeframe(
        group_id="q1",
        group_name="Unaided soft drink awareness",
        question_type="unaided-awareness",
        column_indices=[1, 2],
        entries=[
            make_entry("C001", "Coca-Cola", 1, "brand_awareness"),
            make_entry("C002", "Pepsi", 2, "brand_awareness"),
        ],
        generated_at=fixed_clock(),
    )
