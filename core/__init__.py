"""
Verbatim Coder Core Module
Data models, response extraction, sampling, prompts and the completion service
"""

from .models import (
    CodeframeStatus, QuestionGroup, CodeframeEntry, Codeframe, CodedResponse,
    BrandHierarchy, BrandRollupConfig
)
from .providers import LLMProvider, ProviderConfig, PROVIDER_CONFIGS
from .llm_client import get_client, CompletionService, OpenAICompletionService
from .extraction import extract_responses, extract_rows, column_names, table_from_dataframe
from .sampling import sample_responses, target_sample_size
from .prompts import QuestionTypeTemplate, QuestionTypeRegistry, PromptPair, build_prompts
from .parsing import extract_json, parse_codeframe_response, CodeframeParseResult
from .export import codeframe_sheet, coded_responses_sheet, export_workbook, to_csv_bytes
from .logging_config import setup_logging

__all__ = [
    # Models
    "CodeframeStatus",
    "QuestionGroup",
    "CodeframeEntry",
    "Codeframe",
    "CodedResponse",
    "BrandHierarchy",
    "BrandRollupConfig",
    # Completion service
    "LLMProvider",
    "ProviderConfig",
    "PROVIDER_CONFIGS",
    "get_client",
    "CompletionService",
    "OpenAICompletionService",
    # Extraction & sampling
    "extract_responses",
    "extract_rows",
    "column_names",
    "table_from_dataframe",
    "sample_responses",
    "target_sample_size",
    # Prompts & parsing
    "QuestionTypeTemplate",
    "QuestionTypeRegistry",
    "PromptPair",
    "build_prompts",
    "extract_json",
    "parse_codeframe_response",
    "CodeframeParseResult",
    # Export
    "codeframe_sheet",
    "coded_responses_sheet",
    "export_workbook",
    "to_csv_bytes",
    "setup_logging",
]
