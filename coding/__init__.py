"""
Verbatim Coding
Codeframe generation, catch-all enforcement, brand roll-up, finalization and response coding
"""

from .generator import CodeframeGenerator
from .catch_all import CATCH_ALL_CATEGORIES, ensure_catch_all, is_catch_all
from .brand_hierarchy import BrandHierarchyManager, brand_code, load_brand_families
from .finalizer import CodeframeFinalizer, has_used_codes
from .coverage import compute_coverage, code_counts
from .coder import ResponseCoder
from .orchestration import (
    chunk_columns, split_group, generate_many, GroupGenerationResult,
    failed_groups, summarize_failures
)

__all__ = [
    "CodeframeGenerator",
    "CATCH_ALL_CATEGORIES",
    "ensure_catch_all",
    "is_catch_all",
    "BrandHierarchyManager",
    "brand_code",
    "load_brand_families",
    "CodeframeFinalizer",
    "has_used_codes",
    "compute_coverage",
    "code_counts",
    "ResponseCoder",
    "chunk_columns",
    "split_group",
    "generate_many",
    "GroupGenerationResult",
    "failed_groups",
    "summarize_failures",
]
