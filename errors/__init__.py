"""
Verbatim Coder Error Handling Module
Error classification, suggestions and the pipeline's typed exceptions
"""

from .classifier import (
    ErrorType,
    ErrorInfo,
    ErrorClassifier,
    ERROR_SUGGESTIONS,
    format_error_for_display,
    format_error_summary,
)
from .exceptions import (
    VerbatimCoderError,
    EmptyInputError,
    UnknownQuestionTypeError,
    GenerationServiceError,
    MalformedCodeframeError,
    InvalidStateTransitionError,
)

__all__ = [
    "ErrorType",
    "ErrorInfo",
    "ErrorClassifier",
    "ERROR_SUGGESTIONS",
    "format_error_for_display",
    "format_error_summary",
    # Pipeline exceptions
    "VerbatimCoderError",
    "EmptyInputError",
    "UnknownQuestionTypeError",
    "GenerationServiceError",
    "MalformedCodeframeError",
    "InvalidStateTransitionError",
]
