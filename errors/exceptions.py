"""
Verbatim Coder Exceptions
Typed failures surfaced by the codeframe pipeline
"""

from typing import Optional

from .classifier import ErrorClassifier, ErrorInfo


class VerbatimCoderError(Exception):
    """Base class for pipeline failures"""

    is_retryable: bool = False


class EmptyInputError(VerbatimCoderError):
    """No non-empty responses are available for a question group"""

    def __init__(self, group_id: Optional[str] = None, message: Optional[str] = None):
        self.group_id = group_id
        if message is None:
            message = "No responses found for the selected columns"
            if group_id:
                message = f"{message} (group '{group_id}')"
        super().__init__(message)


class UnknownQuestionTypeError(VerbatimCoderError):
    """The question type has no registered prompt template"""

    def __init__(self, question_type: str):
        self.question_type = question_type
        super().__init__(f"Unknown question type: {question_type!r}")


class GenerationServiceError(VerbatimCoderError):
    """The completion service failed (network, rate limit, auth, ...)

    Carries the classified ``ErrorInfo`` so callers can decide whether and when
    to re-invoke generation.
    """

    def __init__(self, message: str, error_info: Optional[ErrorInfo] = None):
        super().__init__(message)
        self.error_info = error_info

    @classmethod
    def from_exception(cls, error: Exception) -> "GenerationServiceError":
        info = ErrorClassifier.classify(error)
        return cls(f"{info.message}: {info.original_error}", error_info=info)

    @property
    def is_retryable(self) -> bool:
        if self.error_info is None:
            return True
        return self.error_info.is_retryable


class MalformedCodeframeError(VerbatimCoderError):
    """The model output is not a usable codeframe; a fresh sample may succeed"""

    is_retryable = True

    def __init__(self, reason: str, raw_output: Optional[str] = None):
        self.reason = reason
        self.raw_output = raw_output[:500] if raw_output else raw_output
        super().__init__(f"Malformed codeframe: {reason}")


class InvalidStateTransitionError(VerbatimCoderError):
    """finalize/unlock called from a state that does not allow it"""

    def __init__(self, message: str, current_status: Optional[str] = None):
        self.current_status = current_status
        super().__init__(message)
