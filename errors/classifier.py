"""
Verbatim Coder Error Classification
Classifies completion-service failures and provides actionable suggestions
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, List

# ==========================================
# ERROR TYPES
# ==========================================

class ErrorType(Enum):
    # Authentication & Authorization
    AUTH_ERROR = "auth_error"
    INVALID_API_KEY = "invalid_api_key"
    INSUFFICIENT_QUOTA = "insufficient_quota"

    # Rate Limiting
    RATE_LIMIT = "rate_limit"
    TOO_MANY_REQUESTS = "too_many_requests"

    # Network & Connection
    CONNECTION_ERROR = "connection_error"
    TIMEOUT = "timeout"
    DNS_ERROR = "dns_error"
    SSL_ERROR = "ssl_error"

    # Model & Provider
    MODEL_NOT_FOUND = "model_not_found"
    SERVICE_UNAVAILABLE = "service_unavailable"

    # Content & Input
    CONTENT_FILTER = "content_filter"
    CONTEXT_LENGTH_EXCEEDED = "context_length_exceeded"
    INVALID_REQUEST = "invalid_request"

    # Server Errors
    SERVER_ERROR = "server_error"
    BAD_GATEWAY = "bad_gateway"

    # Unknown
    UNKNOWN = "unknown"

# ==========================================
# ERROR INFO
# ==========================================

@dataclass
class ErrorInfo:
    error_type: ErrorType
    message: str
    suggestion: str
    is_retryable: bool
    retry_delay: int  # seconds, 0 if not retryable
    original_error: str

ERROR_SUGGESTIONS = {
    ErrorType.AUTH_ERROR: (
        "Authentication failed",
        "Check the API key configured for the completion service.",
        False, 0
    ),
    ErrorType.INVALID_API_KEY: (
        "Invalid API key",
        "The API key is incorrect or expired. Update it before regenerating.",
        False, 0
    ),
    ErrorType.INSUFFICIENT_QUOTA: (
        "Quota exceeded",
        "Your API quota is exhausted. Check billing settings or wait for the quota reset.",
        False, 0
    ),
    ErrorType.RATE_LIMIT: (
        "Rate limit reached",
        "Too many generations in flight. Lower the concurrency limit and retry the failed groups.",
        True, 30
    ),
    ErrorType.TOO_MANY_REQUESTS: (
        "Too many requests",
        "The provider is throttling requests. Retry the failed groups in a moment.",
        True, 60
    ),
    ErrorType.CONNECTION_ERROR: (
        "Connection failed",
        "Could not reach the completion service. Check the network and base URL.",
        True, 5
    ),
    ErrorType.TIMEOUT: (
        "Request timed out",
        "Generation took too long. Lower the sample percentage or split the group into smaller column batches.",
        True, 10
    ),
    ErrorType.DNS_ERROR: (
        "DNS resolution failed",
        "Could not resolve the API hostname. Check the base URL and network settings.",
        True, 5
    ),
    ErrorType.SSL_ERROR: (
        "SSL/TLS error",
        "Secure connection failed. This might be a certificate issue or network problem.",
        True, 5
    ),
    ErrorType.MODEL_NOT_FOUND: (
        "Model not found",
        "The configured model is not available. Check the model name and your access.",
        False, 0
    ),
    ErrorType.SERVICE_UNAVAILABLE: (
        "Service unavailable",
        "The completion service is temporarily down. Retry later.",
        True, 60
    ),
    ErrorType.CONTENT_FILTER: (
        "Content filtered",
        "The provider blocked the sampled responses. Resample or exclude the offending rows.",
        False, 0
    ),
    ErrorType.CONTEXT_LENGTH_EXCEEDED: (
        "Input too long",
        "The sampled responses exceed the model's context. Lower the sample percentage or batch fewer columns.",
        False, 0
    ),
    ErrorType.INVALID_REQUEST: (
        "Invalid request",
        "The request was rejected. Check the model settings.",
        False, 0
    ),
    ErrorType.SERVER_ERROR: (
        "Server error (500)",
        "The provider encountered an internal error. Retry the generation.",
        True, 10
    ),
    ErrorType.BAD_GATEWAY: (
        "Bad gateway (502/504)",
        "The provider gateway is having issues. Wait a moment and retry.",
        True, 30
    ),
    ErrorType.UNKNOWN: (
        "Unknown error",
        "An unexpected error occurred. Check the error details for more information.",
        True, 5
    ),
}

# Checked in order; the first matching rule wins
_CLASSIFICATION_RULES = [
    (ErrorType.INSUFFICIENT_QUOTA, ['quota', 'billing', 'insufficient_quota']),
    (ErrorType.RATE_LIMIT, ['429', 'rate limit', 'rate_limit', 'ratelimit', 'too many requests']),
    (ErrorType.CONTEXT_LENGTH_EXCEEDED, ['context length', 'context_length', 'maximum context', 'too long', 'token limit']),
    (ErrorType.TIMEOUT, ['timeout', 'timed out', 'deadline']),
    (ErrorType.DNS_ERROR, ['dns', 'getaddrinfo', 'nodename', 'name resolution']),
    (ErrorType.SSL_ERROR, ['ssl', 'certificate', 'tls']),
    (ErrorType.CONNECTION_ERROR, ['connection', 'connect', 'refused', 'unreachable']),
    (ErrorType.SERVICE_UNAVAILABLE, ['503', 'service unavailable', 'overloaded']),
    (ErrorType.BAD_GATEWAY, ['502', 'bad gateway', '504', 'gateway']),
    (ErrorType.SERVER_ERROR, ['500', 'internal server error', 'internalserver', 'server error']),
    (ErrorType.CONTENT_FILTER, ['content filter', 'content_filter', 'blocked', 'flagged', 'safety']),
    (ErrorType.MODEL_NOT_FOUND, ['model', 'not found', 'notfound', 'does not exist', '404']),
    (ErrorType.INVALID_REQUEST, ['400', 'bad request', 'invalid request', 'invalid_request']),
]

# ==========================================
# ERROR CLASSIFIER
# ==========================================

class ErrorClassifier:
    """Classifies exceptions raised by a completion service into actionable error types"""

    @staticmethod
    def classify(error: Exception) -> ErrorInfo:
        """Classify an exception and return detailed error info"""
        # Exception class names (APITimeoutError, RateLimitError, ...) carry signal too
        error_str = f"{type(error).__name__} {error}".lower()
        full_error = f"{type(error).__name__}: {error}"

        error_type = ErrorType.UNKNOWN

        if any(x in error_str for x in ['401', 'unauthorized', 'authentication', 'api key', 'api_key']):
            if 'invalid' in error_str or 'incorrect' in error_str:
                error_type = ErrorType.INVALID_API_KEY
            else:
                error_type = ErrorType.AUTH_ERROR
        else:
            for candidate, needles in _CLASSIFICATION_RULES:
                if any(x in error_str for x in needles):
                    error_type = candidate
                    break

        if error_type == ErrorType.RATE_LIMIT and 'too many' in error_str:
            error_type = ErrorType.TOO_MANY_REQUESTS

        message, suggestion, is_retryable, retry_delay = ERROR_SUGGESTIONS[error_type]

        return ErrorInfo(
            error_type=error_type,
            message=message,
            suggestion=suggestion,
            is_retryable=is_retryable,
            retry_delay=retry_delay,
            original_error=full_error
        )

    @staticmethod
    def classify_from_string(error_str: str) -> ErrorInfo:
        """Classify an error from its string representation"""
        return ErrorClassifier.classify(Exception(error_str))

# ==========================================
# ERROR FORMATTING
# ==========================================

def format_error_for_display(error_info: ErrorInfo, show_original: bool = False) -> str:
    """Format error info for display next to a failed question group"""
    lines = [
        f"**{error_info.message}**",
        "",
        f"💡 {error_info.suggestion}",
    ]

    if error_info.is_retryable:
        lines.append("")
        lines.append(f"🔄 Retry this group (suggested wait: {error_info.retry_delay}s)")

    if show_original:
        lines.append("")
        lines.append(f"```\n{error_info.original_error}\n```")

    return "\n".join(lines)


def format_error_summary(errors: List[Dict]) -> Dict[str, Dict]:
    """Summarize per-group failures by error type.

    Each item is a dict with ``error_type``, ``error_message`` and ``group_id``.
    """
    summary = {}
    for err in errors:
        error_type = err.get('error_type', 'unknown')
        if error_type not in summary:
            summary[error_type] = {
                'count': 0,
                'message': err.get('error_message', 'Unknown error'),
                'groups': []
            }
        summary[error_type]['count'] += 1
        summary[error_type]['groups'].append(err.get('group_id'))

    return summary
