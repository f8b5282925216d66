"""
Verbatim Coder Configuration
App-wide constants and defaults
"""

import os

# App Info
APP_NAME = "Verbatim Coder"
APP_VERSION = "1.0"
APP_DESCRIPTION = "AI codeframe generation for survey open-ends"


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value not in (None, "") else default


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value not in (None, "") else default


# Sampling
DEFAULT_SAMPLE_PERCENTAGE = _env_float("VERBATIM_SAMPLE_PERCENTAGE", 30.0)
DEFAULT_MINIMUM_SAMPLE = _env_int("VERBATIM_MINIMUM_SAMPLE", 20)

# Multi-column answers are joined with this so they stay readable in prompts
RESPONSE_SEPARATOR = " ∥ "

# Orchestration
COLUMN_BATCH_SIZE = _env_int("VERBATIM_COLUMN_BATCH_SIZE", 3)
DEFAULT_MAX_CONCURRENCY = _env_int("VERBATIM_MAX_CONCURRENCY", 5)
DEFAULT_CODING_BATCH_SIZE = _env_int("VERBATIM_CODING_BATCH_SIZE", 25)

# Completion service defaults
DEFAULT_MODEL = os.environ.get("VERBATIM_MODEL", "gpt-4o")
DEFAULT_TEMPERATURE = _env_float("VERBATIM_TEMPERATURE", 0.3)
DEFAULT_MAX_TOKENS = _env_int("VERBATIM_MAX_TOKENS", 3000)

# HTTP Client Settings
HTTP_MAX_CONNECTIONS = 100
HTTP_MAX_KEEPALIVE = 20
HTTP_KEEPALIVE_EXPIRY = 30.0
HTTP_TIMEOUT = 120.0
HTTP_CONNECT_TIMEOUT = 10.0

# Brand hierarchy
BRAND_CATEGORY = "brand_awareness"
PARENT_NUMERIC_START = 1000
PARENT_NUMERIC_STEP = 100
CHILD_NUMERIC_OFFSET = 10
ALIAS_NUMERIC_START = 9000
BRAND_FAMILIES_FILE = os.environ.get("VERBATIM_BRAND_FAMILIES_FILE")

# Seed list of brand families used for hierarchy suggestions
DEFAULT_BRAND_FAMILIES = [
    {
        "parent": "Coca-Cola Company",
        "keywords": ["coca-cola", "coke", "diet coke", "coke zero", "sprite", "fanta"],
    },
    {
        "parent": "PepsiCo",
        "keywords": ["pepsi", "diet pepsi", "mountain dew", "7up", "sierra mist"],
    },
    {
        "parent": "Unilever",
        "keywords": ["dove", "axe", "lipton", "knorr", "hellmann"],
    },
    {
        "parent": "P&G",
        "keywords": ["tide", "pampers", "gillette", "olay", "crest"],
    },
]

# Logging
LOG_LEVEL = os.environ.get("VERBATIM_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
