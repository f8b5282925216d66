"""
Completion Endpoints
OpenAI-compatible endpoints and the request rules that differ between models
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Optional


class LLMProvider(Enum):
    """Endpoints the completion service can be pointed at"""
    OPENAI = "OpenAI"
    OPENROUTER = "OpenRouter"
    OLLAMA = "Ollama (Local)"
    CUSTOM = "Custom Endpoint"


@dataclass(frozen=True)
class ProviderConfig:
    """How to reach an endpoint and what it accepts"""
    base_url: Optional[str]
    default_model: str
    requires_api_key: bool = True
    json_mode: bool = True
    default_headers: Dict[str, str] = field(default_factory=dict)


PROVIDER_CONFIGS = {
    LLMProvider.OPENAI: ProviderConfig(
        base_url=None,
        default_model="gpt-4o",
    ),
    LLMProvider.OPENROUTER: ProviderConfig(
        base_url="https://openrouter.ai/api/v1",
        default_model="openai/gpt-4o",
        default_headers={"X-Title": "Verbatim Coder"},
    ),
    # Local servers rarely honour response_format
    LLMProvider.OLLAMA: ProviderConfig(
        base_url="http://localhost:11434/v1",
        default_model="",
        requires_api_key=False,
        json_mode=False,
    ),
    LLMProvider.CUSTOM: ProviderConfig(
        base_url=None,
        default_model="custom-model",
        requires_api_key=False,
        json_mode=False,
    ),
}

REASONING_MODEL_MARKERS = ("gpt-5", "o1", "o3")


def is_reasoning_model(model_name: str) -> bool:
    """Reasoning models take no temperature and no response_format"""
    return any(marker in model_name.lower() for marker in REASONING_MODEL_MARKERS)


def supports_json_mode(provider: LLMProvider, model_name: str) -> bool:
    return PROVIDER_CONFIGS[provider].json_mode and not is_reasoning_model(model_name)


def token_limit_param(model_name: str) -> str:
    """Name of the output-token limit parameter the model accepts"""
    return "max_completion_tokens" if is_reasoning_model(model_name) else "max_tokens"
