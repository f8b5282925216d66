"""
Question Type Prompt Registry
Central registry of question-type templates used to build codeframe prompts
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from errors import UnknownQuestionTypeError


@dataclass
class QuestionTypeTemplate:
    """Definition of a registered question type"""
    id: str                    # "unaided-awareness"
    name: str                  # Human-readable name
    description: str           # What kind of question this covers
    category: str              # Category tagged onto generated entries
    system_prompt: str
    user_prompt: str           # Formatted with {sample_size} and {responses}

    def render_user_prompt(self, responses: Sequence[str]) -> str:
        return self.user_prompt.format(
            sample_size=len(responses),
            responses="\n".join(responses)
        )


@dataclass
class PromptPair:
    """Rendered prompts for one completion call"""
    system_prompt: str
    user_prompt: str


class QuestionTypeRegistry:
    """Central registry for question-type templates"""

    _templates: Dict[str, QuestionTypeTemplate] = {}

    @classmethod
    def register(cls, template: QuestionTypeTemplate) -> None:
        """Register (or replace) a question type template"""
        cls._templates[template.id] = template

    @classmethod
    def unregister(cls, type_id: str) -> None:
        cls._templates.pop(type_id, None)

    @classmethod
    def get(cls, type_id: str) -> Optional[QuestionTypeTemplate]:
        """Get a template by ID"""
        return cls._templates.get(type_id)

    @classmethod
    def require(cls, type_id: str) -> QuestionTypeTemplate:
        """Get a template by ID or raise UnknownQuestionTypeError"""
        template = cls._templates.get(type_id)
        if template is None:
            raise UnknownQuestionTypeError(type_id)
        return template

    @classmethod
    def get_all(cls) -> Dict[str, QuestionTypeTemplate]:
        """Get all registered templates"""
        return cls._templates.copy()

    @classmethod
    def get_ids(cls) -> List[str]:
        return list(cls._templates.keys())


def build_prompts(question_type: str, sampled_responses: Sequence[str]) -> PromptPair:
    """Render the system and user prompts for a question type.

    Raises:
        UnknownQuestionTypeError: if no template is registered for question_type
    """
    template = QuestionTypeRegistry.require(question_type)
    return PromptPair(
        system_prompt=template.system_prompt,
        user_prompt=template.render_user_prompt(sampled_responses)
    )


# ==========================================
# BUILT-IN QUESTION TYPES
# ==========================================

UNAIDED_AWARENESS_SYSTEM = """You are a market research coding specialist. Respondents have listed brands they recall when asked for unaided awareness. Generate a codeframe where each code ID corresponds to a unique brand mentioned.

For each code, provide:
- A unique code ID (e.g., C001, C002, ...)
- The brand name as the label
- A clear definition
- Sample mentions from the responses

Return valid JSON in this format:
{
  "codeframe": [
    {
      "code": "C001",
      "label": "BrandName",
      "definition": "Mentions of BrandName in any form",
      "examples": ["exact mentions from responses"]
    }
  ]
}"""

BRAND_DESCRIPTIONS_SYSTEM = """You are a market research coding specialist. Respondents have described a brand's attributes. Generate a codeframe where each code corresponds to a unique descriptive theme (e.g., "Customer Service," "Value," "Innovation").

For each code, provide:
- A unique code ID (e.g., C001, C002, ...)
- A concise label (under 3 words, title case)
- A clear definition of what this theme encompasses
- Sample responses illustrating this theme

Return valid JSON in this format:
{
  "codeframe": [
    {
      "code": "C001",
      "label": "Customer Service",
      "definition": "Comments about staff helpfulness, service quality, and customer support",
      "examples": ["exact quotes from responses"]
    }
  ]
}"""

MISCELLANEOUS_SYSTEM = """You are a market research coding specialist. Generate a comprehensive codeframe for miscellaneous open-ended responses across varied topics.

For each code, provide:
- A unique code ID (e.g., C001, C002, ...)
- A concise label (under 3 words, title case)
- A clear definition of what this theme encompasses
- Sample responses illustrating this theme

Return valid JSON in this format:
{
  "codeframe": [
    {
      "code": "C001",
      "label": "Theme Label",
      "definition": "Clear description of what this code captures",
      "examples": ["exact quotes from responses"]
    }
  ]
}"""

DEFAULT_QUESTION_TYPES = [
    QuestionTypeTemplate(
        id="unaided-awareness",
        name="Unaided Brand Awareness",
        description="Respondents list brands they are aware of",
        category="brand_awareness",
        system_prompt=UNAIDED_AWARENESS_SYSTEM,
        user_prompt=(
            "Here are {sample_size} sample responses from unaided brand awareness questions "
            "(each line lists one or more brands mentioned by respondents):\n\n"
            "{responses}\n\n"
            "Generate a codeframe for these brand mentions."
        ),
    ),
    QuestionTypeTemplate(
        id="brand-descriptions",
        name="Brand Description",
        description="Respondents describe how they see a brand",
        category="brand_description",
        system_prompt=BRAND_DESCRIPTIONS_SYSTEM,
        user_prompt=(
            "Here are {sample_size} sample responses where respondents described brand attributes:\n\n"
            "{responses}\n\n"
            "Generate a comprehensive codeframe for these brand descriptions."
        ),
    ),
    QuestionTypeTemplate(
        id="miscellaneous",
        name="Miscellaneous",
        description="Any other open-ended question",
        category="miscellaneous",
        system_prompt=MISCELLANEOUS_SYSTEM,
        user_prompt=(
            "Here are {sample_size} sample responses from various open-ended questions:\n\n"
            "{responses}\n\n"
            "Generate a comprehensive codeframe that captures the variety of topics in these responses."
        ),
    ),
]


def register_default_question_types() -> None:
    """Register the built-in question types (idempotent)"""
    for template in DEFAULT_QUESTION_TYPES:
        QuestionTypeRegistry.register(template)


register_default_question_types()
