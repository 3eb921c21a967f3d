"""Text-generation client abstractions."""

from legal_savings.models.openai_client import (
    CollaboratorTimeoutError,
    OpenAITextClient,
    TextGenerationClient,
    parse_json_object,
    strip_code_fences,
)

__all__ = [
    "CollaboratorTimeoutError",
    "OpenAITextClient",
    "TextGenerationClient",
    "parse_json_object",
    "strip_code_fences",
]
