"""Observability helpers."""

from legal_savings.observability.langsmith import (
    build_text_client,
    get_langsmith_status,
    maybe_wrap_openai_client,
)

__all__ = [
    "build_text_client",
    "get_langsmith_status",
    "maybe_wrap_openai_client",
]
