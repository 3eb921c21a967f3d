"""LangSmith tracing for the text-generation client."""

from __future__ import annotations

import logging
from typing import Any

from openai import OpenAI

from legal_savings.config import Settings
from legal_savings.models import OpenAITextClient

logger = logging.getLogger(__name__)


def get_langsmith_status(settings: Settings) -> dict[str, Any]:
    """Return effective tracing status without exposing the API key."""

    return {
        "enabled": bool(settings.langsmith_tracing),
        "project": settings.langsmith_project,
        "api_key_present": bool(settings.langsmith_api_key.strip()),
    }


def maybe_wrap_openai_client(client: Any, settings: Settings) -> tuple[Any, bool]:
    """Wrap an OpenAI SDK client with the LangSmith tracer when enabled and installed."""

    status = get_langsmith_status(settings)
    if not status["enabled"] or not status["api_key_present"]:
        return client, False

    try:
        from langsmith.wrappers import wrap_openai
    except ImportError:
        logger.warning("LangSmith tracing requested but the langsmith package is not installed.")
        return client, False

    try:
        wrapped = wrap_openai(client)
    except Exception:
        logger.warning("LangSmith wrapping failed; continuing without tracing.", exc_info=True)
        return client, False
    return wrapped, True


def build_text_client(settings: Settings) -> OpenAITextClient:
    """Construct the configured OpenAI text client, traced when LangSmith is enabled."""

    sdk_client = OpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.resolved_openai_base_url() or None,
        max_retries=0,
    )
    sdk_client, traced = maybe_wrap_openai_client(sdk_client, settings)
    if traced:
        logger.info("LangSmith tracing enabled for project %r.", settings.langsmith_project)
    return OpenAITextClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        temperature=settings.openai_temperature,
        max_retries=settings.client_max_retries,
        backoff_seconds=settings.client_backoff_seconds,
        client=sdk_client,
    )
