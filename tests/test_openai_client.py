"""Tests for the OpenAI text client and JSON helpers."""

from __future__ import annotations

import time
from types import SimpleNamespace

import httpx
import pytest
from openai import APITimeoutError, BadRequestError, InternalServerError, RateLimitError

from legal_savings.models import (
    CollaboratorTimeoutError,
    OpenAITextClient,
    parse_json_object,
    strip_code_fences,
)

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _status_error(cls, status: int):
    return cls("error", response=httpx.Response(status, request=_REQUEST), body=None)


class _FakeCompletions:
    def __init__(self, outcomes: list, delay: float = 0.0):
        self.outcomes = list(outcomes)
        self.delay = delay
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            time.sleep(self.delay)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=outcome))],
            usage=SimpleNamespace(prompt_tokens=3, completion_tokens=5, total_tokens=8),
        )


def _client(
    outcomes: list,
    max_retries: int = 3,
    delay: float = 0.0,
) -> tuple[OpenAITextClient, _FakeCompletions]:
    completions = _FakeCompletions(outcomes, delay=delay)
    sdk = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    client = OpenAITextClient(
        api_key="",
        model="test-model",
        max_retries=max_retries,
        backoff_seconds=0.0,
        client=sdk,
    )
    return client, completions


class TestJsonHelpers:
    def test_strip_code_fences_variants(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('Sure:\n```\n{"a": 1}\n```\nDone.') == '{"a": 1}'
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'

    def test_parse_json_object(self):
        assert parse_json_object('```json\n{"topics": []}\n```') == {"topics": []}
        with pytest.raises(ValueError):
            parse_json_object("[1, 2]")
        with pytest.raises(ValueError):
            parse_json_object("no json here")


class TestOpenAITextClient:
    def test_string_prompt_becomes_user_message(self):
        client, completions = _client(["hello"])
        assert client.generate("Summarize this.") == "hello"
        call = completions.calls[0]
        assert call["messages"] == [{"role": "user", "content": "Summarize this."}]
        assert call["model"] == "test-model"
        assert "timeout" not in call

    def test_timeout_is_forwarded_per_request(self):
        client, completions = _client(["ok"])
        client.generate([{"role": "system", "content": "s"}], timeout=12.5)
        assert 0 < completions.calls[0]["timeout"] <= 12.5

    def test_retries_rate_limit_then_succeeds(self):
        client, completions = _client([_status_error(RateLimitError, 429), "done"])
        assert client.generate("q") == "done"
        assert len(completions.calls) == 2
        metrics = client.metrics_snapshot()
        assert metrics["retry_count"] == 1
        assert metrics["request_count"] == 1
        assert metrics["total_tokens"] == 8

    def test_bad_request_is_not_retried(self):
        client, completions = _client([_status_error(BadRequestError, 400), "unused"])
        with pytest.raises(BadRequestError):
            client.generate("q")
        assert len(completions.calls) == 1

    def test_exhausted_timeouts_raise_collaborator_timeout(self):
        timeouts = [APITimeoutError(request=_REQUEST) for _ in range(3)]
        client, completions = _client(timeouts, max_retries=3)
        with pytest.raises(CollaboratorTimeoutError) as excinfo:
            client.generate("q", timeout=30)
        assert isinstance(excinfo.value, TimeoutError)
        assert len(completions.calls) == 3
        assert client.metrics_snapshot()["timeout_count"] == 1

    def test_slow_server_errors_stop_at_the_deadline(self):
        errors = [_status_error(InternalServerError, 500) for _ in range(10)]
        client, completions = _client(errors, max_retries=10, delay=0.3)
        started = time.monotonic()
        with pytest.raises(CollaboratorTimeoutError):
            client.generate("q", timeout=0.5)
        assert time.monotonic() - started < 1.0
        assert len(completions.calls) <= 2
        assert all(call["timeout"] <= 0.5 for call in completions.calls)
        if len(completions.calls) == 2:
            assert completions.calls[1]["timeout"] < 0.5
        assert client.metrics_snapshot()["timeout_count"] == 1

    def test_empty_content_raises(self):
        client, _ = _client([""])
        with pytest.raises(ValueError):
            client.generate("q")
