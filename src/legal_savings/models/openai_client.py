"""OpenAI text-generation client used for record analysis and clustering."""

from __future__ import annotations

import json
import re
import threading
import time
from typing import Any, Protocol

from openai import APIError, APITimeoutError, BadRequestError, OpenAI, RateLimitError
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    stop_any,
    wait_exponential,
    wait_random,
)

Messages = list[dict[str, str]]

_FENCED_BLOCK = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?(.*?)\n?[ \t]*```", re.DOTALL)


class CollaboratorTimeoutError(TimeoutError):
    """Raised when the text-generation collaborator does not answer in time."""


class TextGenerationClient(Protocol):
    """Prompt in, text out."""

    def generate(self, prompt: str | Messages, *, timeout: float | None = None) -> str:
        """Return the collaborator's text response for a prompt or message list."""


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced code block, or the stripped text when unfenced."""

    match = _FENCED_BLOCK.search(text)
    if match is not None:
        return match.group(1).strip()
    return text.replace("```", "").strip()


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object from collaborator text, tolerating surrounding code fences."""

    cleaned = strip_code_fences(text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Response was not valid JSON: {cleaned[:200]!r}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Expected JSON object, got {type(payload).__name__}.")
    return payload


def _as_messages(prompt: str | Messages) -> Messages:
    if isinstance(prompt, str):
        return [{"role": "user", "content": prompt}]
    return [dict(message) for message in prompt]


class OpenAITextClient:
    """Text-focused wrapper around OpenAI chat completions."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str | None = None,
        temperature: float = 0.0,
        max_retries: int = 4,
        backoff_seconds: float = 1.0,
        client: Any | None = None,
    ) -> None:
        # SDK-level retries are disabled; tenacity owns the retry policy.
        self._client = client or OpenAI(api_key=api_key, base_url=base_url or None, max_retries=0)
        self._model = model
        self._temperature = temperature
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds
        self._metrics_lock = threading.Lock()
        self._request_count = 0
        self._retry_count = 0
        self._timeout_count = 0
        self._prompt_tokens = 0
        self._completion_tokens = 0
        self._total_tokens = 0

    def _is_retryable_openai_error(self, exc: BaseException) -> bool:
        """Return whether an OpenAI exception should trigger retry/backoff."""

        if isinstance(exc, (RateLimitError, APITimeoutError)):
            return True
        if isinstance(exc, BadRequestError):
            return False
        return isinstance(exc, APIError)

    def _build_retryer(self, deadline: float | None) -> Retrying:
        stop = stop_after_attempt(max(1, self._max_retries))
        backoff = wait_exponential(
            multiplier=self._backoff_seconds,
            min=self._backoff_seconds,
            max=max(self._backoff_seconds, self._backoff_seconds * 8),
        ) + wait_random(0.0, 0.25)

        def wait_within_deadline(retry_state) -> float:
            delay = backoff(retry_state)
            if deadline is None:
                return delay
            return max(0.0, min(delay, deadline - time.monotonic()))

        if deadline is not None:
            stop = stop_any(stop, lambda retry_state: time.monotonic() >= deadline)
        return Retrying(
            retry=retry_if_exception(self._is_retryable_openai_error),
            wait=wait_within_deadline,
            stop=stop,
            reraise=True,
        )

    def _timed_out(self, attempt_count: int, timeout: float | None) -> CollaboratorTimeoutError:
        with self._metrics_lock:
            self._timeout_count += 1
            self._retry_count += max(0, attempt_count - 1)
        return CollaboratorTimeoutError(
            f"Text generation timed out after {attempt_count} attempt(s) (timeout={timeout}s)."
        )

    def generate(self, prompt: str | Messages, *, timeout: float | None = None) -> str:
        """Call the chat completions API and return the message text.

        Repeating a call is safe: the request carries no server-side state.
        """

        messages = _as_messages(prompt)
        # The timeout is a deadline for the whole call, retries and backoff included.
        deadline = time.monotonic() + timeout if timeout is not None else None
        response = None
        attempt_count = 0
        try:
            for attempt in self._build_retryer(deadline):
                with attempt:
                    attempt_count += 1
                    request_options = {}
                    if deadline is not None:
                        remaining = deadline - time.monotonic()
                        if remaining <= 0:
                            raise CollaboratorTimeoutError("Deadline passed before the request.")
                        request_options["timeout"] = remaining
                    response = self._client.chat.completions.create(
                        model=self._model,
                        temperature=self._temperature,
                        messages=messages,
                        **request_options,
                    )
        except (APITimeoutError, CollaboratorTimeoutError) as exc:
            raise self._timed_out(attempt_count, timeout) from exc
        except APIError as exc:
            if (
                deadline is not None
                and time.monotonic() >= deadline
                and self._is_retryable_openai_error(exc)
            ):
                raise self._timed_out(attempt_count, timeout) from exc
            raise

        if response is None:
            raise ValueError("OpenAI response missing after retries.")

        usage = getattr(response, "usage", None)
        with self._metrics_lock:
            self._request_count += 1
            self._retry_count += max(0, attempt_count - 1)
            self._prompt_tokens += int(getattr(usage, "prompt_tokens", 0) or 0)
            self._completion_tokens += int(getattr(usage, "completion_tokens", 0) or 0)
            self._total_tokens += int(getattr(usage, "total_tokens", 0) or 0)

        content = response.choices[0].message.content
        if not content:
            raise ValueError("Model returned empty content.")
        return content

    def metrics_snapshot(self) -> dict:
        """Return cumulative request/usage metrics for this client instance."""

        with self._metrics_lock:
            return {
                "request_count": self._request_count,
                "retry_count": self._retry_count,
                "timeout_count": self._timeout_count,
                "prompt_tokens": self._prompt_tokens,
                "completion_tokens": self._completion_tokens,
                "total_tokens": self._total_tokens,
                "model": self._model,
            }
