"""Per-conversation analysis: extract facets, estimate durations, store results back."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from legal_savings.io import RecordStore
from legal_savings.models import TextGenerationClient, parse_json_object
from legal_savings.pipeline.duration import estimate_chat_duration
from legal_savings.pipeline.time_savings import compute_time_savings
from legal_savings.prompts import RECORD_ANALYSIS_SYSTEM_PROMPT, build_record_analysis_user_prompt
from legal_savings.schemas import (
    Category,
    Complexity,
    ConversationRecord,
    DerivedMetadata,
    TimeSavingsBreakdown,
)

logger = logging.getLogger(__name__)


class RecordAnalysisError(ValueError):
    """Raised when analysis of a single conversation record fails validation."""


class _RecordFacetPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    topics: list[str] = Field(min_length=1)
    questions: list[str] = Field(default_factory=list)
    complexity: Complexity


@dataclass(frozen=True)
class RecordAnalysis:
    """Analysis outputs for one record, ready to be written back."""

    record_id: str
    derived_metadata: DerivedMetadata
    time_savings: TimeSavingsBreakdown

    def update_fields(self) -> dict[str, Any]:
        return {
            "derived_metadata": self.derived_metadata,
            "time_savings": self.time_savings,
        }


@dataclass
class AnalysisBatchResult:
    """Outcome of analyzing every record in one category."""

    category: str
    dry_run: bool
    analyses: list[RecordAnalysis] = field(default_factory=list)
    failures: list[dict] = field(default_factory=list)
    updated_count: int = 0

    @property
    def analyzed_ids(self) -> list[str]:
        return [analysis.record_id for analysis in self.analyses]


def extract_conversation_facets(
    record: ConversationRecord,
    text_client: TextGenerationClient,
    *,
    timeout: float | None = None,
) -> _RecordFacetPayload:
    """Ask the collaborator for topics, questions and complexity of one record."""

    text = text_client.generate(
        [
            {"role": "system", "content": RECORD_ANALYSIS_SYSTEM_PROMPT},
            {"role": "user", "content": build_record_analysis_user_prompt(record)},
        ],
        timeout=timeout,
    )
    try:
        return _RecordFacetPayload.model_validate(parse_json_object(text))
    except (ValueError, ValidationError) as exc:
        raise RecordAnalysisError(
            f"Analysis payload failed validation for record '{record.id}': {exc}"
        ) from exc


def _created_at(record: ConversationRecord) -> datetime:
    if record.derived_metadata is not None:
        return record.derived_metadata.created_at
    if record.turns:
        return record.turns[0].timestamp
    return datetime.now(UTC)


def analyze_record(
    record: ConversationRecord,
    text_client: TextGenerationClient,
    *,
    timeout: float | None = None,
) -> RecordAnalysis:
    """Analyze one record without touching storage."""

    facets = extract_conversation_facets(record, text_client, timeout=timeout)
    chat_duration = estimate_chat_duration(record.turns)
    derived = DerivedMetadata(
        created_at=_created_at(record),
        chat_duration_minutes=chat_duration,
        complexity=facets.complexity,
        topics=facets.topics,
        questions=facets.questions,
    )
    savings = compute_time_savings(
        chat_duration,
        derived.topics,
        derived.questions,
        derived.complexity,
    )
    return RecordAnalysis(record_id=record.id, derived_metadata=derived, time_savings=savings)


def _failure(record_id: str, stage: str, exc: Exception) -> dict:
    return {
        "record_id": record_id,
        "stage": stage,
        "error_type": type(exc).__name__,
        "error": str(exc),
    }


def analyze_records(
    records: list[ConversationRecord],
    text_client: TextGenerationClient,
    *,
    max_concurrency: int = 1,
    timeout: float | None = None,
    progress_callback: Callable[[int, int], None] | None = None,
) -> tuple[list[RecordAnalysis], list[dict]]:
    """Analyze records with bounded parallelism.

    A failing record is logged and reported in the failure list; it never stops the batch.
    Results come back in input order once every record has resolved.
    """

    if max_concurrency <= 0:
        raise ValueError(f"max_concurrency must be positive, got {max_concurrency}.")

    results: dict[str, RecordAnalysis] = {}
    failures: dict[str, dict] = {}
    total = len(records)
    done = 0

    def _collect(record_id: str, run: Callable[[], RecordAnalysis]) -> None:
        nonlocal done
        try:
            results[record_id] = run()
        except Exception as exc:
            logger.warning("Analysis failed for record %s: %s", record_id, exc, exc_info=True)
            failures[record_id] = _failure(record_id, "analysis", exc)
        done += 1
        if progress_callback is not None:
            progress_callback(done, total)

    if max_concurrency == 1 or total <= 1:
        for record in records:
            _collect(
                record.id,
                lambda record=record: analyze_record(record, text_client, timeout=timeout),
            )
    else:
        with ThreadPoolExecutor(max_workers=max_concurrency) as pool:
            future_to_id = {
                pool.submit(analyze_record, record, text_client, timeout=timeout): record.id
                for record in records
            }
            for future in as_completed(future_to_id):
                _collect(future_to_id[future], future.result)

    ordered = [results[record.id] for record in records if record.id in results]
    ordered_failures = [failures[record.id] for record in records if record.id in failures]
    return ordered, ordered_failures


def analyze_and_update_records(
    store: RecordStore,
    category: Category,
    text_client: TextGenerationClient,
    *,
    dry_run: bool = False,
    max_concurrency: int = 1,
    timeout: float | None = None,
    progress_callback: Callable[[int, int], None] | None = None,
) -> AnalysisBatchResult:
    """Analyze every record in a category and write results back unless dry-running."""

    records = store.load_records(category)
    logger.info(
        "Analyzing %d %s records%s.", len(records), category, " (dry run)" if dry_run else ""
    )
    analyses, failures = analyze_records(
        records,
        text_client,
        max_concurrency=max_concurrency,
        timeout=timeout,
        progress_callback=progress_callback,
    )
    result = AnalysisBatchResult(category=category, dry_run=dry_run, failures=failures)

    for analysis in analyses:
        result.analyses.append(analysis)
        if dry_run:
            logger.info("Dry run: would update record %s.", analysis.record_id)
            continue
        try:
            store.update_record(category, analysis.record_id, analysis.update_fields())
        except Exception as exc:
            logger.warning("Update failed for record %s: %s", analysis.record_id, exc)
            result.failures.append(_failure(analysis.record_id, "update", exc))
            continue
        result.updated_count += 1

    logger.info(
        "Analysis finished for %s: %d analyzed, %d updated, %d failed.",
        category,
        len(result.analyses),
        result.updated_count,
        len(result.failures),
    )
    return result
