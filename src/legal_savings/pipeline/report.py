"""Assemble a category report from analyzed conversation records."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from legal_savings.io import RecordStore
from legal_savings.models import TextGenerationClient
from legal_savings.pipeline.charts import build_chart_series
from legal_savings.pipeline.clustering import cluster_faqs, cluster_topics
from legal_savings.schemas import (
    Category,
    ConversationRecord,
    PerConversationSavings,
    Report,
    TimeSavingsSummary,
)

logger = logging.getLogger(__name__)

RENDER_TEMPLATE_NAME = "legal_analysis_email"


class MissingTimeSavingsError(ValueError):
    """Raised when a record reaches report assembly before it has been analyzed."""

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(
            f"Conversation record '{record_id}' is missing time savings data. "
            "Run analysis for this category first."
        )


def collect_topics(records: Sequence[ConversationRecord]) -> list[str]:
    """Flatten stored topics across records, keeping repeats so frequencies stay meaningful."""

    topics: list[str] = []
    for record in records:
        if record.derived_metadata is not None:
            topics.extend(record.derived_metadata.topics)
    return topics


def collect_questions(records: Sequence[ConversationRecord]) -> list[str]:
    """Return the text of every user question turn across records."""

    return [
        turn.text
        for record in records
        for turn in record.turns
        if turn.role == "user" and turn.kind == "question"
    ]


def build_per_conversation(record: ConversationRecord) -> PerConversationSavings:
    """Copy stored analysis values for one record; nothing is recomputed here."""

    if record.time_savings is None or record.derived_metadata is None:
        raise MissingTimeSavingsError(record.id)
    savings = record.time_savings
    return PerConversationSavings(
        id=record.id,
        chat_duration=record.derived_metadata.chat_duration_minutes,
        traditional_duration=savings.traditional_duration_minutes,
        time_saved=savings.time_saved_minutes,
        factors=savings.factors.model_copy(),
    )


def summarize_time_savings(rows: Sequence[PerConversationSavings]) -> TimeSavingsSummary:
    """Sum per-conversation minutes; the average is 0 when there are no rows."""

    total_saved = sum(row.time_saved for row in rows)
    return TimeSavingsSummary(
        total_time_saved=total_saved,
        average_time_saved_per_conversation=total_saved / len(rows) if rows else 0.0,
        total_traditional_time=sum(row.traditional_duration for row in rows),
        total_ai_time=sum(row.chat_duration for row in rows),
    )


def assemble_report(
    records: Sequence[ConversationRecord],
    text_client: TextGenerationClient,
    *,
    category: Category,
    timeout: float | None = None,
) -> Report:
    """Build one internally consistent report from analyzed records.

    Every record is checked before the collaborator is called, so a missing analysis fails
    the whole report without spending any clustering requests. An empty batch returns an
    empty report and makes no collaborator calls.
    """

    if not records:
        logger.info("No %s records to report on; returning an empty report.", category)
        return Report(category=category)

    per_conversation = [build_per_conversation(record) for record in records]
    summary = summarize_time_savings(per_conversation)

    topics = collect_topics(records)
    questions = collect_questions(records)
    logger.info(
        "Clustering %d topics and %d questions from %d %s records.",
        len(topics),
        len(questions),
        len(records),
        category,
    )
    topic_clusters = cluster_topics(topics, text_client, timeout=timeout)
    faq_clusters = cluster_faqs(questions, text_client, timeout=timeout)

    report = Report(
        category=category,
        topic_clusters=topic_clusters,
        faq_clusters=faq_clusters,
        time_savings_summary=summary,
        per_conversation=per_conversation,
    )
    report.chart_series = build_chart_series(report)
    return report


def generate_report(
    store: RecordStore,
    category: Category,
    text_client: TextGenerationClient,
    *,
    timeout: float | None = None,
) -> Report:
    """Load the category's current records and assemble a fresh report."""

    records = store.load_records(category)
    logger.info("Loaded %d %s records for reporting.", len(records), category)
    return assemble_report(records, text_client, category=category, timeout=timeout)


def build_render_payload(report: Report) -> dict[str, Any]:
    """Return the camelCase payload handed to the report renderer."""

    return {
        "template": RENDER_TEMPLATE_NAME,
        "props": report.model_dump(mode="json", by_alias=True),
    }
