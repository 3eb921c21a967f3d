"""Tests for report assembly."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from legal_savings.io import JsonConversationStore
from legal_savings.models import CollaboratorTimeoutError
from legal_savings.pipeline import (
    MissingTimeSavingsError,
    assemble_report,
    build_render_payload,
    compute_time_savings,
    generate_report,
)
from legal_savings.schemas import (
    ConversationContext,
    ConversationRecord,
    ConversationTurn,
    DerivedMetadata,
)

_TS = datetime(2025, 2, 1, 10, 0, tzinfo=UTC)

_TOPIC_RESPONSE = json.dumps(
    {
        "topics": [
            {
                "name": "Data protection",
                "themes": ["breach notice", "consumer rights"],
                "frequency": 3,
                "exampleInstances": ["GDPR breach notice"],
            }
        ]
    }
)
_FAQ_RESPONSE = json.dumps(
    {
        "faqs": [
            {
                "theme": "Breach notification",
                "representativeQuestion": "How fast must we report a breach?",
                "count": 2,
                "similarQuestions": ["Is 72 hours a hard limit?", "Who must be told?"],
            }
        ]
    }
)


class _ScriptedTextClient:
    """Answers topic prompts and FAQ prompts with fixed payloads."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls = 0

    def generate(self, prompt, *, timeout=None) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        system = prompt[0]["content"]
        return _TOPIC_RESPONSE if '"topics"' in system else _FAQ_RESPONSE


def _record(
    record_id: str,
    *,
    chat_minutes: int = 10,
    topics: tuple[str, ...] = ("GDPR breach notice",),
    analyzed: bool = True,
) -> ConversationRecord:
    derived = None
    savings = None
    if analyzed:
        derived = DerivedMetadata(
            created_at=_TS,
            chat_duration_minutes=chat_minutes,
            complexity="medium",
            topics=list(topics),
            questions=["How fast must we report a breach?"],
        )
        savings = compute_time_savings(chat_minutes, derived.topics, derived.questions, "medium")
    return ConversationRecord(
        id=record_id,
        category="privacy",
        context=ConversationContext(
            user_role="in-house counsel", expertise_level="expert", jurisdiction="EU"
        ),
        turns=[
            ConversationTurn(
                role="user",
                text="How fast must we report a breach?",
                timestamp=_TS,
                kind="question",
            ),
            ConversationTurn(
                role="assistant", text="Within 72 hours.", timestamp=_TS, kind="answer"
            ),
            ConversationTurn(
                role="user", text="Who must be told?", timestamp=_TS, kind="follow-up"
            ),
        ],
        derived_metadata=derived,
        time_savings=savings,
    )


def test_assemble_report_sums_reconcile_with_per_conversation_rows():
    records = [_record("r1", chat_minutes=10), _record("r2", chat_minutes=200)]
    client = _ScriptedTextClient()

    report = assemble_report(records, client, category="privacy")

    summary = report.time_savings_summary
    rows = report.per_conversation
    assert [row.id for row in rows] == ["r1", "r2"]
    assert summary.total_time_saved == sum(row.time_saved for row in rows)
    assert summary.total_traditional_time == sum(row.traditional_duration for row in rows)
    assert summary.total_ai_time == 210
    assert summary.total_traditional_time - summary.total_ai_time == summary.total_time_saved
    assert summary.average_time_saved_per_conversation == summary.total_time_saved / 2
    assert rows[1].time_saved < 0
    assert client.calls == 2


def test_assemble_report_copies_stored_values_without_recomputing():
    record = _record("r1")
    record.time_savings.time_saved_minutes = 999

    report = assemble_report([record], _ScriptedTextClient(), category="privacy")
    assert report.per_conversation[0].time_saved == 999
    assert report.per_conversation[0].factors == record.time_savings.factors


def test_assemble_report_builds_clusters_and_chart_series():
    report = assemble_report([_record("r1")], _ScriptedTextClient(), category="privacy")

    assert report.topic_clusters[0].name == "Data protection"
    assert report.faq_clusters[0].theme == "Breach notification"
    assert [series.kind for series in report.chart_series] == ["pie", "bar", "pie"]
    summary = report.time_savings_summary
    assert report.chart_series[1].values == [summary.total_traditional_time, summary.total_ai_time]


def test_assemble_report_missing_time_savings_names_record():
    client = _ScriptedTextClient()
    records = [_record("r1"), _record("pending-7", analyzed=False)]

    with pytest.raises(MissingTimeSavingsError, match="pending-7") as excinfo:
        assemble_report(records, client, category="privacy")
    assert excinfo.value.record_id == "pending-7"
    assert client.calls == 0


def test_assemble_report_empty_batch_skips_collaborator():
    client = _ScriptedTextClient()
    report = assemble_report([], client, category="privacy")

    assert client.calls == 0
    assert report.topic_clusters == []
    assert report.faq_clusters == []
    assert report.chart_series == []
    assert report.per_conversation == []
    assert report.time_savings_summary.total_time_saved == 0
    assert report.time_savings_summary.average_time_saved_per_conversation == 0


def test_assemble_report_fails_whole_report_on_timeout():
    client = _ScriptedTextClient(error=CollaboratorTimeoutError("slow"))
    with pytest.raises(CollaboratorTimeoutError):
        assemble_report([_record("r1")], client, category="privacy")


def test_generate_report_reads_store_and_payload_uses_camel_case(tmp_path: Path):
    store = JsonConversationStore(tmp_path / "chats.json")
    store.save_record(_record("r1"))
    store.save_record(_record("r2", chat_minutes=30))

    report = generate_report(store, "privacy", _ScriptedTextClient())
    payload = build_render_payload(report)

    props = payload["props"]
    assert payload["template"] == "legal_analysis_email"
    assert set(props["timeSavingsSummary"]) == {
        "totalTimeSaved",
        "averageTimeSavedPerConversation",
        "totalTraditionalTime",
        "totalAiTime",
    }
    assert set(props["perConversation"][0]) == {
        "id",
        "chatDuration",
        "traditionalDuration",
        "timeSaved",
        "factors",
    }
    assert props["perConversation"][0]["factors"]["legalResearch"] > 0
    assert props["topicClusters"][0]["exampleInstances"] == ["GDPR breach notice"]
