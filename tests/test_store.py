"""Tests for the JSON conversation store."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from legal_savings.io import JsonConversationStore, NotFoundError, RecordDatasetError
from legal_savings.pipeline import compute_time_savings
from legal_savings.schemas import (
    ConversationContext,
    ConversationRecord,
    ConversationTurn,
    DerivedMetadata,
)

_TS = datetime(2025, 4, 2, 8, 0, tzinfo=UTC)


def _record(record_id: str, category: str = "privacy") -> ConversationRecord:
    return ConversationRecord(
        id=record_id,
        category=category,
        context=ConversationContext(
            user_role="paralegal", expertise_level="beginner", jurisdiction="New York"
        ),
        turns=[
            ConversationTurn(role="user", text="Is CCPA relevant?", timestamp=_TS, kind="question")
        ],
    )


def test_missing_file_reads_as_empty(tmp_path: Path):
    store = JsonConversationStore(tmp_path / "missing.json")
    assert store.load_records("privacy") == []
    assert store.load_records("commercial_contracts") == []


def test_save_and_load_use_camel_case_document(tmp_path: Path):
    path = tmp_path / "chats.json"
    store = JsonConversationStore(path)
    store.save_record(_record("p1"))
    store.save_record(_record("c1", "commercial_contracts"))

    document = json.loads(path.read_text(encoding="utf-8"))
    assert [row["id"] for row in document["privacy"]["records"]] == ["p1"]
    assert document["privacy"]["lastUpdated"] is not None
    assert document["privacy"]["records"][0]["context"]["userRole"] == "paralegal"
    assert [record.id for record in store.load_records("commercial_contracts")] == ["c1"]
    assert not (tmp_path / "chats.json.lock").exists()


def test_save_record_rejects_duplicate_id(tmp_path: Path):
    store = JsonConversationStore(tmp_path / "chats.json")
    store.save_record(_record("p1"))
    with pytest.raises(ValueError, match="already exists"):
        store.save_record(_record("p1"))


def test_update_record_merges_analysis_fields(tmp_path: Path):
    store = JsonConversationStore(tmp_path / "chats.json")
    store.save_record(_record("p1"))
    derived = DerivedMetadata(
        created_at=_TS,
        chat_duration_minutes=3,
        complexity="low",
        topics=["CCPA scope"],
        questions=["Is CCPA relevant?"],
    )
    savings = compute_time_savings(3, derived.topics, derived.questions, "low")

    updated = store.update_record(
        "privacy", "p1", {"derived_metadata": derived, "time_savings": savings}
    )

    assert updated.time_savings == savings
    reloaded = store.load_records("privacy")[0]
    assert reloaded.derived_metadata == derived
    assert reloaded.time_savings.time_saved_minutes == 72
    assert reloaded.turns == updated.turns


def test_update_record_last_write_wins(tmp_path: Path):
    store = JsonConversationStore(tmp_path / "chats.json")
    store.save_record(_record("p1"))
    first = compute_time_savings(3, ["a"], ["q"], "low")
    second = compute_time_savings(3, ["a", "b"], ["q"], "high")

    store.update_record("privacy", "p1", {"time_savings": first})
    store.update_record("privacy", "p1", {"time_savings": second})

    assert store.load_records("privacy")[0].time_savings == second


def test_update_record_unknown_id_raises_not_found(tmp_path: Path):
    store = JsonConversationStore(tmp_path / "chats.json")
    store.save_record(_record("p1"))
    with pytest.raises(NotFoundError) as excinfo:
        store.update_record("privacy", "nope", {})
    assert excinfo.value.record_id == "nope"
    assert excinfo.value.category == "privacy"
    assert "nope" in str(excinfo.value)


def test_unknown_category_is_rejected(tmp_path: Path):
    store = JsonConversationStore(tmp_path / "chats.json")
    with pytest.raises(ValueError):
        store.load_records("tax")


def test_corrupt_store_file_raises(tmp_path: Path):
    path = tmp_path / "chats.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(RecordDatasetError):
        JsonConversationStore(path).load_records("privacy")


def test_archive_category_moves_records(tmp_path: Path):
    store = JsonConversationStore(tmp_path / "chats.json", archive_path=tmp_path / "archive.json")
    store.save_record(_record("p1"))
    store.save_record(_record("p2"))
    store.save_record(_record("c1", "commercial_contracts"))

    assert store.archive_category("privacy") == 2
    assert store.load_records("privacy") == []
    assert [record.id for record in store.load_records("commercial_contracts")] == ["c1"]

    archived = JsonConversationStore(tmp_path / "archive.json").load_records("privacy")
    assert [record.id for record in archived] == ["p1", "p2"]

    store.save_record(_record("p3"))
    store.archive_category("privacy")
    archived = JsonConversationStore(tmp_path / "archive.json").load_records("privacy")
    assert [record.id for record in archived] == ["p1", "p2", "p3"]


def test_archive_requires_archive_path(tmp_path: Path):
    with pytest.raises(ValueError):
        JsonConversationStore(tmp_path / "chats.json").archive_category("privacy")


def test_archive_into_the_store_file_is_rejected(tmp_path: Path):
    store = JsonConversationStore(tmp_path / "chats.json", archive_path=tmp_path / "chats.json")
    store.save_record(_record("p1"))
    with pytest.raises(ValueError, match="must differ"):
        store.archive_category("privacy")
    assert [record.id for record in store.load_records("privacy")] == ["p1"]
    assert not (tmp_path / "chats.json.lock").exists()
