"""Load conversation records from JSONL exports."""

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from legal_savings.schemas import ConversationRecord


class RecordDatasetError(ValueError):
    """Raised when a record file fails schema or integrity checks."""


@dataclass(frozen=True)
class RecordSetSummary:
    """Aggregate counts for a set of conversation records."""

    record_count: int
    analyzed_count: int
    turn_count: int
    records_by_category: dict[str, int]

    @property
    def pending_count(self) -> int:
        return self.record_count - self.analyzed_count


def summarize_records(records: Sequence[ConversationRecord]) -> RecordSetSummary:
    """Count records, analyzed records and turns."""

    return RecordSetSummary(
        record_count=len(records),
        analyzed_count=sum(1 for record in records if record.time_savings is not None),
        turn_count=sum(len(record.turns) for record in records),
        records_by_category=dict(Counter(record.category for record in records)),
    )


def load_records_jsonl(path: str | Path) -> list[ConversationRecord]:
    """Load and validate one conversation record per non-empty line."""

    file_path = Path(path)
    if not file_path.exists():
        raise RecordDatasetError(f"Record file does not exist: {file_path}")

    records: list[ConversationRecord] = []
    seen_ids: set[str] = set()
    with file_path.open(encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            stripped = line.strip()
            if not stripped:
                continue
            try:
                payload = json.loads(stripped)
            except json.JSONDecodeError as exc:
                raise RecordDatasetError(f"Line {line_number}: invalid JSON ({exc.msg}).") from exc
            try:
                record = ConversationRecord.model_validate(payload)
            except ValidationError as exc:
                raise RecordDatasetError(
                    f"Line {line_number}: record failed validation: {exc}"
                ) from exc
            if record.id in seen_ids:
                raise RecordDatasetError(f"Line {line_number}: duplicate record id '{record.id}'.")
            seen_ids.add(record.id)
            records.append(record)
    return records
