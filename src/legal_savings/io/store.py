"""JSON-file persistence for conversation records, keyed by category."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from legal_savings.io.load import RecordDatasetError
from legal_savings.io.save import save_json, store_lock
from legal_savings.schemas import CATEGORIES, Category, ConversationRecord

logger = logging.getLogger(__name__)


class NotFoundError(KeyError):
    """Raised when an update names a record id that is not stored."""

    def __init__(self, category: str, record_id: str) -> None:
        self.category = category
        self.record_id = record_id
        super().__init__(f"No {category} record with id '{record_id}'.")

    def __str__(self) -> str:
        return str(self.args[0])


class RecordStore(Protocol):
    """Storage the pipeline reads records from and writes analysis back to."""

    def load_records(self, category: Category) -> list[ConversationRecord]: ...

    def save_record(self, record: ConversationRecord) -> None: ...

    def update_record(
        self,
        category: Category,
        record_id: str,
        fields: dict[str, Any],
    ) -> ConversationRecord: ...


def _empty_document() -> dict[str, Any]:
    return {category: {"records": [], "lastUpdated": None} for category in CATEGORIES}


def _serialize(record: ConversationRecord) -> dict[str, Any]:
    return record.model_dump(mode="json", by_alias=True, exclude_none=True)


def _check_category(category: str) -> None:
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category {category!r}; expected one of {CATEGORIES}.")


class JsonConversationStore:
    """All categories in one JSON document; every write is a locked read-modify-write.

    Concurrent updates to the same record resolve as last-write-wins.
    """

    def __init__(self, path: str | Path, *, archive_path: str | Path | None = None) -> None:
        self.path = Path(path)
        self.archive_path = Path(archive_path) if archive_path is not None else None

    def _read_document(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return _empty_document()
        raw = path.read_text(encoding="utf-8")
        if not raw.strip():
            return _empty_document()
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise RecordDatasetError(f"Store file is not valid JSON: {path}") from exc
        if not isinstance(document, dict):
            raise RecordDatasetError(f"Store file must hold a JSON object: {path}")
        for category in CATEGORIES:
            document.setdefault(category, {"records": [], "lastUpdated": None})
        return document

    def _write_document(self, path: Path, document: dict[str, Any], category: str) -> None:
        document[category]["lastUpdated"] = datetime.now(UTC).isoformat()
        save_json(path, document)
        logger.debug("Wrote %s store document to %s", category, path)

    def load_records(self, category: Category) -> list[ConversationRecord]:
        """Return every stored record for a category, in stored order."""

        _check_category(category)
        rows = self._read_document(self.path)[category]["records"]
        try:
            return [ConversationRecord.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise RecordDatasetError(f"Stored {category} record failed validation: {exc}") from exc

    def save_record(self, record: ConversationRecord) -> None:
        """Append a new record under its category."""

        with store_lock(self.path):
            document = self._read_document(self.path)
            rows = document[record.category]["records"]
            if any(row.get("id") == record.id for row in rows):
                raise ValueError(f"Record id '{record.id}' already exists in {record.category}.")
            rows.append(_serialize(record))
            self._write_document(self.path, document, record.category)

    def update_record(
        self,
        category: Category,
        record_id: str,
        fields: dict[str, Any],
    ) -> ConversationRecord:
        """Merge `fields` (attribute names) into a stored record and return the result."""

        _check_category(category)
        with store_lock(self.path):
            document = self._read_document(self.path)
            rows = document[category]["records"]
            for index, row in enumerate(rows):
                if row.get("id") == record_id:
                    break
            else:
                raise NotFoundError(category, record_id)

            current = ConversationRecord.model_validate(rows[index])
            merged = current.model_copy(update=fields)
            updated = ConversationRecord.model_validate(merged.model_dump())
            rows[index] = _serialize(updated)
            self._write_document(self.path, document, category)
        return updated

    def archive_category(self, category: Category) -> int:
        """Move every record of a category into the archive document and clear it."""

        _check_category(category)
        if self.archive_path is None:
            raise ValueError("No archive path configured for this store.")
        if self.archive_path.resolve() == self.path.resolve():
            raise ValueError(f"Archive path must differ from the store path: {self.path}")

        with store_lock(self.path), store_lock(self.archive_path):
            document = self._read_document(self.path)
            archive = self._read_document(self.archive_path)
            moved = document[category]["records"]
            archive[category]["records"].extend(moved)
            self._write_document(self.archive_path, archive, category)
            document[category] = {"records": [], "lastUpdated": None}
            save_json(self.path, document)
        logger.info("Archived %d %s records to %s.", len(moved), category, self.archive_path)
        return len(moved)
