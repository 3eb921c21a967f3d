"""Persistence and file utilities for conversation records and reports."""

from legal_savings.io.load import (
    RecordDatasetError,
    RecordSetSummary,
    load_records_jsonl,
    summarize_records,
)
from legal_savings.io.save import (
    StoreLockError,
    atomic_write_text,
    ensure_directory,
    save_json,
    store_lock,
)
from legal_savings.io.store import JsonConversationStore, NotFoundError, RecordStore

__all__ = [
    "JsonConversationStore",
    "NotFoundError",
    "RecordDatasetError",
    "RecordSetSummary",
    "RecordStore",
    "StoreLockError",
    "atomic_write_text",
    "ensure_directory",
    "load_records_jsonl",
    "save_json",
    "store_lock",
    "summarize_records",
]
