"""Tests for save/lock filesystem helpers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from legal_savings.io import StoreLockError, save_json, store_lock


def test_save_json_overwrites_atomically(tmp_path: Path):
    json_path = tmp_path / "nested" / "report.json"
    save_json(json_path, {"value": 1})
    assert json.loads(json_path.read_text(encoding="utf-8"))["value"] == 1

    save_json(json_path, {"value": 2, "label": "Vertragsprüfung"})
    payload = json.loads(json_path.read_text(encoding="utf-8"))
    assert payload == {"value": 2, "label": "Vertragsprüfung"}
    assert [item.name for item in json_path.parent.iterdir()] == ["report.json"]


def test_store_lock_prevents_double_acquire(tmp_path: Path):
    data_path = tmp_path / "chats.json"

    with store_lock(data_path), pytest.raises(StoreLockError), store_lock(data_path):
        pass

    with store_lock(data_path) as lock_path:
        assert lock_path == tmp_path / "chats.json.lock"
        assert lock_path.exists()
    assert not (tmp_path / "chats.json.lock").exists()
