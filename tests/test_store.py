"""Tests for JSON persistence of council state."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from meshgov.engine import VotingEngine
from meshgov.errors import DuplicateVote, InvalidSnapshot
from meshgov.store import load_state, save_state
from tests.conftest import M1, M2, M3, M4, M5


def test_save_and_load_round_trip(engine4: VotingEngine, tmp_path: Path) -> None:
    engine4.vote_to_admit(M3, M5)
    path = save_state(engine4, tmp_path / "nested" / "state.json")

    restored = load_state(path)

    assert restored.members() == (M1, M2, M3, M4)
    assert restored.epoch == 2
    assert restored.threshold == 3
    assert restored.admit_votes(M5) == 1
    assert restored.admit_opened_at_epoch(M5) == 2
    with pytest.raises(DuplicateVote):
        restored.vote_to_admit(M3, M5)


def test_save_replaces_existing_file(engine: VotingEngine, tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    save_state(engine, path)
    engine.vote_to_admit(M1, M4)
    engine.vote_to_admit(M2, M4)
    save_state(engine, path)

    assert json.loads(path.read_text(encoding="utf-8"))["epoch"] == 2
    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


def test_load_rejects_corrupt_files(tmp_path: Path) -> None:
    not_json = tmp_path / "broken.json"
    not_json.write_text("{not json", encoding="utf-8")
    not_object = tmp_path / "list.json"
    not_object.write_text("[]", encoding="utf-8")

    with pytest.raises(InvalidSnapshot):
        load_state(not_json)
    with pytest.raises(InvalidSnapshot):
        load_state(not_object)
    with pytest.raises(FileNotFoundError):
        load_state(tmp_path / "missing.json")
