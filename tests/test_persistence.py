"""Tests for puzzletoon.core.persistence – versioned save slot."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from puzzletoon.core.catalog import create_initial_worlds
from puzzletoon.core.models import Customization, Emotion, Player
from puzzletoon.core.persistence import (
    HOME_ENV_VAR,
    SCHEMA_VERSION,
    SavedState,
    SaveSlot,
    default_save_path,
    state_to_dict,
)
from puzzletoon.core.settings import GraphicsQuality, Premium, Settings


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def slot(tmp_path: Path) -> SaveSlot:
    return SaveSlot(tmp_path / "save.json")


@pytest.fixture()
def state() -> SavedState:
    worlds = create_initial_worlds()
    worlds[0].levels[0].record_result(stars=2, time=45, brain_stars=20, fragments=1)
    worlds[0].levels[1].unlocked = True
    player = Player(
        name="Nova",
        experience=200,
        current_emotion=Emotion.CURIOSITY,
        completed_levels=["1-1"],
        brain_stars=70,
        customization=Customization(accessory="crown"),
    )
    return SavedState(
        player=player,
        worlds=worlds,
        settings=Settings(music_enabled=False, graphics_quality=GraphicsQuality.LOW),
        premium=Premium(is_unlocked=True, ads_removed=True),
    )


def _write(path: Path, payload) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

class TestSavePath:
    def test_default_under_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv(HOME_ENV_VAR, raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert default_save_path() == tmp_path / ".puzzletoon" / "puzzletoon-game-storage.json"

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv(HOME_ENV_VAR, str(tmp_path / "custom"))
        assert default_save_path().parent == tmp_path / "custom"


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------

class TestSave:
    def test_layout(self, slot: SaveSlot, state: SavedState):
        slot.save(state)
        data = json.loads(slot.path.read_text(encoding="utf-8"))
        assert set(data) == {"version", "player", "worlds", "settings", "premium"}
        assert data["version"] == SCHEMA_VERSION
        assert data["player"]["completed_levels"] == ["1-1"]
        assert data["worlds"][0]["levels"][0]["stars"] == 2
        assert data["settings"]["graphics_quality"] == "low"
        assert data["premium"]["is_unlocked"] is True

    def test_creates_parent_dirs(self, tmp_path: Path, state: SavedState):
        slot = SaveSlot(tmp_path / "a" / "b" / "save.json")
        slot.save(state)
        assert slot.path.exists()

    def test_write_failure_is_logged(self, tmp_path: Path, state: SavedState, caplog):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        slot = SaveSlot(blocker / "save.json")
        slot.save(state)
        assert "Could not save game" in caplog.text


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------

class TestLoad:
    def test_absent(self, slot: SaveSlot):
        assert slot.load() is None

    def test_restores_everything(self, slot: SaveSlot, state: SavedState):
        slot.save(state)
        loaded = slot.load()
        assert loaded is not None
        assert loaded.player == state.player
        assert loaded.worlds == state.worlds
        assert loaded.settings == state.settings
        assert loaded.premium == state.premium

    def test_restored_graph_is_fresh_graph_when_untouched(self, slot: SaveSlot):
        slot.save(SavedState(player=Player(), worlds=create_initial_worlds()))
        assert slot.load().worlds == create_initial_worlds()

    def test_corrupt_json(self, slot: SaveSlot):
        slot.path.write_text("NOT VALID JSON", encoding="utf-8")
        assert slot.load() is None

    def test_not_an_object(self, slot: SaveSlot):
        _write(slot.path, [1, 2, 3])
        assert slot.load() is None

    def test_version_mismatch(self, slot: SaveSlot, state: SavedState):
        payload = state_to_dict(state)
        payload["version"] = SCHEMA_VERSION + 1
        _write(slot.path, payload)
        assert slot.load() is None

    def test_missing_version(self, slot: SaveSlot, state: SavedState):
        payload = state_to_dict(state)
        del payload["version"]
        _write(slot.path, payload)
        assert slot.load() is None

    def test_missing_section(self, slot: SaveSlot, state: SavedState):
        payload = state_to_dict(state)
        del payload["premium"]
        _write(slot.path, payload)
        assert slot.load() is None

    def test_bad_enum_value(self, slot: SaveSlot, state: SavedState):
        payload = state_to_dict(state)
        payload["player"]["current_emotion"] = "boredom"
        _write(slot.path, payload)
        assert slot.load() is None

    def test_bad_level_record(self, slot: SaveSlot, state: SavedState):
        payload = state_to_dict(state)
        payload["worlds"][0]["levels"][0] = "garbage"
        _write(slot.path, payload)
        assert slot.load() is None

    def test_empty_worlds(self, slot: SaveSlot, state: SavedState):
        payload = state_to_dict(state)
        payload["worlds"] = []
        _write(slot.path, payload)
        assert slot.load() is None

    def test_duplicate_completed_levels_collapse(self, slot: SaveSlot, state: SavedState):
        payload = state_to_dict(state)
        payload["player"]["completed_levels"] = ["1-1", "1-1"]
        _write(slot.path, payload)
        assert slot.load().player.completed_levels == ["1-1"]

    def test_infinite_number(self, slot: SaveSlot, state: SavedState):
        payload = state_to_dict(state)
        payload["player"]["experience"] = float("inf")
        _write(slot.path, payload)
        assert "Infinity" in slot.path.read_text(encoding="utf-8")
        assert slot.load() is None

    def test_huge_exponent(self, slot: SaveSlot, state: SavedState):
        text = json.dumps(state_to_dict(state)).replace('"hints": 3', '"hints": 1e999')
        assert "1e999" in text
        slot.path.write_text(text, encoding="utf-8")
        assert slot.load() is None

    def test_deeply_nested_json(self, slot: SaveSlot, caplog):
        slot.path.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
        with caplog.at_level("WARNING"):
            assert slot.load() is None
        assert "Could not load save" in caplog.text
