"""Tests for puzzletoon.ui.bridge – Qt signals over the game store."""

from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("PySide6.QtWidgets")

from puzzletoon.core.models import PlayState, Screen
from puzzletoon.core.persistence import SaveSlot
from puzzletoon.core.store import GameStore
from puzzletoon.ui.bridge import StoreBridge


@pytest.fixture()
def store(tmp_path: Path) -> GameStore:
    return GameStore(slot=SaveSlot(tmp_path / "save.json"))


@pytest.fixture()
def bridge(qt_app, store: GameStore) -> StoreBridge:
    b = StoreBridge(store)
    yield b
    b.close()


class TestSignals:
    def test_snapshot_changed(self, bridge: StoreBridge, store: GameStore):
        seen = []
        bridge.snapshotChanged.connect(seen.append)
        store.add_hints(1)
        assert len(seen) == 1
        assert seen[0].player.hints == 4

    def test_screen_changed_only_on_change(self, bridge: StoreBridge):
        screens = []
        bridge.screenChanged.connect(screens.append)
        bridge.navigate(Screen.SHOP)
        bridge.navigate(Screen.SHOP)
        bridge.navigate(Screen.HOME)
        assert screens == ["shop", "home"]

    def test_close_unsubscribes(self, qt_app, store: GameStore):
        b = StoreBridge(store)
        seen = []
        b.snapshotChanged.connect(seen.append)
        b.close()
        store.add_hints(1)
        assert seen == []


class TestLevelFlow:
    def test_start_locked_level_refused(self, bridge: StoreBridge):
        assert bridge.start_level("1-2") is None
        assert bridge.current_run is None

    def test_start_unknown_level_refused(self, bridge: StoreBridge):
        assert bridge.start_level("99-1") is None

    def test_start_level(self, bridge: StoreBridge, store: GameStore):
        run = bridge.start_level("1-1")
        assert run is not None
        snap = store.snapshot()
        assert snap.current_world == 1
        assert snap.current_level == "1-1"
        assert snap.current_screen is Screen.LEVEL
        assert snap.play_state is PlayState.PLAYING

    def test_clock_tick_advances_run(self, bridge: StoreBridge):
        run = bridge.start_level("1-1")
        bridge._on_clock_tick()
        bridge._on_clock_tick()
        assert run.elapsed == 2.0

    def test_finish_level(self, bridge: StoreBridge, store: GameStore):
        bridge.start_level("1-1")
        bridge.finish_level()
        snap = store.snapshot()
        assert snap.level("1-1").completed is True
        assert snap.current_screen is Screen.WORLDS
        assert bridge.current_run is None

    def test_abandon_level(self, bridge: StoreBridge, store: GameStore):
        bridge.start_level("1-1")
        bridge.abandon_level()
        snap = store.snapshot()
        assert snap.level("1-1").completed is False
        assert snap.current_level is None
        assert snap.play_state is PlayState.STOPPED

    def test_run_cleared_before_listeners_see_finish(self, bridge: StoreBridge):
        runs = []
        bridge.start_level("1-1")
        bridge.snapshotChanged.connect(lambda snap: runs.append(bridge.current_run))
        bridge.finish_level()
        assert runs == [None]

    def test_unlocked_late_level_can_start(self, bridge: StoreBridge, store: GameStore):
        store.unlock_all_levels()
        assert bridge.start_level("7-5") is not None
        assert store.snapshot().current_world == 7
