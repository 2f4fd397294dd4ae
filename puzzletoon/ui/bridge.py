"""Qt adapter that hands store snapshots to screens and drives the level clock."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal

from puzzletoon.core.models import Screen
from puzzletoon.core.session import LevelRun
from puzzletoon.core.store import GameSnapshot, GameStore


class StoreBridge(QObject):
    """Re-emits every store commit as Qt signals.

    Screens connect to ``snapshotChanged`` and call mutations on ``store``;
    they never hold a reference to mutable state.  The level clock runs on
    the Qt event loop, so its ticks are serialised with every other mutation.
    """

    snapshotChanged = Signal(object)
    screenChanged = Signal(str)

    def __init__(self, store: GameStore, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._store = store
        self._screen = store.snapshot().current_screen
        self._run: Optional[LevelRun] = None
        self._clock = QTimer(self)
        self._clock.setInterval(1000)
        self._clock.timeout.connect(self._on_clock_tick)
        self._unsubscribe = store.subscribe(self._on_commit)

    @property
    def store(self) -> GameStore:
        return self._store

    @property
    def current_run(self) -> Optional[LevelRun]:
        return self._run

    def snapshot(self) -> GameSnapshot:
        return self._store.snapshot()

    def navigate(self, screen: Screen) -> None:
        self._store.set_current_screen(screen)

    def start_level(self, level_id: str) -> Optional[LevelRun]:
        """Begin a run if the level exists and is unlocked."""
        level = self._store.snapshot().level(level_id)
        if level is None or not level.unlocked:
            return None
        self._run = LevelRun(self._store, level_id)
        with self._store.batch() as store:
            store.set_current_world(level.world_id)
            self._run.start()
            store.set_current_screen(Screen.LEVEL)
        self._clock.start()
        return self._run

    def finish_level(self) -> None:
        if self._run is None:
            return
        self._clock.stop()
        run, self._run = self._run, None
        run.finish()

    def abandon_level(self) -> None:
        self._clock.stop()
        self._run = None
        with self._store.batch() as store:
            store.set_current_level(None)
            store.set_is_playing(False)
            store.set_current_screen(Screen.WORLDS)

    def close(self) -> None:
        self._clock.stop()
        self._unsubscribe()
        self._store.save()

    def _on_clock_tick(self) -> None:
        if self._run is not None:
            self._run.tick(1.0)

    def _on_commit(self, snapshot: GameSnapshot) -> None:
        self.snapshotChanged.emit(snapshot)
        if snapshot.current_screen is not self._screen:
            self._screen = snapshot.current_screen
            self.screenChanged.emit(self._screen.value)
