from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from puzzletoon.core.models import Emotion, PlayState, Screen
from puzzletoon.core.store import GameStore

PAR_SECONDS = 180
SECONDS_PER_STAR = 60
MAX_STARS = 3
BRAIN_STARS_PER_STAR = 10


@dataclass
class RunResult:
    """What a finished run reports to :meth:`GameStore.complete_level`."""

    level_id: str
    stars: int
    time: float
    brain_stars: int
    fragments: int


def stars_for_time(seconds: float) -> int:
    """Three stars up to 60s, two up to 120s, one up to the 180s par, then none."""
    stars = int((PAR_SECONDS - seconds) // SECONDS_PER_STAR) + 1
    return max(0, min(MAX_STARS, stars))


class LevelRun:
    """Tracks one attempt at a level: the clock and what has been collected.

    The clock only advances while the store reports the game as playing, so
    pausing freezes the elapsed time.  The puzzle counts as solved once two
    blocks are active, two orbs are collected and an emotion has been used.
    """

    def __init__(self, store: GameStore, level_id: str) -> None:
        self._store = store
        self._level_id = level_id
        self._elapsed = 0.0
        self._blocks = 0
        self._orbs = 0
        self._emotion_used = False
        self._finished = False

    @property
    def level_id(self) -> str:
        return self._level_id

    @property
    def elapsed(self) -> float:
        """Seconds played so far, excluding paused time."""
        return self._elapsed

    @property
    def fragments(self) -> int:
        """Memory fragments collected; every orb is one fragment."""
        return self._orbs

    @property
    def finished(self) -> bool:
        return self._finished

    def start(self) -> None:
        with self._store.batch() as store:
            store.set_current_level(self._level_id)
            store.set_is_playing(True)

    def tick(self, seconds: float = 1.0) -> None:
        if self._finished or self._store.snapshot().play_state is not PlayState.PLAYING:
            return
        self._elapsed += seconds

    def toggle_pause(self) -> None:
        snapshot = self._store.snapshot()
        if not snapshot.is_playing:
            self._store.set_is_playing(True)
        elif snapshot.is_paused:
            self._store.set_is_playing(True)
        else:
            self._store.set_is_paused(True)

    def activate_block(self) -> None:
        self._blocks += 1

    def collect_orb(self) -> None:
        self._orbs += 1

    def use_emotion(self, emotion: Union[Emotion, str]) -> None:
        self._store.change_emotion(emotion)
        self._emotion_used = True

    def is_solved(self) -> bool:
        return self._blocks >= 2 and self._orbs >= 2 and self._emotion_used

    def result(self) -> RunResult:
        stars = stars_for_time(self._elapsed)
        return RunResult(
            level_id=self._level_id,
            stars=stars,
            time=self._elapsed,
            brain_stars=stars * BRAIN_STARS_PER_STAR,
            fragments=self._orbs,
        )

    def finish(self) -> RunResult:
        """Record the run in the store, stop play and go back to the world map."""
        result = self.result()
        with self._store.batch() as store:
            store.complete_level(
                result.level_id,
                result.stars,
                result.time,
                result.brain_stars,
                result.fragments,
            )
            store.set_is_playing(False)
            store.set_current_screen(Screen.WORLDS)
        self._finished = True
        return result

    def restart(self) -> None:
        self._elapsed = 0.0
        self._blocks = 0
        self._orbs = 0
        self._emotion_used = False
        self._finished = False
        self._store.set_is_playing(True)
