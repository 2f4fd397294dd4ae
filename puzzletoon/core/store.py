from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from puzzletoon.core.catalog import WorldCatalog, default_catalog
from puzzletoon.core.models import (
    Emotion,
    Level,
    PlayState,
    Player,
    PlayerPatch,
    Screen,
    World,
)
from puzzletoon.core.persistence import SavedState, SaveSlot
from puzzletoon.core.settings import Premium, Settings, SettingsPatch

logger = logging.getLogger(__name__)

Listener = Callable[["GameSnapshot"], None]

_ROLLBACK_FIELDS = (
    "_current_screen",
    "_current_world",
    "_current_level",
    "_is_playing",
    "_is_paused",
    "_player",
    "_worlds",
    "_settings",
    "_premium",
)


@dataclass(frozen=True)
class GameSnapshot:
    """A detached copy of the whole game state at one commit.

    The snapshot itself is frozen but the player and world records inside it
    are plain dataclasses.  Every reader gets its own copy, so editing one
    never reaches the store or another subscriber.
    """

    current_screen: Screen
    current_world: Optional[int]
    current_level: Optional[str]
    is_playing: bool
    is_paused: bool
    player: Player
    worlds: Tuple[World, ...]
    settings: Settings
    premium: Premium

    @property
    def play_state(self) -> PlayState:
        if self.is_paused:
            return PlayState.PAUSED
        if self.is_playing:
            return PlayState.PLAYING
        return PlayState.STOPPED

    @property
    def unlocked_worlds(self) -> List[int]:
        return [world.id for world in self.worlds if world.unlocked]

    def world(self, world_id: Optional[int]) -> Optional[World]:
        for world in self.worlds:
            if world.id == world_id:
                return world
        return None

    def level(self, level_id: Optional[str]) -> Optional[Level]:
        if level_id is None:
            return None
        for world in self.worlds:
            found = world.find_level(level_id)
            if found is not None:
                return found
        return None


class GameStore:
    """Owns the player's profile, the world ledger, settings and session pointers.

    Every public mutation runs to completion, then commits: the save slot is
    written and subscribers receive a fresh :class:`GameSnapshot`.  Wrap
    several mutations in :meth:`batch` to commit them as one.
    """

    def __init__(
        self,
        slot: Optional[SaveSlot] = None,
        catalog: Optional[WorldCatalog] = None,
    ) -> None:
        self._slot = slot
        self._catalog = catalog or default_catalog()
        self._listeners: List[Listener] = []
        self._batch_depth = 0
        self._dirty = False

        self._current_screen = Screen.HOME
        self._current_world: Optional[int] = None
        self._current_level: Optional[str] = None
        self._is_playing = False
        self._is_paused = False

        saved = slot.load() if slot is not None else None
        if saved is None:
            self._player = Player()
            self._worlds = self._catalog.create_worlds()
            self._settings = Settings()
            self._premium = Premium()
        else:
            self._player = saved.player
            self._worlds = saved.worlds
            self._settings = saved.settings
            self._premium = saved.premium
        self._snapshot = self._build_snapshot()

    # -- read path ---------------------------------------------------------

    def snapshot(self) -> GameSnapshot:
        return copy.deepcopy(self._snapshot)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new snapshot after every commit."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def save(self) -> None:
        """Write the persistent state now (e.g. on app exit)."""
        if self._slot is not None:
            self._slot.save(self._saved_state())

    @contextmanager
    def batch(self) -> Iterator["GameStore"]:
        """Commit everything done inside the block once, at the end.

        If the block raises, the outermost batch rolls the state back to
        where it started and nothing is saved or published.
        """
        checkpoint = self._checkpoint() if self._batch_depth == 0 else None
        self._batch_depth += 1
        try:
            yield self
        except BaseException:
            self._batch_depth -= 1
            if checkpoint is not None:
                self._restore(checkpoint)
            raise
        self._batch_depth -= 1
        if self._batch_depth == 0 and self._dirty:
            self._commit()

    # -- session pointers --------------------------------------------------

    def set_current_screen(self, screen: Union[Screen, str]) -> None:
        self._current_screen = Screen(screen)
        self._changed()

    def set_current_world(self, world_id: Optional[int]) -> None:
        self._current_world = world_id
        self._changed()

    def set_current_level(self, level_id: Optional[str]) -> None:
        self._current_level = level_id
        self._changed()

    def set_is_playing(self, playing: bool) -> None:
        self._is_playing = playing
        self._is_paused = False
        self._changed()

    def set_is_paused(self, paused: bool) -> None:
        self._is_paused = paused
        self._changed()

    # -- player ------------------------------------------------------------

    def update_player(self, patch: PlayerPatch) -> None:
        self._player = patch.apply(self._player)
        self._changed()

    def change_emotion(self, emotion: Union[Emotion, str]) -> None:
        self._player.current_emotion = Emotion(emotion)
        self._changed()

    def add_hints(self, amount: int) -> None:
        self._player.hints += amount
        self._changed()

    def spend_hints(self, amount: int) -> None:
        self._player.hints = max(0, self._player.hints - amount)
        self._changed()

    def add_brain_stars(self, amount: int) -> None:
        self._player.brain_stars += amount
        self._changed()

    def spend_brain_stars(self, amount: int) -> None:
        self._player.brain_stars = max(0, self._player.brain_stars - amount)
        self._changed()

    # -- progression -------------------------------------------------------

    def complete_level(
        self,
        level_id: str,
        stars: int,
        time: float,
        brain_stars: int,
        fragments: int,
    ) -> None:
        """Record a finished run of ``level_id`` and apply every cascade.

        Ledger fields keep the best result ever seen; the player's currencies
        and experience grow on every call.  An unknown id changes nothing.
        """
        world, level = self._locate_level(level_id)
        if world is None or level is None:
            logger.warning("complete_level: unknown level %r, nothing recorded", level_id)
            return

        level.record_result(stars, time, brain_stars, fragments)
        successor = world.successor_of(level)
        if successor is not None:
            successor.unlocked = True

        for candidate in self._worlds:
            if candidate.completed or not candidate.all_levels_completed():
                continue
            candidate.completed = True
            logger.info("World %d completed", candidate.id)
            next_world = self._find_world(candidate.id + 1)
            if next_world is not None:
                next_world.unlocked = True
                next_world.levels[0].unlocked = True

        self._player.brain_stars += brain_stars
        self._player.memory_fragments += fragments
        self._player.experience += stars * 100
        self._player.mark_completed(level_id)
        self._changed()

    def unlock_world(self, world_id: int) -> None:
        """Open a world directly, without requiring the previous one."""
        world = self._find_world(world_id)
        if world is None:
            logger.warning("unlock_world: unknown world %r", world_id)
            return
        world.unlocked = True
        self._changed()

    def unlock_all_levels(self) -> None:
        """Open every world and every level. Completion records are untouched."""
        for world in self._worlds:
            world.unlocked = True
            for level in world.levels:
                level.unlocked = True
        logger.info("All %d worlds unlocked", len(self._worlds))
        self._changed()

    def reset_progress(self) -> None:
        """Start the profile and every world over. Settings and premium stay."""
        self._player = Player()
        self._worlds = self._catalog.create_worlds()
        self._current_world = None
        self._current_level = None
        self._changed()

    # -- settings & premium ------------------------------------------------

    def update_settings(self, patch: SettingsPatch) -> None:
        self._settings = patch.apply(self._settings)
        self._changed()

    def unlock_premium(self) -> None:
        self._premium = self._premium.unlocked()
        self._changed()

    # -- internals ---------------------------------------------------------

    def _find_world(self, world_id: int) -> Optional[World]:
        for world in self._worlds:
            if world.id == world_id:
                return world
        return None

    def _locate_level(self, level_id: str) -> Tuple[Optional[World], Optional[Level]]:
        for world in self._worlds:
            level = world.find_level(level_id)
            if level is not None:
                return world, level
        return None, None

    def _checkpoint(self) -> Dict[str, object]:
        return copy.deepcopy({name: getattr(self, name) for name in _ROLLBACK_FIELDS})

    def _restore(self, checkpoint: Dict[str, object]) -> None:
        for name, value in checkpoint.items():
            setattr(self, name, value)
        self._dirty = False
        logger.debug("Batch rolled back")

    def _changed(self) -> None:
        if self._batch_depth:
            self._dirty = True
            return
        self._commit()

    def _commit(self) -> None:
        self._dirty = False
        self._snapshot = self._build_snapshot()
        logger.debug("State committed (screen=%s)", self._current_screen.value)
        self.save()
        for listener in list(self._listeners):
            listener(copy.deepcopy(self._snapshot))

    def _saved_state(self) -> SavedState:
        return SavedState(
            player=self._player,
            worlds=self._worlds,
            settings=self._settings,
            premium=self._premium,
        )

    def _build_snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            current_screen=self._current_screen,
            current_world=self._current_world,
            current_level=self._current_level,
            is_playing=self._is_playing,
            is_paused=self._is_paused,
            player=copy.deepcopy(self._player),
            worlds=tuple(copy.deepcopy(self._worlds)),
            settings=self._settings,
            premium=self._premium,
        )
