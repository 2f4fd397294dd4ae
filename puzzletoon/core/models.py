"""Player, world and level records plus the typed patches that update them."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Tuple


class Emotion(str, Enum):
    JOY = "joy"
    CURIOSITY = "curiosity"
    SADNESS = "sadness"
    ANGER = "anger"


class LevelType(str, Enum):
    EMOTION_SHIFT = "emotion-shift"
    MEMORY_REPLAY = "memory-replay"
    LIGHT_MIRROR = "light-mirror"
    RUBE_GOLDBERG = "rube-goldberg"
    GRAVITY_FLIP = "gravity-flip"
    BOSS = "boss"


class Screen(str, Enum):
    HOME = "home"
    WORLDS = "worlds"
    LEVEL_SELECT = "level-select"
    LEVEL = "level"
    CHARACTER = "character"
    SHOP = "shop"
    SETTINGS = "settings"
    PAUSE = "pause"


class PlayState(str, Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


# ---------------------------------------------------------------------------
# Catalog templates (immutable)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LevelDefinition:
    id: str
    world_id: int
    level_number: int
    name: str
    type: LevelType
    difficulty: int
    required_emotion: Optional[Emotion] = None


@dataclass(frozen=True)
class WorldDefinition:
    id: int
    name: str
    theme: str
    description: str
    color: str
    background: str
    levels: Tuple[LevelDefinition, ...]


# ---------------------------------------------------------------------------
# Ledger entries (mutable, layered on the templates)
# ---------------------------------------------------------------------------

@dataclass
class Level:
    """A catalog level plus the player's best results on it."""

    definition: LevelDefinition
    unlocked: bool = False
    completed: bool = False
    stars: int = 0
    best_time: Optional[float] = None
    brain_stars_collected: int = 0
    memory_fragments_collected: int = 0

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def world_id(self) -> int:
        return self.definition.world_id

    @property
    def level_number(self) -> int:
        return self.definition.level_number

    @property
    def name(self) -> str:
        return self.definition.name

    def record_result(
        self,
        stars: int,
        time: float,
        brain_stars: int,
        fragments: int,
    ) -> None:
        """Merge a finished run, keeping the best value of every field."""
        self.completed = True
        self.stars = max(self.stars, stars)
        self.best_time = time if self.best_time is None else min(self.best_time, time)
        self.brain_stars_collected = max(self.brain_stars_collected, brain_stars)
        self.memory_fragments_collected = max(self.memory_fragments_collected, fragments)


@dataclass
class World:
    definition: WorldDefinition
    levels: List[Level]
    unlocked: bool = False
    completed: bool = False

    @property
    def id(self) -> int:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    def find_level(self, level_id: str) -> Optional[Level]:
        for level in self.levels:
            if level.id == level_id:
                return level
        return None

    def successor_of(self, level: Level) -> Optional[Level]:
        """Return the level numbered right after ``level``, if there is one."""
        for candidate in self.levels:
            if candidate.level_number == level.level_number + 1:
                return candidate
        return None

    def all_levels_completed(self) -> bool:
        return all(level.completed for level in self.levels)


# ---------------------------------------------------------------------------
# Player profile
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Customization:
    skin_color: str = "#ffdbaa"
    accessory: str = "none"
    emotion: Emotion = Emotion.JOY


@dataclass
class Player:
    id: str = "player_1"
    name: str = "BrainHero"
    level: int = 1
    experience: int = 0
    current_emotion: Emotion = Emotion.JOY
    completed_levels: List[str] = field(default_factory=list)
    brain_stars: int = 50
    memory_fragments: int = 10
    hints: int = 3
    customization: Customization = field(default_factory=Customization)

    def mark_completed(self, level_id: str) -> None:
        if level_id not in self.completed_levels:
            self.completed_levels.append(level_id)


@dataclass(frozen=True)
class PlayerPatch:
    """Fields to overwrite on a :class:`Player`. ``None`` leaves a field alone.

    Every field is a plain overwrite: no clamping, no accumulation.  Callers
    wanting to add currency use the store's add/spend operations instead.
    """

    name: Optional[str] = None
    level: Optional[int] = None
    experience: Optional[int] = None
    current_emotion: Optional[Emotion] = None
    completed_levels: Optional[List[str]] = None
    brain_stars: Optional[int] = None
    memory_fragments: Optional[int] = None
    hints: Optional[int] = None
    customization: Optional[Customization] = None

    def apply(self, player: Player) -> Player:
        changes = {
            name: value
            for name, value in vars(self).items()
            if value is not None
        }
        if "current_emotion" in changes:
            changes["current_emotion"] = Emotion(changes["current_emotion"])
        if "completed_levels" in changes:
            changes["completed_levels"] = list(dict.fromkeys(changes["completed_levels"]))
        return replace(player, **changes)
