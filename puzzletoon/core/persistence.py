from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from puzzletoon.core.models import (
    Customization,
    Emotion,
    Level,
    LevelDefinition,
    LevelType,
    Player,
    World,
    WorldDefinition,
)
from puzzletoon.core.settings import GraphicsQuality, Premium, Settings

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
STORAGE_KEY = "puzzletoon-game-storage"
HOME_ENV_VAR = "PUZZLETOON_HOME"


@dataclass
class SavedState:
    """The part of the game state that survives restarts."""

    player: Player
    worlds: List[World]
    settings: Settings = field(default_factory=Settings)
    premium: Premium = field(default_factory=Premium)


def default_save_path() -> Path:
    base = os.environ.get(HOME_ENV_VAR)
    directory = Path(base) if base else Path.home() / ".puzzletoon"
    return directory / f"{STORAGE_KEY}.json"


class SaveSlot:
    """Single JSON save file, tagged with :data:`SCHEMA_VERSION`.

    A missing file, an unreadable one, a version mismatch and a malformed
    record all load as ``None``; the caller then starts from defaults.
    Saves that fail are logged and otherwise ignored.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._file_path = Path(path) if path is not None else default_save_path()

    @property
    def path(self) -> Path:
        return self._file_path

    def load(self) -> Optional[SavedState]:
        if not self._file_path.exists():
            return None
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError, RecursionError) as e:
            logger.warning("Could not load save from %s: %s", self._file_path, e)
            return None

        if not isinstance(payload, dict):
            logger.warning("Ignoring save at %s: not a JSON object", self._file_path)
            return None
        version = payload.get("version")
        if version != SCHEMA_VERSION:
            logger.info(
                "Ignoring save at %s: version %r, expected %d",
                self._file_path,
                version,
                SCHEMA_VERSION,
            )
            return None
        try:
            return state_from_dict(payload)
        except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as e:
            logger.warning("Save at %s is malformed, using defaults: %s", self._file_path, e)
            return None

    def save(self, state: SavedState) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(state_to_dict(state), indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save game to %s: %s", self._file_path, e)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def state_to_dict(state: SavedState) -> Dict[str, Any]:
    return {
        "version": SCHEMA_VERSION,
        "player": _player_to_dict(state.player),
        "worlds": [_world_to_dict(world) for world in state.worlds],
        "settings": {
            "sound_enabled": state.settings.sound_enabled,
            "music_enabled": state.settings.music_enabled,
            "haptic_enabled": state.settings.haptic_enabled,
            "graphics_quality": state.settings.graphics_quality.value,
            "language": state.settings.language,
        },
        "premium": {
            "is_unlocked": state.premium.is_unlocked,
            "ads_removed": state.premium.ads_removed,
            "season_pass_active": state.premium.season_pass_active,
        },
    }


def _player_to_dict(player: Player) -> Dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "level": player.level,
        "experience": player.experience,
        "current_emotion": player.current_emotion.value,
        "completed_levels": list(player.completed_levels),
        "brain_stars": player.brain_stars,
        "memory_fragments": player.memory_fragments,
        "hints": player.hints,
        "customization": {
            "skin_color": player.customization.skin_color,
            "accessory": player.customization.accessory,
            "emotion": player.customization.emotion.value,
        },
    }


def _world_to_dict(world: World) -> Dict[str, Any]:
    d = world.definition
    return {
        "id": d.id,
        "name": d.name,
        "theme": d.theme,
        "description": d.description,
        "color": d.color,
        "background": d.background,
        "unlocked": world.unlocked,
        "completed": world.completed,
        "levels": [_level_to_dict(level) for level in world.levels],
    }


def _level_to_dict(level: Level) -> Dict[str, Any]:
    d = level.definition
    return {
        "id": d.id,
        "world_id": d.world_id,
        "level_number": d.level_number,
        "name": d.name,
        "type": d.type.value,
        "difficulty": d.difficulty,
        "required_emotion": d.required_emotion.value if d.required_emotion else None,
        "unlocked": level.unlocked,
        "completed": level.completed,
        "stars": level.stars,
        "best_time": level.best_time,
        "brain_stars_collected": level.brain_stars_collected,
        "memory_fragments_collected": level.memory_fragments_collected,
    }


# ---------------------------------------------------------------------------
# Decoding (strict: any missing or mistyped field rejects the whole save)
# ---------------------------------------------------------------------------

def state_from_dict(payload: Dict[str, Any]) -> SavedState:
    worlds = [_world_from_dict(item) for item in payload["worlds"]]
    if not worlds:
        raise ValueError("save has no worlds")
    settings = payload["settings"]
    premium = payload["premium"]
    return SavedState(
        player=_player_from_dict(payload["player"]),
        worlds=worlds,
        settings=Settings(
            sound_enabled=bool(settings["sound_enabled"]),
            music_enabled=bool(settings["music_enabled"]),
            haptic_enabled=bool(settings["haptic_enabled"]),
            graphics_quality=GraphicsQuality(settings["graphics_quality"]),
            language=str(settings["language"]),
        ),
        premium=Premium(
            is_unlocked=bool(premium["is_unlocked"]),
            ads_removed=bool(premium["ads_removed"]),
            season_pass_active=bool(premium["season_pass_active"]),
        ),
    )


def _player_from_dict(raw: Dict[str, Any]) -> Player:
    custom = raw["customization"]
    completed = raw["completed_levels"]
    if not isinstance(completed, list):
        raise TypeError("completed_levels must be a list")
    return Player(
        id=str(raw["id"]),
        name=str(raw["name"]),
        level=int(raw["level"]),
        experience=int(raw["experience"]),
        current_emotion=Emotion(raw["current_emotion"]),
        completed_levels=list(dict.fromkeys(str(level_id) for level_id in completed)),
        brain_stars=int(raw["brain_stars"]),
        memory_fragments=int(raw["memory_fragments"]),
        hints=int(raw["hints"]),
        customization=Customization(
            skin_color=str(custom["skin_color"]),
            accessory=str(custom["accessory"]),
            emotion=Emotion(custom["emotion"]),
        ),
    )


def _world_from_dict(raw: Dict[str, Any]) -> World:
    levels = [_level_from_dict(item) for item in raw["levels"]]
    if not levels:
        raise ValueError(f"world {raw['id']} has no levels")
    levels.sort(key=lambda level: level.level_number)
    definition = WorldDefinition(
        id=int(raw["id"]),
        name=str(raw["name"]),
        theme=str(raw["theme"]),
        description=str(raw["description"]),
        color=str(raw["color"]),
        background=str(raw["background"]),
        levels=tuple(level.definition for level in levels),
    )
    return World(
        definition=definition,
        levels=levels,
        unlocked=bool(raw["unlocked"]),
        completed=bool(raw["completed"]),
    )


def _level_from_dict(raw: Dict[str, Any]) -> Level:
    emotion = raw["required_emotion"]
    best_time = raw["best_time"]
    definition = LevelDefinition(
        id=str(raw["id"]),
        world_id=int(raw["world_id"]),
        level_number=int(raw["level_number"]),
        name=str(raw["name"]),
        type=LevelType(raw["type"]),
        difficulty=int(raw["difficulty"]),
        required_emotion=Emotion(emotion) if emotion is not None else None,
    )
    return Level(
        definition=definition,
        unlocked=bool(raw["unlocked"]),
        completed=bool(raw["completed"]),
        stars=int(raw["stars"]),
        best_time=float(best_time) if best_time is not None else None,
        brain_stars_collected=int(raw["brain_stars_collected"]),
        memory_fragments_collected=int(raw["memory_fragments_collected"]),
    )
