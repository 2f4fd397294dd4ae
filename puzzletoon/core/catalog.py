from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from puzzletoon.core.models import (
    Emotion,
    Level,
    LevelDefinition,
    LevelType,
    World,
    WorldDefinition,
)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "worlds.yaml"


class WorldCatalog:
    """The fixed set of worlds and levels, read from a YAML file.

    Definitions are immutable; :meth:`create_worlds` builds a fresh, fully
    locked ledger on top of them with only world 1 and its first level open.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path is not None else DEFAULT_CATALOG_PATH
        self._worlds = self._load_worlds()

    def all(self) -> List[WorldDefinition]:
        return list(self._worlds.values())


    def create_worlds(self) -> List[World]:
        worlds: List[World] = []
        for index, definition in enumerate(self.all()):
            first_world = index == 0
            levels = [
                Level(definition=level_def, unlocked=first_world and level_def.level_number == 1)
                for level_def in definition.levels
            ]
            worlds.append(World(definition=definition, levels=levels, unlocked=first_world))
        return worlds

    def _load_worlds(self) -> Dict[int, WorldDefinition]:
        if not self._path.exists():
            raise FileNotFoundError(f"World catalog not found: {self._path}")

        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict) or not isinstance(raw.get("worlds"), list):
            raise ValueError(f"{self._path.name}: expected YAML with a 'worlds' list")

        worlds: Dict[int, WorldDefinition] = {}
        for entry in raw["worlds"]:
            world = _parse_world(self._path.name, entry)
            if world.id in worlds:
                raise ValueError(f"{self._path.name}: duplicate world id {world.id}")
            worlds[world.id] = world

        if not worlds:
            raise ValueError(f"{self._path.name}: no worlds defined")
        expected = list(range(1, len(worlds) + 1))
        if sorted(worlds) != expected:
            raise ValueError(f"{self._path.name}: world ids must be 1..{len(worlds)}")
        return {world_id: worlds[world_id] for world_id in expected}


def _parse_world(source: str, entry: object) -> WorldDefinition:
    if not isinstance(entry, dict):
        raise ValueError(f"{source}: each world must be a mapping")
    world_id = entry.get("id")
    if not isinstance(world_id, int) or isinstance(world_id, bool) or world_id < 1:
        raise ValueError(f"{source}: missing or invalid world 'id'")
    name = entry.get("name")
    if not name or not isinstance(name, str):
        raise ValueError(f"{source}: world {world_id} missing or invalid 'name'")
    layout = entry.get("levels")
    if not isinstance(layout, dict):
        raise ValueError(f"{source}: world {world_id} missing 'levels'")

    return WorldDefinition(
        id=world_id,
        name=name.strip(),
        theme=str(entry.get("theme", "")).strip(),
        description=str(entry.get("description", "")).strip(),
        color=str(entry.get("color", "#ffffff")),
        background=str(entry.get("background", "")),
        levels=_build_levels(source, world_id, layout),
    )


def _build_levels(source: str, world_id: int, layout: dict) -> Tuple[LevelDefinition, ...]:
    count = layout.get("count")
    if not isinstance(count, int) or count < 1:
        raise ValueError(f"{source}: world {world_id} 'count' must be a positive integer")

    raw_types = layout.get("type")
    if raw_types is None:
        raise ValueError(f"{source}: world {world_id} missing level 'type'")
    if not isinstance(raw_types, list):
        raw_types = [raw_types]
    try:
        types = [LevelType(t) for t in raw_types]
    except ValueError as e:
        raise ValueError(f"{source}: world {world_id} {e}") from e
    if not types:
        raise ValueError(f"{source}: world {world_id} has an empty 'type' list")

    difficulty = layout.get("difficulty") or {}
    start = int(difficulty.get("start", 1))
    cap = int(difficulty.get("max", 5))
    if not 1 <= start <= 5 or not 1 <= cap <= 5:
        raise ValueError(f"{source}: world {world_id} difficulty must be within 1..5")

    emotion = layout.get("emotion")
    required = Emotion(emotion) if emotion is not None else None
    name_pattern = str(layout.get("name", "Level {n}"))

    return tuple(
        LevelDefinition(
            id=f"{world_id}-{i + 1}",
            world_id=world_id,
            level_number=i + 1,
            name=name_pattern.format(n=i + 1),
            type=types[i % len(types)],
            difficulty=min(i + start, cap),
            required_emotion=required,
        )
        for i in range(count)
    )


@lru_cache(maxsize=1)
def default_catalog() -> WorldCatalog:
    return WorldCatalog()


def create_initial_worlds() -> List[World]:
    """Fresh world/level graph from the packaged catalog."""
    return default_catalog().create_worlds()
