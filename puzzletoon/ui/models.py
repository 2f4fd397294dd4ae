"""Read-only view models built from a store snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from puzzletoon.core.models import Level, World
from puzzletoon.core.store import GameSnapshot


@dataclass
class WorldCardState:
    """What a world card shows: lock state and aggregated progress."""

    world: World
    locked: bool
    completed_levels: int
    total_levels: int
    stars: int
    brain_stars: int

    @property
    def progress(self) -> float:
        if not self.total_levels:
            return 0.0
        return self.completed_levels / self.total_levels


@dataclass
class LevelCardState:
    level: Level
    locked: bool
    completed: bool
    is_current: bool = False


def build_world_cards(snapshot: GameSnapshot) -> List[WorldCardState]:
    completed_ids = set(snapshot.player.completed_levels)
    cards = []
    for world in snapshot.worlds:
        cards.append(
            WorldCardState(
                world=world,
                locked=not world.unlocked,
                completed_levels=sum(1 for level in world.levels if level.id in completed_ids),
                total_levels=len(world.levels),
                stars=sum(level.stars for level in world.levels),
                brain_stars=sum(level.brain_stars_collected for level in world.levels),
            )
        )
    return cards


def build_level_cards(snapshot: GameSnapshot, world_id: int) -> List[LevelCardState]:
    """Cards for one world's level-select screen; empty for an unknown world."""
    world = snapshot.world(world_id)
    if world is None:
        return []
    completed_ids = set(snapshot.player.completed_levels)
    return [
        LevelCardState(
            level=level,
            locked=not level.unlocked,
            completed=level.id in completed_ids,
            is_current=level.id == snapshot.current_level,
        )
        for level in world.levels
    ]
