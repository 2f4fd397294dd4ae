"""Player preferences and premium entitlements."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class GraphicsQuality(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    ULTRA = "ultra"


@dataclass(frozen=True)
class Settings:
    sound_enabled: bool = True
    music_enabled: bool = True
    haptic_enabled: bool = True
    graphics_quality: GraphicsQuality = GraphicsQuality.HIGH
    language: str = "en"


@dataclass(frozen=True)
class SettingsPatch:
    sound_enabled: Optional[bool] = None
    music_enabled: Optional[bool] = None
    haptic_enabled: Optional[bool] = None
    graphics_quality: Optional[GraphicsQuality] = None
    language: Optional[str] = None

    def apply(self, settings: Settings) -> Settings:
        changes = {name: value for name, value in vars(self).items() if value is not None}
        if "graphics_quality" in changes:
            changes["graphics_quality"] = GraphicsQuality(changes["graphics_quality"])
        return replace(settings, **changes)


@dataclass(frozen=True)
class Premium:
    """Purchase flags. They only ever go from False to True."""

    is_unlocked: bool = False
    ads_removed: bool = False
    season_pass_active: bool = False

    def unlocked(self) -> "Premium":
        return replace(self, is_unlocked=True, ads_removed=True)
