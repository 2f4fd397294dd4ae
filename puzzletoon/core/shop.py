"""Brain-star shop and character accessories."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, List

from puzzletoon.core.models import PlayerPatch
from puzzletoon.core.store import GameStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShopItem:
    id: str
    name: str
    cost: int
    hints: int = 0
    brain_stars: int = 0
    premium: bool = False

    @property
    def free(self) -> bool:
        return self.cost == 0


@dataclass(frozen=True)
class Accessory:
    id: str
    name: str
    cost: int


SHOP_ITEMS: Dict[str, ShopItem] = {
    item.id: item
    for item in (
        ShopItem("hints_5", "5 Hints", cost=50, hints=5),
        ShopItem("hints_10", "10 Hints", cost=90, hints=10),
        ShopItem("hints_25", "25 Hints", cost=200, hints=25),
        ShopItem("stars_100", "100 Brain Stars", cost=0, brain_stars=100),
        ShopItem("stars_500", "500 Brain Stars", cost=100, brain_stars=500),
        ShopItem("premium", "Premium Pass", cost=500, premium=True),
    )
}

ACCESSORIES: Dict[str, Accessory] = {
    accessory.id: accessory
    for accessory in (
        Accessory("none", "None", 0),
        Accessory("crown", "Golden Crown", 100),
        Accessory("hat", "Magic Hat", 150),
        Accessory("glasses", "Smart Glasses", 75),
        Accessory("headband", "Energy Headband", 125),
    )
}


class Shop:
    """Purchases that check the balance first and commit as one change."""

    def __init__(self, store: GameStore) -> None:
        self._store = store

    def items(self) -> List[ShopItem]:
        return list(SHOP_ITEMS.values())

    def accessories(self) -> List[Accessory]:
        return list(ACCESSORIES.values())

    def can_afford(self, cost: int) -> bool:
        return self._store.snapshot().player.brain_stars >= cost

    def purchase(self, item_id: str) -> bool:
        """Buy ``item_id``. Returns False, changing nothing, if it is unaffordable."""
        item = SHOP_ITEMS[item_id]
        if not self.can_afford(item.cost):
            logger.info("Cannot afford %s (%d brain stars)", item_id, item.cost)
            return False
        with self._store.batch() as store:
            if item.cost:
                store.spend_brain_stars(item.cost)
            if item.hints:
                store.add_hints(item.hints)
            if item.brain_stars:
                store.add_brain_stars(item.brain_stars)
            if item.premium:
                store.unlock_premium()
        return True

    def equip_accessory(self, accessory_id: str) -> bool:
        accessory = ACCESSORIES[accessory_id]
        customization = self._store.snapshot().player.customization
        if customization.accessory == accessory_id:
            return True
        if not self.can_afford(accessory.cost):
            return False
        with self._store.batch() as store:
            if accessory.cost:
                store.spend_brain_stars(accessory.cost)
            store.update_player(
                PlayerPatch(customization=replace(customization, accessory=accessory_id))
            )
        return True

    def use_hint(self) -> bool:
        if self._store.snapshot().player.hints <= 0:
            return False
        self._store.spend_hints(1)
        return True
