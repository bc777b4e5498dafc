"""
Weapon-era progression table.
Eras are ordered; a country's era level is the 0-based index into Era.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Tuple
import random


class Era(IntEnum):
    ANCIENT = 0
    MEDIEVAL = 1
    INDUSTRIAL = 2
    MODERN = 3
    NUCLEAR = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()


FINAL_ERA = max(Era)

# Indexed by Era value
WEAPON_EVOLUTION: Tuple[Tuple[str, ...], ...] = (
    ("Spear", "Sword", "Shield", "Bow"),
    ("Catapult", "Crossbow", "Knight Armor", "Trebuchet"),
    ("Musket", "Cannon", "Steamship", "Railway Troops"),
    ("Rifle", "Machine Gun", "Tank", "Airplane"),
    ("Nuclear Bomb", "Missile", "Submarine", "Satellite"),
)

NUCLEAR_WEAPON = "Nuclear Bomb"

WEAPON_COUNT_RANGE = (100, 1099)


@dataclass
class Weapon:
    name: str
    era: Era
    count: int

    def to_dict(self) -> dict:
        return {"name": self.name, "era": self.era.label, "count": self.count}


def weapons_for_era(era: Era) -> Tuple[str, ...]:
    return WEAPON_EVOLUTION[era]


def roll_loadout(era: Era, rng: random.Random) -> List[Weapon]:
    """Full weapon set of an era, each with a freshly randomized count."""
    low, high = WEAPON_COUNT_RANGE
    return [Weapon(name, era, rng.randint(low, high)) for name in weapons_for_era(era)]


def has_nuclear_weapons(weapons: List[Weapon]) -> bool:
    return any(NUCLEAR_WEAPON in w.name for w in weapons)
