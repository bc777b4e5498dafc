"""
Country model and registry.
Countries are created by player placement or by secession and are never deleted;
a country left without territory is defeated but stays in the registry.
"""

from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from functools import lru_cache
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple
import math
import random

from geography import Point, Territory
from technology import Era, FINAL_ERA, Weapon, roll_loadout


@lru_cache(maxsize=None)
def exact(factor: float) -> Fraction:
    """Decimal value of a configured factor, e.g. 0.001 -> 1/1000."""
    return Fraction(str(factor))


def scale(value: int, factor: float) -> int:
    """
    floor(value * factor) in exact arithmetic. Resources grow without bound at
    high speeds, past the range a float can hold.
    """
    return math.floor(value * exact(factor))


class Disposition(Enum):
    """AI temperament. Stored for display; no policy reads it yet."""
    PEACEFUL = "peaceful"
    AGGRESSIVE = "aggressive"
    EXPANSIONIST = "expansionist"
    DEFENSIVE = "defensive"
    NEUTRAL = "neutral"


@dataclass
class Diplomacy:
    allies: Set[str] = field(default_factory=set)
    enemies: Set[str] = field(default_factory=set)


class Country:
    """Sovereign country used by the world, combat and politics systems."""
    def __init__(
        self,
        id: str,
        name: str,
        color: str,
        population: int,
        economy: int,
        military: int,
        territories: List[Territory],
        capital: Point,
        cities: List[Point],
        weapons: List[Weapon],
        disposition: Disposition,
        era_level: int = 0,
        diplomacy: Optional[Diplomacy] = None,
    ):
        # identity
        self.id = id
        self.name = name
        self.color = color

        # resources
        self.population = int(population)
        self.economy = int(economy)
        self.military = int(military)

        self.territories: List[Territory] = list(territories)
        self.capital: Point = capital
        self.cities: List[Point] = list(cities)
        self.weapons: List[Weapon] = list(weapons)
        self.diplomacy = diplomacy if diplomacy is not None else Diplomacy()
        self.disposition = disposition
        self.era_level = int(era_level)

    @property
    def era(self) -> Era:
        return Era(self.era_level)

    @property
    def is_defeated(self) -> bool:
        return not self.territories

    def territory_ids(self) -> Set[str]:
        return {t.id for t in self.territories}

    def resources(self) -> Tuple[int, int, int]:
        return (self.population, self.economy, self.military)

    def __repr__(self) -> str:
        return f"Country({self.id!r}, {self.name!r}, era={self.era.label})"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize country state for snapshots and dashboards."""
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "population": self.population,
            "economy": self.economy,
            "military": self.military,
            "territories": [t.id for t in self.territories],
            "capital": self.capital,
            "cities": list(self.cities),
            "weapons": [w.to_dict() for w in self.weapons],
            "allies": sorted(self.diplomacy.allies),
            "enemies": sorted(self.diplomacy.enemies),
            "disposition": self.disposition.value,
            "era": self.era.label,
            "era_level": self.era_level,
        }


class CountryRegistry:
    """
    Holds every country in creation order.
    The registry does not touch the territory grid: callers creating a country
    must also record ownership of its founding territory.
    """

    def __init__(self):
        self._countries: Dict[str, Country] = {}
        self._next_id = 1

    def create(self, **attributes) -> Country:
        country_id = f"country-{self._next_id}"
        self._next_id += 1
        country = Country(id=country_id, **attributes)
        self._countries[country_id] = country
        return country

    def get(self, country_id: str) -> Optional[Country]:
        return self._countries.get(country_id)

    def __iter__(self) -> Iterator[Country]:
        return iter(self._countries.values())

    def __len__(self) -> int:
        return len(self._countries)

    def __contains__(self, country_id: str) -> bool:
        return country_id in self._countries

    def apply_growth(self, country: Country, population: int = 0,
                     economy: int = 0, military: int = 0) -> None:
        """Apply sign-aware resource deltas, clamping every resource at zero."""
        country.population = max(0, country.population + int(population))
        country.economy = max(0, country.economy + int(economy))
        country.military = max(0, country.military + int(military))

    def advance_era(self, country: Country) -> int:
        """Move one era forward unless already in the final era."""
        if country.era_level < FINAL_ERA:
            country.era_level += 1
        return country.era_level

    def refresh_weapons(self, country: Country, rng: random.Random) -> None:
        country.weapons = roll_loadout(country.era, rng)

    def totals(self) -> Dict[str, int]:
        return {
            "population": sum(c.population for c in self),
            "economy": sum(c.economy for c in self),
            "military": sum(c.military for c in self),
        }
