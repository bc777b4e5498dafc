from typing import Optional
import math
import random

from config import COUNTRY_COLORS, SEPARATIST_NAMES, SimulationConfig
from events import EventKind, EventLog, WarEvent
from geography import TerritoryGrid
from nation import Country, CountryRegistry, Diplomacy, Disposition, exact, scale
from technology import Weapon
from logger import get_logger

logger = get_logger("politics")

INDEPENDENCE_RESULT = "independence declared"


class SecessionSystem:
    """
    Splits a territory off a large country into a new, hostile country.
    """
    def __init__(self, config: SimulationConfig):
        self.config = config
        self.secessions = 0

    def try_secession(self, parent: Country, registry: CountryRegistry,
                      grid: TerritoryGrid, event_log: EventLog, date: str,
                      rng: random.Random, color_index: Optional[int] = None) -> Optional[WarEvent]:
        """
        With secession_probability, detach one random territory of parent.
        color_index picks the separatist color; the tick passes its roster size so
        every separatist born in one tick shares a color.
        """
        if rng.random() >= self.config.secession_probability:
            return None
        if len(parent.territories) <= self.config.secession_min_territories:
            return None

        territory = rng.choice(parent.territories)
        if color_index is None:
            color_index = len(registry)
        cfg = self.config

        child = registry.create(
            name=rng.choice(SEPARATIST_NAMES),
            color=COUNTRY_COLORS[color_index % len(COUNTRY_COLORS)],
            population=scale(parent.population, cfg.secession_population_share),
            economy=scale(parent.economy, cfg.secession_economy_share),
            military=scale(parent.military, cfg.secession_military_share),
            territories=[territory],
            capital=territory.centroid,
            cities=[territory.random_point(rng)],
            # Separatists inherit the parent's loadout even though they trail an era
            weapons=[Weapon(w.name, w.era, scale(w.count, cfg.secession_weapon_share))
                     for w in parent.weapons],
            disposition=rng.choice(list(Disposition)),
            era_level=max(0, parent.era_level - 1),
            diplomacy=Diplomacy(enemies={parent.id}),
        )
        grid.transfer_ownership(territory.id, child.id)

        parent.territories = [t for t in parent.territories if t.id != territory.id]
        parent.population = _retain(parent.population, cfg.secession_population_share)
        parent.economy = _retain(parent.economy, cfg.secession_economy_share)
        parent.military = _retain(parent.military, cfg.secession_military_share)
        self.secessions += 1

        logger.info(f"SECESSION: {child.name} breaks away from {parent.name} ({territory.id})")
        return event_log.record(EventKind.SECESSION, child.name, parent.name, INDEPENDENCE_RESULT, date)


def _retain(value: int, share_lost: float) -> int:
    """floor(value * (1 - share_lost)), e.g. 70% kept after losing 30%."""
    return math.floor(value * (1 - exact(share_lost)))
