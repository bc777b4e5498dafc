"""
Military conflict between countries.
Conventional wars are narrative only; nuclear strikes destroy a city and
cripple the target's resources.
"""

from typing import List, Optional
import random

from nation import Country, scale
from config import SimulationConfig
from events import EventKind, EventLog, WarEvent
from technology import has_nuclear_weapons
from logger import get_logger

logger = get_logger("combat")

NUCLEAR_RESULT = "nuclear strike - city destroyed!"
ATTACKER_VICTORY = "attacker victory"
DEFENDER_VICTORY = "defender victory"


class WarSystem:
    """Resolves per-country war and nuclear strike policies."""

    def __init__(self, config: SimulationConfig):
        self.config = config
        self.nuclear_detonations = 0
        self.wars_fought = 0

    def can_strike(self, attacker: Country) -> bool:
        """Nuclear era reached and a nuclear bomb in the loadout."""
        return (attacker.era_level >= self.config.nuclear_min_era
                and has_nuclear_weapons(attacker.weapons))

    def try_nuclear_strike(self, attacker: Country, roster: List[Country],
                           event_log: EventLog, date: str,
                           rng: random.Random) -> Optional[WarEvent]:
        """
        With nuclear_probability, destroy a random city of a random other
        country. Targets are drawn from roster (the tick-start country list),
        restricted to countries that still have at least one city.
        """
        if rng.random() >= self.config.nuclear_probability:
            return None
        if len(roster) < 2 or not self.can_strike(attacker):
            return None

        targets = [c for c in roster if c.id != attacker.id and c.cities]
        if not targets:
            return None

        target = rng.choice(targets)
        city_index = rng.randrange(len(target.cities))
        del target.cities[city_index]
        self._apply_nuclear_damage(target)
        self.nuclear_detonations += 1

        logger.info(f"NUCLEAR: {attacker.name} destroys a city of {target.name}")
        return event_log.record(EventKind.NUCLEAR, attacker.name, target.name, NUCLEAR_RESULT, date)

    def _apply_nuclear_damage(self, target: Country) -> None:
        population_loss = scale(target.population, self.config.nuclear_population_loss)
        target.population = max(0, target.population - population_loss)
        target.economy = scale(target.economy, self.config.nuclear_economy_retained)
        target.military = scale(target.military, self.config.nuclear_military_retained)

    def try_conventional_war(self, attacker: Country, roster: List[Country],
                             event_log: EventLog, date: str,
                             rng: random.Random) -> Optional[WarEvent]:
        """
        With war_probability, fight a random other country. The outcome is a
        coin flip and only produces a log entry; resources are untouched.
        """
        if rng.random() >= self.config.war_probability:
            return None
        if len(roster) < 2:
            return None

        enemies = [c for c in roster if c.id != attacker.id]
        if not enemies:
            return None

        defender = rng.choice(enemies)
        result = ATTACKER_VICTORY if rng.random() > 0.5 else DEFENDER_VICTORY
        self.wars_fought += 1

        logger.debug(f"WAR: {attacker.name} attacks {defender.name}, {result}")
        return event_log.record(EventKind.WAR, attacker.name, defender.name, result, date)
