"""
World simulation orchestration.
Owns the territory grid, the country registry, the event log and the calendar,
and advances them one tick at a time.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, List, Optional
import random

from config import SimulationConfig
from chronology import SimDate, advance
from combat import WarSystem
from events import EventKind, EventLog, WarEvent
from geography import Territory, TerritoryGrid
from nation import Country, CountryRegistry, exact, scale
from politics import SecessionSystem
from technology import FINAL_ERA
from logger import get_logger

logger = get_logger("world")

NEUTRAL_TERRITORY = "Neutral territory"
EXPANSION_RESULT = "territory captured"


class InvariantViolation(AssertionError):
    """World state broke an ownership or resource invariant."""


@dataclass(frozen=True)
class _PreTick:
    """Resource values of a country as they stood when the tick began."""
    population: int
    economy: int
    military: int
    city_count: int


class World:
    """Global simulation state: the single aggregate mutated by ticks and placement."""

    def __init__(self, config: SimulationConfig, rng: Optional[random.Random] = None,
                 grid: Optional[TerritoryGrid] = None):
        self.config = config
        self.rng = rng if rng is not None else random.Random()

        self.grid = grid if grid is not None else TerritoryGrid.generate(
            config.rows, config.cols, config.map_width, config.map_height,
            config.land_probability, self.rng,
        )
        self.countries = CountryRegistry()
        self.event_log = EventLog(config.event_log_capacity)
        self.date = SimDate()
        self.tick_count = 0

        # Global systems
        self.combat = WarSystem(config)
        self.politics = SecessionSystem(config)

        logger.debug(f"Generated {len(self.grid)} land territories "
                     f"on a {config.rows}x{config.cols} grid")

    def random_map_point(self, rng: random.Random):
        return (rng.random() * self.config.map_width, rng.random() * self.config.map_height)

    def stats(self) -> Dict:
        totals = self.countries.totals()
        living = sum(1 for c in self.countries if not c.is_defeated)
        return {
            "tick": self.tick_count,
            "date": self.date.format(),
            "total_population": totals["population"],
            "total_economy": totals["economy"],
            "total_military": totals["military"],
            "countries": len(self.countries),
            "living_countries": living,
            "defeated_countries": len(self.countries) - living,
            "claimed_territories": sum(1 for t in self.grid if t.owner_id is not None),
            "nuclear_detonations": self.combat.nuclear_detonations,
        }

    def check_invariants(self) -> None:
        """Raise InvariantViolation if ownership or resource invariants are broken."""
        claimed: Dict[str, str] = {}
        for country in self.countries:
            for territory in country.territories:
                if territory.id in claimed:
                    raise InvariantViolation(
                        f"{territory.id} claimed by {claimed[territory.id]} and {country.id}")
                claimed[territory.id] = country.id
                stored = self.grid.get(territory.id)
                if stored is None or stored.owner_id != country.id:
                    raise InvariantViolation(
                        f"{country.id} lists {territory.id} but the grid disagrees")

            owned_in_grid = {t.id for t in self.grid.owned_by(country.id)}
            if owned_in_grid != country.territory_ids():
                raise InvariantViolation(f"{country.id} territory list out of sync with grid")

            if min(country.resources()) < 0:
                raise InvariantViolation(f"{country.id} has negative resources {country.resources()}")
            if not 0 <= country.era_level <= FINAL_ERA:
                raise InvariantViolation(f"{country.id} era level {country.era_level} out of range")

        for territory in self.grid:
            if territory.owner_id is not None and territory.owner_id not in self.countries:
                raise InvariantViolation(f"{territory.id} owned by unknown {territory.owner_id}")

        if len(self.event_log) > self.event_log.capacity:
            raise InvariantViolation("event log exceeds its capacity")


def tick(world: World, speed_multiplier: int, rng: random.Random) -> List[WarEvent]:
    """
    Advance the world by one step of speed_multiplier days.

    Growth, technology and city spawning read each country's values from the
    start of the tick. Expansion, nuclear strikes, wars and secession then run
    once per country over the country list captured at tick start, so countries
    born from secession this tick neither act nor get targeted until the next.

    Returns the events logged during this tick, oldest first.
    """
    if speed_multiplier < 0:
        raise ValueError(f"speed multiplier must be non-negative, got {speed_multiplier}")

    world.date = advance(world.date, speed_multiplier)
    world.tick_count += 1
    date = world.date.format()

    roster = list(world.countries)
    pre_tick = {c.id: _PreTick(c.population, c.economy, c.military, len(c.cities)) for c in roster}
    unowned_at_start = world.grid.unowned_mask()

    for country in roster:
        snapshot = pre_tick[country.id]
        _grow(world, country, snapshot, speed_multiplier)
        _evolve_technology(world, country, snapshot, speed_multiplier, rng)
        _spawn_city(world, country, snapshot, rng)

    events: List[WarEvent] = []
    for country in roster:
        event = _expand(world, country, unowned_at_start, date, rng)
        if event:
            events.append(event)

        event = world.combat.try_nuclear_strike(country, roster, world.event_log, date, rng)
        if event:
            events.append(event)

        event = world.combat.try_conventional_war(country, roster, world.event_log, date, rng)
        if event:
            events.append(event)

        event = world.politics.try_secession(
            country, world.countries, world.grid, world.event_log, date, rng,
            color_index=len(roster))
        if event:
            events.append(event)

    return events


def _grow(world: World, country: Country, snapshot: _PreTick, speed: int) -> None:
    config = world.config
    world.countries.apply_growth(
        country,
        population=scale(snapshot.population * speed, config.population_growth_rate),
        economy=scale(snapshot.economy * speed, config.economy_growth_rate),
        military=scale(snapshot.military * speed, config.military_growth_rate),
    )


def _evolve_technology(world: World, country: Country, snapshot: _PreTick,
                       speed: int, rng: random.Random) -> None:
    """Possibly advance one era, then re-roll the loadout for the current era."""
    config = world.config
    chance = (Fraction(rng.random())
              * snapshot.economy / exact(config.era_economy_scale)
              * speed / exact(config.era_speed_scale))
    if chance > exact(config.era_advance_threshold) and country.era_level < FINAL_ERA:
        world.countries.advance_era(country)
        logger.debug(f"TECH: {country.name} enters the {country.era.label} era")
    world.countries.refresh_weapons(country, rng)


def _spawn_city(world: World, country: Country, snapshot: _PreTick, rng: random.Random) -> None:
    # City points are not constrained to the country's own territory
    if snapshot.population > world.config.city_population_step * snapshot.city_count:
        country.cities.append(world.random_map_point(rng))


def _expand(world: World, country: Country, unowned_at_start,
            date: str, rng: random.Random) -> Optional[WarEvent]:
    """
    With expansion_probability, claim a random unowned territory adjacent to
    the country. Candidates are judged against ownership at tick start; a
    candidate another country already claimed this tick is forfeited.
    """
    config = world.config
    if rng.random() >= config.expansion_probability:
        return None
    candidates = world.grid.frontier_of(country.territories, config.adjacency_radius, unowned_at_start)
    if not candidates:
        return None

    target: Territory = rng.choice(candidates)
    if target.owner_id is not None:
        logger.debug(f"EXPANSION: {country.name} lost the race for {target.id}")
        return None

    world.grid.transfer_ownership(target.id, country.id)
    country.territories.append(target)

    logger.debug(f"EXPANSION: {country.name} claims {target.id}")
    return world.event_log.record(EventKind.EXPANSION, country.name, NEUTRAL_TERRITORY, EXPANSION_RESULT, date)
