"""
Player-facing controller: country placement and selection, speed and run state,
read-only snapshots for the display layer, and the fixed-cadence tick loop.
"""

import copy
import random
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from config import COUNTRY_COLORS, COUNTRY_NAMES, SPEED_MODES, SpeedMode
from chronology import SimDate
from events import WarEvent
from geography import Point, Territory
from nation import Country, Disposition
from technology import Era, Weapon
from world import World, tick
from logger import get_logger

logger = get_logger("controller")

# Starting resource ranges (inclusive) for player-founded countries
POPULATION_RANGE = (100000, 1099999)
ECONOMY_RANGE = (10000, 59999)
MILITARY_RANGE = (1000, 10999)
STARTING_WEAPONS = (("Spear", 100, 1099), ("Sword", 50, 549))


@dataclass(frozen=True)
class WorldSnapshot:
    """Detached copy of world state for rendering. Mutating it has no effect on the world."""
    territories: Tuple[Territory, ...]
    countries: Tuple[Country, ...]
    date: SimDate
    events: Tuple[WarEvent, ...]
    selected_country: Optional[Country]
    running: bool
    speed_index: int
    totals: Dict[str, int]

    @property
    def speed(self) -> SpeedMode:
        return SPEED_MODES[self.speed_index]


class SimulationController:
    """
    Serializes player intents with tick execution on a single thread.
    """

    def __init__(self, world: World, rng: Optional[random.Random] = None):
        self.world = world
        self.rng = rng if rng is not None else world.rng
        self.running = False
        self.speed_index = 0
        self.selected_id: Optional[str] = None

    @property
    def speed_multiplier(self) -> int:
        return SPEED_MODES[self.speed_index].multiplier

    def place_country(self, point: Point) -> Optional[Country]:
        """
        Found a country on the land cell under point. Clicks on ocean or on an
        owned cell are ignored and return None.
        """
        territory = self.world.grid.find_containing(point)
        if territory is None or territory.owner_id is not None:
            logger.debug(f"Ignored placement at ({point[0]:.1f}, {point[1]:.1f})")
            return None

        rng = self.rng
        registry = self.world.countries
        index = len(registry)
        weapons = [Weapon(name, Era.ANCIENT, rng.randint(low, high))
                   for name, low, high in STARTING_WEAPONS]

        country = registry.create(
            name=COUNTRY_NAMES[index % len(COUNTRY_NAMES)],
            color=COUNTRY_COLORS[index % len(COUNTRY_COLORS)],
            population=rng.randint(*POPULATION_RANGE),
            economy=rng.randint(*ECONOMY_RANGE),
            military=rng.randint(*MILITARY_RANGE),
            territories=[territory],
            capital=territory.centroid,
            cities=[territory.random_point(rng)],
            weapons=weapons,
            disposition=rng.choice(list(Disposition)),
            era_level=Era.ANCIENT,
        )
        self.world.grid.transfer_ownership(territory.id, country.id)
        self.selected_id = country.id

        logger.info(f"Founded {country.name} ({country.id}) on {territory.id}")
        return country

    def place_random_country(self, attempts: int = 100) -> Optional[Country]:
        """Try random map points until a placement succeeds."""
        for _ in range(attempts):
            country = self.place_country(self.world.random_map_point(self.rng))
            if country is not None:
                return country
        return None

    def select_country(self, country_id: str) -> Optional[Country]:
        country = self.world.countries.get(country_id)
        if country is not None:
            self.selected_id = country_id
        return country

    @property
    def selected_country(self) -> Optional[Country]:
        if self.selected_id is None:
            return None
        return self.world.countries.get(self.selected_id)

    def set_speed(self, index: int) -> None:
        """Pick a speed mode. Index 0 pauses; any other index resumes a paused run."""
        if not 0 <= index < len(SPEED_MODES):
            raise ValueError(f"unknown speed index {index}")
        self.speed_index = index
        if index == 0:
            self.running = False
        elif not self.running:
            self.running = True

    def toggle_running(self) -> bool:
        self.running = not self.running
        return self.running

    def can_tick(self) -> bool:
        return self.running and self.speed_multiplier > 0 and len(self.world.countries) > 0

    def step(self) -> List[WarEvent]:
        """Run a single tick if the simulation is running at non-zero speed."""
        if not self.can_tick():
            return []
        return tick(self.world, self.speed_multiplier, self.rng)

    def run(self, max_ticks: Optional[int] = None, interval: Optional[float] = None,
            on_tick: Optional[Callable[[int, List[WarEvent]], None]] = None) -> int:
        """
        Tick on a fixed cadence until paused or max_ticks is reached.
        An in-flight tick always completes; pausing takes effect before the next.
        Returns the number of ticks executed.
        """
        if interval is None:
            interval = self.world.config.tick_interval
        executed = 0
        while self.can_tick() and (max_ticks is None or executed < max_ticks):
            started = time.monotonic()
            events = self.step()
            executed += 1
            if on_tick is not None:
                on_tick(executed, events)
            remaining = interval - (time.monotonic() - started)
            if remaining > 0:
                time.sleep(remaining)
        return executed

    def snapshot(self) -> WorldSnapshot:
        world = self.world
        countries = copy.deepcopy(tuple(world.countries))
        selected = next((c for c in countries if c.id == self.selected_id), None)
        return WorldSnapshot(
            territories=tuple(copy.copy(t) for t in world.grid),
            countries=countries,
            date=world.date,
            events=tuple(world.event_log),
            selected_country=selected,
            running=self.running,
            speed_index=self.speed_index,
            totals=world.countries.totals(),
        )
