"""
Configuration and constants for the territorial world-growth simulation.
Growth rates and event probabilities are per country per tick.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List


@dataclass
class SimulationConfig:
    """Global simulation configuration."""

    num_countries: int = 4
    num_ticks: int = 200
    output_dir: Path = Path("output")

    # Map geometry (abstract grid of equal cells)
    rows: int = 30
    cols: int = 60
    map_width: float = 1200.0
    map_height: float = 600.0
    land_probability: float = 0.8  # ~20% of cells are ocean
    adjacency_radius: float = 50.0

    # Resource growth, scaled by the speed multiplier
    population_growth_rate: float = 0.001
    economy_growth_rate: float = 0.002
    military_growth_rate: float = 0.001

    # Technology
    era_advance_threshold: float = 0.1
    era_economy_scale: float = 100000.0
    era_speed_scale: float = 100.0

    # Cities
    city_population_step: int = 500000

    # Event probabilities
    expansion_probability: float = 0.15
    nuclear_probability: float = 0.01
    war_probability: float = 0.05
    secession_probability: float = 0.02

    # Nuclear strikes
    nuclear_min_era: int = 4
    nuclear_population_loss: float = 0.3
    nuclear_economy_retained: float = 0.7
    nuclear_military_retained: float = 0.8

    # Secession shares (child share, parent keeps the complement)
    secession_min_territories: int = 3
    secession_population_share: float = 0.3
    secession_economy_share: float = 0.2
    secession_military_share: float = 0.15
    secession_weapon_share: float = 0.2

    event_log_capacity: int = 10
    tick_interval: float = 1.0  # wall-clock seconds per tick

    def __post_init__(self):
        self.output_dir = Path(self.output_dir)
        if not 0.0 <= self.land_probability <= 1.0:
            raise ValueError(f"land_probability must be within [0, 1], got {self.land_probability}")
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"grid must have positive size, got {self.rows}x{self.cols}")
        if self.map_width <= 0 or self.map_height <= 0:
            raise ValueError("map dimensions must be positive")
        if self.event_log_capacity < 1:
            raise ValueError("event_log_capacity must be at least 1")

    @property
    def cell_width(self) -> float:
        return self.map_width / self.cols

    @property
    def cell_height(self) -> float:
        return self.map_height / self.rows


@dataclass(frozen=True)
class SpeedMode:
    name: str
    description: str
    multiplier: int


# Index-addressed; index 0 pauses the simulation
SPEED_MODES: List[SpeedMode] = [
    SpeedMode("Pause", "Paused", 0),
    SpeedMode("1x", "1 day/tick", 1),
    SpeedMode("10x", "10 days/tick", 10),
    SpeedMode("365x", "1 year/tick", 365),
    SpeedMode("3650x", "10 years/tick", 3650),
    SpeedMode("36500x", "100 years/tick", 36500),
]

COUNTRY_COLORS = ["#E74C3C", "#3498DB", "#2ECC71", "#F39C12",
                  "#9B59B6", "#1ABC9C", "#E67E22", "#34495E"]

# Founder names cycle in placement order
COUNTRY_NAMES = ["Atlantis", "Lemuria", "El Dorado", "Shangri-La", "Valhalla",
                 "Asgard", "Olympus", "Avalon", "Utopia", "Eden"]

SEPARATIST_NAMES = ["Republic of Libertas", "New Hope", "Free Republic", "Independence"]
