"""
Visualization module for simulation timelines.
Generates matplotlib charts of world totals over the run.
"""

from typing import List
from pathlib import Path
import math

import matplotlib
matplotlib.use('Agg')  # Headless; the chart is only written to disk
import matplotlib.pyplot as plt

from config import SimulationConfig


def _plottable(value) -> float:
    """Resource totals outgrow the float range at the fastest speeds."""
    try:
        return float(value)
    except OverflowError:
        return math.inf


class Visualizer:
    """Handles all plotting."""

    def __init__(self, config: SimulationConfig):
        self.config = config

    def plot_timeline_analysis(self, history: List[dict], output_path: Path) -> Path:
        """Generate timeline plots from a list of World.stats() records."""
        ticks = [h['tick'] for h in history]

        fig, axes = plt.subplots(2, 2, figsize=(16, 12))
        fig.suptitle('Simulation Timeline Analysis', fontsize=16, fontweight='bold')

        # Population over time
        pops = [_plottable(h['total_population']) / 1e6 for h in history]
        axes[0, 0].plot(ticks, pops, linewidth=2, color='green')
        axes[0, 0].set_title('World Population')
        axes[0, 0].set_xlabel('Tick')
        axes[0, 0].set_ylabel('Population (Millions)')
        axes[0, 0].grid(True, alpha=0.3)

        # Economy and military over time
        econ = [_plottable(h['total_economy']) for h in history]
        mil = [_plottable(h['total_military']) for h in history]
        axes[0, 1].plot(ticks, econ, linewidth=2, color='goldenrod', label='Economy')
        axes[0, 1].plot(ticks, mil, linewidth=2, color='red', label='Military')
        axes[0, 1].set_title('Economy & Military')
        axes[0, 1].set_xlabel('Tick')
        axes[0, 1].set_yscale('symlog')
        axes[0, 1].grid(True, alpha=0.3)
        axes[0, 1].legend()

        # Countries over time
        living = [h['living_countries'] for h in history]
        defeated = [h['defeated_countries'] for h in history]
        axes[1, 0].plot(ticks, living, linewidth=2, color='blue', label='Living')
        axes[1, 0].plot(ticks, defeated, linewidth=2, color='gray', linestyle='--', label='Defeated')
        axes[1, 0].set_title('Countries')
        axes[1, 0].set_xlabel('Tick')
        axes[1, 0].set_ylabel('Number of Countries')
        axes[1, 0].grid(True, alpha=0.3)
        axes[1, 0].legend()

        # Claimed land over time
        claimed = [h['claimed_territories'] for h in history]
        axes[1, 1].plot(ticks, claimed, linewidth=2, color='orange')
        axes[1, 1].set_title('Claimed Territories')
        axes[1, 1].set_xlabel('Tick')
        axes[1, 1].set_ylabel('Territories')
        axes[1, 1].grid(True, alpha=0.3)

        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return output_path
