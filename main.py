"""
Territorial World-Growth Simulation
Entry point: founds countries on a random map and runs the tick loop with a
live terminal dashboard.
"""

import argparse
import math
import random
from pathlib import Path

from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.layout import Layout
from rich.panel import Panel

from config import SimulationConfig, SPEED_MODES
from controller import SimulationController, WorldSnapshot
from logger import setup_logger
from world import World

logger = None
console = Console()


def format_number(num: int) -> str:
    """Compact display form: 1.2K, 3.4M, 5.6B, 7.8e15."""
    if num >= 10 ** 12:
        # Exact integer division; totals may exceed the float range
        exponent = int(math.log10(num))
        return f"{num / 10 ** exponent:.1f}e{exponent}"
    if num >= 1e9:
        return f"{num / 1e9:.1f}B"
    if num >= 1e6:
        return f"{num / 1e6:.1f}M"
    if num >= 1e3:
        return f"{num / 1e3:.1f}K"
    return str(num)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments for simulation configuration."""
    parser = argparse.ArgumentParser(
        description="Territorial world-growth simulation"
    )
    parser.add_argument(
        "--countries", type=int, default=4,
        help="Number of countries founded before the run (default: 4)"
    )
    parser.add_argument(
        "--ticks", type=int, default=200,
        help="Number of ticks to simulate (default: 200)"
    )
    parser.add_argument(
        "--speed", type=int, choices=range(1, len(SPEED_MODES)), default=3,
        help="Speed mode index: 1=1x, 2=10x, 3=365x, 4=3650x, 5=36500x (default: 3)"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for reproducibility"
    )
    parser.add_argument(
        "--interval", type=float, default=0.0,
        help="Wall-clock seconds between ticks (default: 0, as fast as possible)"
    )
    parser.add_argument(
        "--rows", type=int, default=30,
        help="Map grid rows (default: 30)"
    )
    parser.add_argument(
        "--cols", type=int, default=60,
        help="Map grid columns (default: 60)"
    )
    parser.add_argument(
        "--output-dir", type=str, default="output",
        help="Directory for the timeline chart (default: output)"
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING",
        help="Logging verbosity level (default: WARNING)"
    )
    parser.add_argument(
        "--no-viz", action="store_true",
        help="Skip the timeline chart"
    )
    return parser.parse_args(argv)


def create_dashboard(snapshot: WorldSnapshot, tick_no: int, total_ticks: int):
    """Create a rich layout dashboard."""
    layout = Layout()
    layout.split_column(
        Layout(name="header", size=3),
        Layout(name="main", ratio=1),
        Layout(name="footer", size=3)
    )

    totals = snapshot.totals
    layout["header"].update(Panel(
        f"{snapshot.date.format()}  |  Tick {tick_no}/{total_ticks}  |  "
        f"Pop {format_number(totals['population'])}  "
        f"Econ {format_number(totals['economy'])}  "
        f"Mil {format_number(totals['military'])}",
        style="bold blue"
    ))

    table = Table(title="Countries")
    table.add_column("Country", style="cyan")
    table.add_column("Pop", style="green", justify="right")
    table.add_column("Econ", style="yellow", justify="right")
    table.add_column("Mil", style="red", justify="right")
    table.add_column("Terr", justify="right")
    table.add_column("Cities", justify="right")
    table.add_column("Era")

    ranked = sorted(snapshot.countries, key=lambda c: c.population, reverse=True)
    for country in ranked[:15]:
        table.add_row(
            country.name,
            format_number(country.population),
            format_number(country.economy),
            format_number(country.military),
            str(len(country.territories)),
            str(len(country.cities)),
            country.era.label,
        )

    event_text = "\n".join(f"• {e}" for e in snapshot.events) if snapshot.events else "No events yet."

    layout["main"].split_row(
        Layout(Panel(table, title="Registry"), ratio=3),
        Layout(Panel(event_text, title="Recent Events", style="yellow"), ratio=2)
    )

    state = "Running" if snapshot.running else "Paused"
    layout["footer"].update(Panel(f"{state} at {snapshot.speed.description}", style="italic"))

    return layout


def print_summary(snapshot: WorldSnapshot):
    """Print final standings."""
    table = Table(title=f"Final State - {snapshot.date.format()}")
    table.add_column("Country", style="cyan")
    table.add_column("Population", justify="right")
    table.add_column("Economy", justify="right")
    table.add_column("Military", justify="right")
    table.add_column("Territories", justify="right")
    table.add_column("Era")
    table.add_column("Disposition")
    for country in sorted(snapshot.countries, key=lambda c: len(c.territories), reverse=True):
        table.add_row(
            country.name + (" (defeated)" if country.is_defeated else ""),
            format_number(country.population),
            format_number(country.economy),
            format_number(country.military),
            str(len(country.territories)),
            country.era.label,
            country.disposition.value,
        )
    console.print(table)


def main(argv=None):
    """Run the simulation with a live dashboard and optional timeline chart."""
    global logger
    args = parse_args(argv)

    logger = setup_logger(level_name=args.log_level)

    rng = random.Random(args.seed)

    output_dir = Path(args.output_dir)
    config = SimulationConfig(
        num_countries=args.countries,
        num_ticks=args.ticks,
        output_dir=output_dir,
        rows=args.rows,
        cols=args.cols,
        tick_interval=args.interval,
    )

    console.print(f"[bold green]Generating a {config.rows}x{config.cols} map...[/bold green]")
    world = World(config, rng=rng)
    controller = SimulationController(world, rng=rng)

    for _ in range(config.num_countries):
        if controller.place_random_country() is None:
            logger.warning("No free land left for another country")
            break

    history = [world.stats()]

    with Live(console=console, refresh_per_second=4) as live:
        def on_tick(tick_no, events):
            history.append(world.stats())
            live.update(create_dashboard(controller.snapshot(), tick_no, config.num_ticks))

        controller.set_speed(args.speed)
        controller.run(max_ticks=config.num_ticks, interval=config.tick_interval, on_tick=on_tick)
        controller.set_speed(0)

    print_summary(controller.snapshot())

    if not args.no_viz:
        from viz import Visualizer

        output_dir.mkdir(exist_ok=True)
        chart = Visualizer(config).plot_timeline_analysis(history, output_dir / "timeline_analysis.png")
        console.print(f"[bold green]Timeline saved to {chart}[/bold green]")

    console.print("[bold blue]Simulation complete![/bold blue]")


if __name__ == "__main__":
    main()
