"""
twoleg CLI entry point.

Usage:
    # Show configuration and persisted execution state
    twoleg --status

    # One arbitrage attempt per configured route on the simulated venues
    twoleg --simulate

    # Run the keeper until interrupted
    twoleg --keeper
"""

import signal
import sys
import time
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from twoleg.core.config import get_settings, load_yaml_config
from twoleg.core.errors import ArbitrageError, TwolegError
from twoleg.core.logging import setup_logging, get_logger
from twoleg.core.timeutil import format_epoch
from twoleg.domain.models import ArbitrageParameters, AttemptOutcome
from twoleg.services.keeper import create_keeper_service
from twoleg.services.persistence import create_state_store
from twoleg.services.simulation import Simulation, build_simulation

console = Console()
logger = get_logger("cli")


def run_simulation_once(simulation: Simulation, deposit: int) -> list[tuple[str, object]]:
    """
    Attempt every configured route once.

    Returns:
        (route label, AttemptOutcome or ArbitrageError) per route
    """
    results = []
    caller = get_settings().keeper_address
    for route in simulation.routes:
        label = f"{route.venue_a} -> {route.asset} -> {route.venue_b}"
        try:
            outcome = simulation.engine.attempt_arbitrage(
                caller,
                simulation.venue(route.venue_a),
                simulation.venue(route.venue_b),
                route.asset,
                deposit,
            )
            results.append((label, outcome))
        except ArbitrageError as e:
            results.append((label, e))
    return results


def display_results(results: list[tuple[str, object]], simulation: Simulation) -> None:
    """Display attempt results in terminal."""
    table = Table(title="Arbitrage Attempts")
    table.add_column("Route", style="cyan")
    table.add_column("Status")
    table.add_column("Round trip", justify="right")
    table.add_column("Profit", justify="right")
    table.add_column("Payout / Refund", justify="right")

    for label, item in results:
        if isinstance(item, AttemptOutcome):
            color = "green" if item.executed else "yellow"
            table.add_row(
                label,
                f"[{color}]{item.status.value}[/{color}]",
                f"{item.quote.amount_in} -> {item.quote.round_trip_out}",
                str(item.result.profit if item.result else item.verdict.profit),
                str(item.payout or item.refunded),
            )
        else:
            table.add_row(label, f"[red]{item.code}[/red]", "", "", item.message)

    console.print(table)

    caller = get_settings().keeper_address
    holdings = simulation.ledger.holdings(caller)
    console.print(f"\n[bold]{caller} holdings:[/bold] {holdings or 'none'}\n")


def show_status() -> None:
    """Show system status."""
    settings = get_settings()
    config = load_yaml_config()

    console.print("\n[bold]twoleg System Status[/bold]\n")

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Environment", settings.twoleg_env)
    table.add_row("Timezone", settings.timezone)
    table.add_row("Log Level", settings.log_level)
    table.add_row("Database", settings.database_url)
    table.add_row("Owner", settings.owner_address)
    table.add_row("Engine account", settings.engine_address)

    console.print(table)
    console.print()

    params = ArbitrageParameters.from_config(config.get("arbitrage") or {})
    table = Table(title="Arbitrage Parameters")
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", justify="right")
    for name, value in params.to_dict().items():
        table.add_row(name, str(value))

    console.print(table)
    console.print()

    state = create_state_store(settings).load()
    table = Table(title="Execution State")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    if state is None:
        table.add_row("saved state", "[yellow]none[/yellow]")
    else:
        table.add_row("paused", "[red]yes[/red]" if state.paused else "[green]no[/green]")
        table.add_row("auto trade", "on" if state.auto_trade_enabled else "off")
        table.add_row("last execution", format_epoch(state.last_execution_time))

    console.print(table)


def run_keeper(simulation: Simulation, config: dict) -> None:
    """Run the keeper until SIGINT/SIGTERM."""
    console.print("[bold]Starting twoleg keeper...[/bold]")
    console.print("Press Ctrl+C to stop\n")

    keeper = create_keeper_service(simulation, config)
    simulation.admin.set_auto_trade_enabled(get_settings().owner_address, True)
    keeper.start()

    for job in keeper.get_jobs():
        console.print(f"  {job['name']}: next run {job['next_run'] or 'N/A'}")

    def shutdown(signum, frame):
        console.print("\n[yellow]Shutting down...[/yellow]")
        keeper.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        while True:
            signal.pause()
    except AttributeError:
        # Windows doesn't have signal.pause
        while True:
            time.sleep(1)


@click.command()
@click.option("--status", is_flag=True, help="Show configuration and execution state")
@click.option("--simulate", is_flag=True, help="Attempt each route once on simulated venues")
@click.option("--keeper", is_flag=True, help="Run the keeper on simulated venues")
@click.option("--deposit", type=int, default=None, help="Deposit per attempt (base units)")
@click.option("--config", "config_path", default=None, help="Path to config.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def main(
    status: bool,
    simulate: bool,
    keeper: bool,
    deposit: Optional[int],
    config_path: Optional[str],
    verbose: bool,
) -> None:
    """twoleg - two-leg arbitrage engine"""

    setup_logging(log_level="DEBUG" if verbose else None)

    if status:
        show_status()
        return

    if not (simulate or keeper):
        ctx = click.get_current_context()
        click.echo(ctx.get_help())
        return

    try:
        config = load_yaml_config(config_path)
        simulation = build_simulation(config, state_store=create_state_store())
    except (FileNotFoundError, TwolegError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if simulate:
        amount = deposit if deposit is not None else int((config.get("keeper") or {}).get("deposit", 0))
        display_results(run_simulation_once(simulation, amount), simulation)
        return

    run_keeper(simulation, config)


if __name__ == "__main__":
    main()
