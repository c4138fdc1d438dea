"""CLI commands for healcli."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from healcli import __version__

if TYPE_CHECKING:
    from healcli.core.config import HealConfig
    from healcli.core.scenario_io import ScenarioData
    from healcli.models.locator import RecordedAction

# Load .env file from current directory or parent directories
load_dotenv()

app = typer.Typer(
    name="heal",
    help="Locator bundles and self-healing for recorded Android steps",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"heal version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """heal - locator self-healing for mobile recordings."""
    pass


def _load_config(verbose: bool, log_dir: Path) -> HealConfig:
    """Load config and enable debug logging when asked."""
    from healcli.core.config import ConfigLoader, setup_logging

    config = ConfigLoader.load()
    if verbose or config.verbose:
        log_file = setup_logging(verbose=True, log_dir=log_dir)
        if log_file:
            console.print(f"[dim]Verbose logging → {log_file}[/dim]")
    return config


def _load_scenario_or_exit(path: Path) -> ScenarioData:
    from healcli.core.scenario_io import ScenarioError, load_scenario

    try:
        return load_scenario(path)
    except ScenarioError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)


def _read_dump_or_exit(path: Path) -> str:
    if not path.exists():
        console.print(f"[red]Error:[/red] UI dump not found: {path}")
        raise typer.Exit(2)
    return path.read_text(encoding="utf-8", errors="replace")


def _get_step(actions: list[RecordedAction], step: int) -> RecordedAction:
    """Return 1-based step or exit."""
    if step < 1 or step > len(actions):
        console.print(f"[red]Error:[/red] Step {step} out of range (1-{len(actions)})")
        raise typer.Exit(2)
    return actions[step - 1]


def _format_primary(action: RecordedAction) -> str:
    bundle = action.locator_bundle
    if bundle is None or bundle.primary is None:
        return "[yellow]-[/yellow]"
    return escape(f"{bundle.primary.strategy.value}={bundle.primary.value}")


@app.command()
def normalize(
    scenario: Path = typer.Argument(..., help="Scenario JSON file"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write here instead of in place"),
    verbose: bool = typer.Option(False, "--verbose", help="Write debug.log next to the scenario"),
) -> None:
    """Attach locator bundles to every step that needs one."""
    from healcli.core.locator_bundle import normalize_actions_for_locator_healing
    from healcli.core.scenario_io import save_scenario

    _load_config(verbose, scenario.parent)
    data = _load_scenario_or_exit(scenario)

    before = data.actions
    data.actions = normalize_actions_for_locator_healing(before)
    updated = sum(1 for old, new in zip(before, data.actions) if old.locator_bundle != new.locator_bundle)

    table = Table(title="Locator Bundles")
    table.add_column("Step", style="cyan", justify="right")
    table.add_column("Type", style="green")
    table.add_column("Primary")
    table.add_column("Fallbacks", justify="right")

    for i, action in enumerate(data.actions, start=1):
        if not action.requires_locator:
            continue
        fallbacks = len(action.locator_bundle.fallbacks) if action.locator_bundle else 0
        table.add_row(str(i), action.type, _format_primary(action), str(fallbacks))

    console.print(table)

    for i, action in enumerate(data.actions, start=1):
        if action.requires_locator and action.locator_bundle is None:
            console.print(f"[yellow]Warning:[/yellow] Step {i} has no locator, coordinate fallback mode")

    saved = save_scenario(data, output or scenario)
    console.print(f"[green]Updated {updated} step(s)[/green] → {saved}")


@app.command()
def candidates(
    scenario: Path = typer.Argument(..., help="Scenario JSON file"),
    step: int = typer.Option(..., "--step", "-s", help="Step number (1-based)"),
) -> None:
    """Show ranked locator candidates for one step."""
    from healcli.core.locator_candidates import build_locator_candidates

    data = _load_scenario_or_exit(scenario)
    action = _get_step(data.actions, step)
    ranked = build_locator_candidates(action)

    if not ranked:
        console.print(f"[yellow]No locator candidates for step {step}[/yellow]")
        raise typer.Exit(1)

    table = Table(title=f"Step {step} candidates")
    table.add_column("Score", style="cyan", justify="right")
    table.add_column("Strategy", style="green")
    table.add_column("Value")
    table.add_column("Source", style="dim")

    for candidate in ranked:
        table.add_row(
            f"{candidate.score:g}",
            candidate.strategy.value,
            escape(candidate.value),
            candidate.source or "",
        )

    console.print(table)


@app.command()
def resolve(
    dump: Path = typer.Argument(..., help="uiautomator XML dump"),
    locator: str = typer.Argument(..., help="Locator value"),
    strategy: str | None = typer.Option(
        None, "--strategy", "-s", help="id, accessibilityId, text or xpath (inferred if omitted)"
    ),
) -> None:
    """Print the center of the element a locator matches."""
    from healcli.core.locator_candidates import infer_locator_strategy
    from healcli.core.locator_resolver import find_center_from_locator

    xml = _read_dump_or_exit(dump)
    resolved_strategy = infer_locator_strategy(locator, strategy)
    point = find_center_from_locator(xml, locator, resolved_strategy)

    if point is None:
        target = escape(f"{resolved_strategy.value}={locator}")
        console.print(f"[yellow]No match[/yellow] for {target}")
        raise typer.Exit(1)

    console.print(f"{point.x},{point.y}")


@app.command()
def inspect(
    dump: Path = typer.Argument(..., help="uiautomator XML dump"),
    x: int = typer.Argument(..., help="X coordinate"),
    y: int = typer.Argument(..., help="Y coordinate"),
    parent_id: str | None = typer.Option(None, "--parent-id", help="Ancestor resource-id to anchor on"),
) -> None:
    """Show the element at a point and xpath candidates for it."""
    from healcli.core.fingerprint import compute_element_fingerprint
    from healcli.core.smart_xpath import build_smart_xpath_candidates
    from healcli.core.ui_element_parser import UIElementParser

    parser = UIElementParser()
    nodes = parser.parse_xml_string(_read_dump_or_exit(dump))
    node = parser.find_node_at(nodes, x, y)

    if node is None:
        console.print(f"[yellow]No element at {x},{y}[/yellow]")
        raise typer.Exit(1)

    meta = node.to_metadata()
    panel_content = "\n".join(f"[dim]{key}:[/dim] {escape(value)}" for key, value in meta.items())
    panel_content += f"\n[dim]fingerprint:[/dim] {compute_element_fingerprint(meta)}"
    console.print(Panel(panel_content, border_style="blue", padding=(0, 1)))

    table = Table(title="XPath candidates")
    table.add_column("Score", style="cyan", justify="right")
    table.add_column("XPath")
    table.add_column("Reason", style="dim")
    for candidate in build_smart_xpath_candidates(meta, parent_id):
        table.add_row(f"{candidate.score:g}", escape(candidate.value), candidate.reason or "")
    console.print(table)


@app.command()
def heal(
    scenario: Path = typer.Argument(..., help="Scenario JSON file"),
    dump: Path = typer.Argument(..., help="uiautomator XML dump of the current screen"),
    step: int = typer.Option(..., "--step", "-s", help="Step number (1-based)"),
    verbose: bool = typer.Option(False, "--verbose", help="Write debug.log next to the scenario"),
) -> None:
    """Locate a step's element on the current screen."""
    from healcli.core.healing_engine import LocatorHealingEngine
    from healcli.core.locator_bundle import ensure_locator_bundle
    from healcli.core.self_healer import resolve_action

    config = _load_config(verbose, scenario.parent)
    data = _load_scenario_or_exit(scenario)
    action = ensure_locator_bundle(_get_step(data.actions, step))
    xml = _read_dump_or_exit(dump)

    engine = LocatorHealingEngine(
        enabled=config.healing.enabled,
        threshold=config.healing.threshold,
    )
    resolution = resolve_action(action, xml, engine)

    if resolution is None:
        console.print(f"[red]Unresolved:[/red] step {step} not found, capture the element again")
        raise typer.Exit(1)

    how = resolution.resolved_by
    if resolution.candidate is not None:
        how += f" {resolution.candidate.strategy.value}={resolution.candidate.value}"
    style = "yellow" if resolution.healed else "green"
    console.print(f"[{style}]{resolution.point.x},{resolution.point.y}[/{style}] [dim]via {escape(how)}[/dim]")


@app.command()
def audit(
    scenario: Path = typer.Argument(..., help="Scenario JSON file"),
    threshold: int | None = typer.Option(
        None, "--threshold", "-t", help="Critical score threshold (default from config)"
    ),
) -> None:
    """Report critically weak locators and suggested replacements."""
    from healcli.core.locator_insights import build_low_score_locator_insights
    from healcli.core.stable_locator import is_weak_class_only_xpath, suggest_locator_fix

    config = _load_config(False, scenario.parent)
    data = _load_scenario_or_exit(scenario)
    critical = threshold if threshold is not None else config.insights.critical_threshold

    insights = build_low_score_locator_insights(data.actions, critical_threshold=critical)
    if insights:
        table = Table(title="Critical locators")
        table.add_column("Step", style="cyan", justify="right")
        table.add_column("Score", style="red", justify="right")
        table.add_column("Issue")
        table.add_column("Resolution")
        for insight in insights:
            table.add_row(
                str(insight.step_index + 1),
                f"{insight.score:g}",
                escape(insight.issue),
                escape(insight.resolution),
            )
        console.print(table)
    else:
        console.print("[green]No critical locators[/green]")

    for i, action in enumerate(data.actions, start=1):
        if not action.requires_locator or not is_weak_class_only_xpath(action.locator):
            continue
        fix = suggest_locator_fix(action)
        if fix is None:
            console.print(f"[yellow]Step {i}:[/yellow] class-only xpath, capture the element again")
        else:
            replacement = escape(f"{fix.strategy.value}={fix.value}")
            console.print(f"[yellow]Step {i}:[/yellow] class-only xpath, use {replacement}")


if __name__ == "__main__":
    app()
