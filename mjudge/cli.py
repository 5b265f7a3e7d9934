"""mjudge CLI — Typer + Rich terminal interface.

Commands: rank, compare, analyze, strategies, scales, config.
A thin adapter over the engine for inspecting results from JSON files;
all output is Rich tables and panels, or JSON with --json.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mjudge import __version__
from mjudge.judgment.analyzer import analyze as analyze_aggregate
from mjudge.judgment.formatting import explain_score, format_score
from mjudge.judgment.registry import (
    available_strategies,
    build_engine,
    load_engine_config,
    load_scales,
)
from mjudge.options import OptionSet, load_options
from mjudge.schemas.comparison import Winner
from mjudge.schemas.engine import EngineConfig

console = Console()

app = typer.Typer(
    name="mjudge",
    help="Majority Judgment ranking with explainable tie-breaks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

_RESULT_STYLE = {
    "A_WINS": "green",
    "B_WINS": "red",
    "TIE": "yellow",
}


# ── Version callback ───────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"mjudge {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log ranking decisions to stderr.",
    ),
) -> None:
    """mjudge — Majority Judgment ranking with explainable tie-breaks."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


# ── Helpers ──────────────────────────────────────────────────────


def _load_config() -> EngineConfig:
    """Load engine defaults, exit on error."""
    try:
        return load_engine_config()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading engine config:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def _load_option_set(path: Path, scale: str | None) -> OptionSet:
    """Load an options file, exit on error."""
    try:
        return load_options(path, scale_name=scale)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading options:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def _build_engine(config: EngineConfig, strategy: str | None, resolution: str | None):
    try:
        return build_engine(config, strategy=strategy, group_resolution=resolution)
    except ValueError as e:
        console.print(f"[red]Invalid option:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def _require_option(option_set: OptionSet, option_id: str):
    try:
        return option_set.get(option_id)
    except KeyError:
        console.print(f"[red]Option not found:[/red] '{option_id}'")
        available = ", ".join(o.option_id for o in option_set.options)
        console.print(f"[dim]Available: {available}[/dim]")
        raise typer.Exit(1) from None


# ── mjudge rank ──────────────────────────────────────────────────


@app.command()
def rank(
    path: Path = typer.Argument(..., help="JSON file with option counts"),
    strategy: str = typer.Option(
        None, "--strategy", "-s",
        help="Tie-break strategy key (default from config)",
    ),
    scale: str = typer.Option(
        None, "--scale",
        help="Grade scale preset (overrides the file)",
    ),
    resolution: str = typer.Option(
        None, "--resolution", "-r",
        help="Group resolution: unsatisfied_groups or pairwise",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the ranking as JSON"),
) -> None:
    """Rank every option in a file."""
    config = _load_config()
    option_set = _load_option_set(path, scale)
    engine = _build_engine(config, strategy, resolution)

    ranked = engine.rank(option_set.entries())

    if as_json:
        payload = [r.model_dump(mode="json", exclude={"analysis"}) for r in ranked]
        typer.echo(json.dumps(payload, indent=2))
        return

    labels = option_set.labels()
    table = Table(
        title=f"Ranking ({engine.strategy.key.value}, {option_set.scale.name} scale)",
    )
    table.add_column("Rank", justify="right", style="bold")
    table.add_column("Option", style="cyan")
    table.add_column("Majority")
    table.add_column("Ballots", justify="right")
    table.add_column("Usual", justify="right")
    table.add_column("Tied with", style="dim")

    for entry in ranked:
        rank_label = f"{entry.rank}=" if entry.is_ex_aequo else str(entry.rank)
        if entry.is_winner:
            rank_label = f"[green]{rank_label}[/green]"
        table.add_row(
            rank_label,
            labels.get(entry.option_id, entry.option_id),
            entry.display_summary,
            str(entry.analysis.total),
            format_score(entry.analysis.scores.usual),
            ", ".join(entry.tied_with_option_ids),
        )

    console.print(table)


# ── mjudge compare ───────────────────────────────────────────────


@app.command()
def compare(
    path: Path = typer.Argument(..., help="JSON file with option counts"),
    option_a: str = typer.Argument(..., help="Id of option A"),
    option_b: str = typer.Argument(..., help="Id of option B"),
    strategy: str = typer.Option(
        None, "--strategy", "-s",
        help="Tie-break strategy key (default from config)",
    ),
    scale: str = typer.Option(None, "--scale", help="Grade scale preset"),
) -> None:
    """Explain the pairwise comparison of two options."""
    config = _load_config()
    option_set = _load_option_set(path, scale)
    engine = _build_engine(config, strategy, None)
    a = _require_option(option_set, option_a)
    b = _require_option(option_set, option_b)

    result = engine.compare(a.aggregate, b.aggregate)

    table = Table(title=f"{option_a} (A) vs {option_b} (B)")
    table.add_column("Step", style="bold")
    table.add_column("Grade A")
    table.add_column("Grade B")
    table.add_column("% A", justify="right")
    table.add_column("% B", justify="right")
    table.add_column("Value A", justify="right")
    table.add_column("Value B", justify="right")
    table.add_column("Result")

    for step in result.steps:
        style = _RESULT_STYLE[step.result.value]
        table.add_row(
            step.criterion,
            step.grade_a,
            step.grade_b,
            f"{step.percentage_a:.1f}",
            f"{step.percentage_b:.1f}",
            format_score(step.strength_a),
            format_score(step.strength_b),
            f"[{style}]{step.result.value}[/{style}]",
        )

    console.print(table)
    winner = {
        Winner.A: option_a,
        Winner.B: option_b,
        Winner.TIE: "tie",
    }[result.winner]
    console.print(
        Panel(
            f"[bold]Winner:[/bold] {winner}\n{result.final_result}",
            title=result.strategy,
            border_style="green" if not result.is_tie else "yellow",
        )
    )


# ── mjudge analyze ───────────────────────────────────────────────


@app.command()
def analyze(
    path: Path = typer.Argument(..., help="JSON file with option counts"),
    option_id: str = typer.Argument(..., help="Id of the option to analyze"),
    scale: str = typer.Option(None, "--scale", help="Grade scale preset"),
) -> None:
    """Show the truncation chain and scores of one option."""
    option_set = _load_option_set(path, scale)
    entry = _require_option(option_set, option_id)
    result = analyze_aggregate(entry.aggregate)

    console.print(
        Panel(
            f"[bold]{entry.label or entry.option_id}[/bold]: {result.display_summary}\n"
            f"[dim]Signature:[/dim] {result.comparison_signature}",
            border_style="blue",
        )
    )

    if result.iterations:
        table = Table(title="Truncation chain")
        table.add_column("#", justify="right")
        table.add_column("Grade", style="cyan")
        table.add_column("At least", justify="right")
        table.add_column("Strength", justify="right")
        table.add_column("Ballots left", justify="right")
        for n, it in enumerate(result.iterations, start=1):
            table.add_row(
                str(n),
                it.grade,
                f"{it.percentage:.1f}%",
                f"{it.strength:.1f}",
                str(it.votes_remaining),
            )
        console.print(table)

    scores = Table(title="Scores", show_header=False)
    scores.add_column("Score", style="bold")
    scores.add_column("Value", justify="right")
    scores.add_column("Reading", style="dim")
    for name, value in result.scores.model_dump().items():
        scores.add_row(name, format_score(value), explain_score(value))
    console.print(scores)


# ── mjudge strategies / scales / config ──────────────────────────


@app.command()
def strategies() -> None:
    """List the registered tie-break strategies."""
    config = _load_config()
    table = Table(title="Tie-break strategies", show_lines=True)
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Label")
    table.add_column("Description", style="dim")

    for strategy in available_strategies():
        key = strategy.key.value
        if strategy.key == config.default_strategy:
            key += " [green](default)[/green]"
        table.add_row(key, strategy.label, strategy.description)

    console.print(table)


@app.command()
def scales() -> None:
    """List the grade scale presets."""
    try:
        presets = load_scales()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading scales:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    table = Table(title="Grade scales")
    table.add_column("Name", style="bold cyan")
    table.add_column("Size", justify="right")
    table.add_column("Grades (best first)")
    for name, scale in presets.items():
        table.add_row(name, str(len(scale)), ", ".join(scale.grades))
    console.print(table)


@app.command()
def config() -> None:
    """Show the engine defaults."""
    cfg = _load_config()
    table = Table(title="Engine Configuration", show_header=False, show_lines=True)
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    table.add_row("Default Strategy", cfg.default_strategy.value)
    table.add_row("Scale", cfg.scale)
    table.add_row("Tolerance", f"{cfg.tolerance:g}")
    table.add_row("Group Resolution", cfg.group_resolution.value)
    table.add_row("Max Pass Factor", str(cfg.max_pass_factor))

    console.print(table)
