"""
SparkStats CLI - Command Line Interface for AI strategy analysis

Provides commands for:
- Summarising every AI strategy in a match corpus
- Showing the behavioral insight package for one AI strategy
- Listing the characters present in a corpus
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sparkstats import __version__
from sparkstats.analysis.character_filter import filter_metrics_by_character
from sparkstats.analysis.derivation import compute_ai_strategy_metrics
from sparkstats.analysis.insights import (
    BehavioralInsights,
    TOP_STRATEGY_SORTS,
    extract_unique_characters,
    generate_ai_insights,
    generate_behavioral_insights,
    get_top_ai_strategies,
)
from sparkstats.analysis.models import AIStrategyMetrics
from sparkstats.core.config import get_config, load_config, set_config
from sparkstats.core.utils import PerformanceMonitor, format_percentage
from sparkstats.export import export_metrics, export_to_json
from sparkstats.loader import DataLoadError, load_characters

app = typer.Typer(
    name="sparkstats",
    help="AI strategy aggregation and behavioral insights for fighting-game match data",
    add_completion=False,
)
console = Console()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]SparkStats[/bold blue] v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging_config = get_config().logging
    root = logging.getLogger()

    level = logging.DEBUG if verbose else getattr(logging, logging_config.level.upper(), logging.INFO)
    root.setLevel(level)

    if logging_config.file:
        log_path = str(Path(logging_config.file).resolve())
        for existing in root.handlers:
            if isinstance(existing, logging.FileHandler) and existing.baseFilename == log_path:
                return
        handler = logging.FileHandler(log_path)
        handler.setFormatter(logging.Formatter(logging_config.format))
        root.addHandler(handler)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Configuration file (YAML, TOML or JSON)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """SparkStats - AI Strategy Aggregation & Behavioral Insight Engine"""
    if config_file:
        set_config(load_config(config_file))
    _configure_logging(verbose)


def _load_metrics(data_path: Path, character: Optional[str]) -> dict[str, AIStrategyMetrics]:
    """Load a corpus and derive (optionally character-filtered) metrics."""
    analysis_config = get_config().analysis
    try:
        with PerformanceMonitor("Loading match data", logging.DEBUG):
            characters = load_characters(data_path)
    except DataLoadError as e:
        console.print(f"[red]Error loading match data:[/red] {e}")
        raise typer.Exit(1)

    with PerformanceMonitor("Aggregating AI strategies", logging.DEBUG):
        metrics = compute_ai_strategy_metrics(characters, analysis_config)
    if character:
        metrics = filter_metrics_by_character(metrics, character, analysis_config)
        if not metrics:
            console.print(f"[yellow]No AI strategy has matches for character '{character}'[/yellow]")
            raise typer.Exit(1)
    return metrics


@app.command()
def analyze(
    data_path: Path = typer.Argument(
        ...,
        help="JSON file or directory of JSON files with character match data",
        exists=True,
        resolve_path=True,
    ),
    character: Optional[str] = typer.Option(
        None, "--character", "-c", help="Filter every AI strategy to one character's matches"
    ),
    sort: str = typer.Option(
        "winRate",
        "--sort",
        "-s",
        help=f"Sort order: {', '.join(TOP_STRATEGY_SORTS)}",
    ),
    limit: int = typer.Option(0, "--limit", "-n", help="Show only the top N strategies (0 = all)"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file for results (format detected from extension: .json, .csv)",
    ),
) -> None:
    """
    Summarise every AI strategy in a match corpus.

    Shows usage, win rate, combat score and damage for each strategy,
    followed by corpus-level highlights.
    """
    metrics = _load_metrics(data_path, character)
    if not metrics:
        console.print("[yellow]No completed matches found[/yellow]")
        raise typer.Exit(1)

    if sort not in TOP_STRATEGY_SORTS:
        console.print(f"[yellow]Warning:[/yellow] Unknown sort '{sort}', using winRate")
    ranked = get_top_ai_strategies(metrics, sort, limit or len(metrics))

    title = "AI Strategies" + (f" - {character}" if character else "")
    table = Table(title=title)
    table.add_column("AI Strategy", style="cyan")
    table.add_column("Type")
    table.add_column("Matches", justify="right")
    table.add_column("Usage", justify="right")
    table.add_column("Win %", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Avg Dmg", justify="right")
    table.add_column("DPS", justify="right")
    table.add_column("Confidence")

    for ai in ranked:
        table.add_row(
            ai.name,
            ai.strategy_type.value,
            str(ai.total_matches),
            format_percentage(ai.usage_rate),
            format_percentage(ai.win_rate),
            f"{ai.combat_performance_score:.1f}",
            f"{ai.stats.avg_damage_dealt:,}",
            str(ai.stats.avg_dps),
            ai.data_quality.confidence.value,
        )

    console.print(table)
    console.print()

    for insight in generate_ai_insights(metrics, get_config().analysis):
        console.print(f"{insight.emoji} {insight.text}")

    if output:
        export_config = get_config().export
        try:
            export_metrics(
                metrics,
                output,
                json_indent=export_config.json_indent,
                csv_delimiter=export_config.csv_delimiter,
            )
        except ValueError as e:
            console.print(f"[red]Export failed:[/red] {e}")
            raise typer.Exit(1)
        console.print(f"\n[green]Results exported to:[/green] {output}")


def _display_insights(ai: AIStrategyMetrics, insights: BehavioralInsights) -> None:
    """Render an insight package."""
    archetype = insights.archetype
    if archetype is not None:
        lines = [f"[bold]{archetype.primary.archetype}[/bold] ({archetype.primary.score:.0f})"]
        lines.append(archetype.primary.description)
        if archetype.secondary is not None:
            lines.append(f"Secondary: {archetype.secondary.archetype} ({archetype.secondary.score:.0f})")
        if archetype.sub_types:
            lines.append(
                "Sub-types: " + ", ".join(f"{s.icon} {s.archetype}" for s in archetype.sub_types)
            )
        console.print(Panel("\n".join(lines), title=f"{ai.name} - Playstyle"))
    else:
        console.print("[yellow]Not enough comparable AI strategies to classify playstyle[/yellow]")

    if insights.effectiveness is not None:
        table = Table(title="Combat Effectiveness")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_column("Percentile", justify="right")
        table.add_column("Rating")
        for label, stat in (
            ("Win Rate", insights.effectiveness.win_rate),
            ("Performance", insights.effectiveness.performance),
            ("Efficiency", insights.effectiveness.efficiency),
            ("Survival", insights.effectiveness.survival),
            ("Damage", insights.effectiveness.damage),
            ("DPS", insights.effectiveness.dps),
        ):
            table.add_row(label, str(stat.value), str(stat.percentile), stat.label)
        console.print(table)

    if insights.action_frequency:
        table = Table(title="Action Frequency")
        table.add_column("Action", style="cyan")
        table.add_column("Per Match", justify="right")
        table.add_column("Diff", justify="right")
        table.add_column("Comparison")
        for action in insights.action_frequency:
            marker = " [green]signature[/green]" if action.is_signature else ""
            marker += " [red]rare[/red]" if action.is_rare else ""
            table.add_row(
                f"{action.emoji} {action.action}",
                f"{action.value:.1f}",
                action.diff,
                action.comparison + marker,
            )
        console.print(table)

    build_impact = insights.build_behavioral_impact
    if build_impact and build_impact.impacts:
        console.print("\n[bold]Build behavioral impact[/bold]")
        for impact in build_impact.impacts:
            shifts = ", ".join(f"{s.action} {s.percent_diff:+.1f}%" for s in impact.frequencies)
            console.print(f"  {impact.build_type} ({impact.count} matches): {shifts}")

    capsule_impact = insights.capsule_behavioral_impact
    if capsule_impact and capsule_impact.impacts:
        console.print("\n[bold]Capsule behavioral impact[/bold]")
        for impact in capsule_impact.impacts:
            shifts = ", ".join(f"{s.action} {s.percent_diff:+.1f}%" for s in impact.frequencies)
            console.print(f"  {impact.name} ({impact.count} matches): {shifts}")

    if insights.key_insights:
        console.print("\n[bold]Key insights[/bold]")
        for insight in insights.key_insights:
            console.print(f"  {insight.emoji or '-'} {insight.text}")

    quality = insights.data_quality
    console.print(
        f"\nData quality: {quality.confidence.value} "
        f"({quality.sample_size} matches, {quality.character_diversity} characters, "
        f"diversity {quality.diversity_score:.2f})"
    )


@app.command()
def insights(
    data_path: Path = typer.Argument(
        ...,
        help="JSON file or directory of JSON files with character match data",
        exists=True,
        resolve_path=True,
    ),
    ai_name: str = typer.Argument(..., help="AI strategy to analyse"),
    character: Optional[str] = typer.Option(
        None, "--character", "-c", help="Compare against this character's baseline"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the insight package to a JSON file"
    ),
) -> None:
    """
    Show behavioral insights for one AI strategy.
    """
    metrics = _load_metrics(data_path, character)
    ai = metrics.get(ai_name)
    if ai is None:
        console.print(f"[red]Unknown AI strategy:[/red] {ai_name}")
        console.print(f"Available: {', '.join(metrics)}")
        raise typer.Exit(1)

    package = generate_behavioral_insights(ai, metrics, config=get_config().analysis)
    _display_insights(ai, package)

    if output:
        export_to_json(package, output, indent=get_config().export.json_indent)
        console.print(f"\n[green]Insights exported to:[/green] {output}")


@app.command()
def characters(
    data_path: Path = typer.Argument(
        ...,
        help="JSON file or directory of JSON files with character match data",
        exists=True,
        resolve_path=True,
    ),
) -> None:
    """
    List every character that played a completed match.
    """
    metrics = _load_metrics(data_path, None)
    names = extract_unique_characters(metrics)
    if not names:
        console.print("[yellow]No characters found[/yellow]")
        return

    table = Table(title=f"Characters ({len(names)})")
    table.add_column("Character", style="cyan")
    table.add_column("AI Strategies", justify="right")
    for entry in names:
        faced = sum(1 for ai in metrics.values() if entry["name"] in ai.raw_characters)
        table.add_row(entry["name"], str(faced))
    console.print(table)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
