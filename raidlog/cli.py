#!/usr/bin/env python3
"""
Command-line interface for the combat log pipeline.
"""

import sys
import click
import logging
from collections import Counter
from dataclasses import replace
from pathlib import Path
from datetime import datetime
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeRemainingColumn
from rich.logging import RichHandler
from rich.markup import escape

from .config.loader import load_and_apply_config
from .config.settings import ParserSettings
from .config.wow_data import get_power_type_name
from .errors import RaidlogError
from .models.actor import ClassTag
from .output.writer import JsonDirectoryWriter
from .parser.events import ENERGIZE_ACTIONS
from .parser.parser import CombatLogParser, FileLineSource, check as check_lines
from .processing.pipeline import CombatLogPipeline


# Set up rich console for pretty output
console = Console()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(console=console, rich_tracebacks=True)],
)
logger = logging.getLogger(__name__)


def _parse_hints(values):
    hints = {}
    for value in values:
        name, sep, class_name = value.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=CLASS, got {value!r}", param_hint="--hint")
        hints[name] = class_name
    return hints


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--config", "config_path", type=click.Path(exists=True), help="YAML configuration file")
@click.pass_context
def cli(ctx, verbose, config_path):
    """Raidlog - combat log encounter statistics"""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        ctx.obj = load_and_apply_config(config_path, ParserSettings.from_env())
    except RaidlogError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(2)


@cli.command()
@click.argument("log_file", type=click.Path(exists=True))
@click.option("--output", "-o", type=click.Path(file_okay=False), help="Directory for JSON results")
@click.option("--log-version", type=click.Choice(["1", "2", "3"]), help="Log layout version")
@click.option("--logger", "logger_name", help="Name of the player who recorded the log")
@click.option("--year", type=int, help="Year for timestamps without one")
@click.option("--min-length", type=float, help="Drop encounters shorter than this many seconds")
@click.option("--attempts/--kills-only", default=None, help="Keep wipes as well as kills")
@click.option("--hint", "hints", multiple=True, help="Force a class, as NAME=CLASS (repeatable)")
@click.option("--timeout", type=float, help="Inactivity timeout in seconds")
@click.option("--no-raid-death", is_flag=True, help="Do not end attempts when the whole raid is dead")
@click.option("--threads", type=int, help="Accumulator threads per encounter")
@click.option("--replay", is_flag=True, help="Re-read the file per encounter instead of holding events")
@click.option("--accumulators", help="Comma separated accumulator names")
@click.pass_obj
def parse(settings, log_file, output, log_version, logger_name, year, min_length, attempts,
          hints, timeout, no_raid_death, threads, replay, accumulators):
    """Parse a combat log file and build per-encounter statistics."""
    log_path = Path(log_file)
    console.print(f"[bold green]Parsing combat log:[/bold green] {log_path.name}")
    console.print(f"[cyan]File size:[/cyan] {log_path.stat().st_size / 1024 / 1024:.1f} MB")

    overrides = {
        "version": int(log_version) if log_version else None,
        "logger_name": logger_name,
        "year": year,
        "min_encounter_length": min_length,
        "include_attempts": attempts,
        "inactivity_timeout": timeout,
        "max_workers": threads,
        "accumulators": tuple(a.strip() for a in accumulators.split(",")) if accumulators else None,
    }
    settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})
    if hints:
        settings = replace(settings, hints={**settings.hints, **_parse_hints(hints)})
    if no_raid_death:
        settings = replace(settings, wipe_on_raid_death=False)
    if replay:
        settings = replace(settings, hold_events=False)
    settings.log_configuration()

    start_time = datetime.now()
    writer = JsonDirectoryWriter(output) if output else None

    try:
        pipeline = CombatLogPipeline(settings)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeRemainingColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("[cyan]Decoding and segmenting...", total=None)

            def on_encounter(done, total):
                progress.update(task, description="[cyan]Aggregating encounters...",
                                completed=done, total=total)

            results = pipeline.run(FileLineSource(log_path), writer, on_encounter)
            progress.update(task, description="[green]Processing complete!")
        if writer is not None:
            writer.close()
    except RaidlogError as e:
        console.print(f"[red]Processing failed: {e}[/red]")
        sys.exit(1)

    processing_time = (datetime.now() - start_time).total_seconds()
    display_summary(pipeline, results, processing_time)
    if output:
        console.print(f"[green]Results written to {output}[/green]")


def display_summary(pipeline, results, processing_time):
    """Display statistics and the encounter list."""
    console.print("\n[bold cyan]═══ Parsing Complete ═══[/bold cyan]")
    stats = pipeline.get_stats()
    parser_stats = stats["parser"]

    stats_table = Table(title="Parsing Statistics", show_header=False)
    stats_table.add_column("Metric", style="cyan")
    stats_table.add_column("Value", style="white")

    stats_table.add_row("Lines Read", f"{parser_stats['lines_read']:,}")
    stats_table.add_row("Total Events", f"{parser_stats['events_processed']:,}")
    stats_table.add_row("Skipped Lines", f"{parser_stats['skipped_lines']:,}")
    stats_table.add_row("Processing Time", f"{processing_time:.2f}s")
    stats_table.add_row(
        "Events/Second", f"{parser_stats['events_processed'] / max(processing_time, 0.01):,.0f}"
    )
    stats_table.add_row("Encounters Found", str(stats["encounters"]))
    stats_table.add_row("Encounters Kept", str(len(results)))
    console.print(stats_table)

    if not results:
        return

    enc_table = Table(title=f"\n[bold]Encounters ({len(results)})[/bold]")
    enc_table.add_column("#", style="dim", width=3)
    enc_table.add_column("Boss", width=30)
    enc_table.add_column("Duration", width=8)
    enc_table.add_column("Players", width=7)
    enc_table.add_column("Deaths", width=6)
    enc_table.add_column("Damage", width=12)
    enc_table.add_column("Result", width=8)

    for i, result in enumerate(results, 1):
        enc = result.encounter
        players = sum(
            1 for actor in result.actors.values()
            if actor.class_tag not in (ClassTag.MOB, ClassTag.PET, ClassTag.UNKNOWN)
        )
        deaths = result.tables.get("death")
        death_count = sum(entry["count"] for _, entry in deaths.items()) if deaths else 0
        damage = result.tables.get("damage")
        total_damage = sum(
            entry["total"] for key, entry in damage.items() if key[0] in result.actors
            and result.actors[key[0]].class_tag is not ClassTag.MOB
        ) if damage else 0

        result_color = "green" if enc.is_kill else "red"
        enc_table.add_row(
            str(i),
            enc.boss_name[:30],
            enc.get_duration_str(),
            str(players),
            str(death_count) if death_count > 0 else "-",
            f"{total_damage:,}" if damage else "-",
            f"[{result_color}]{enc.outcome.value.title()}[/{result_color}]",
        )

    console.print(enc_table)


@cli.command()
@click.argument("log_file", type=click.Path(exists=True))
@click.option("--log-version", type=click.Choice(["1", "2", "3"]), help="Log layout version")
@click.option("--logger", "logger_name", help="Name of the player who recorded the log")
@click.option("--year", type=int, help="Year for timestamps without one")
@click.option("--show", default=10, help="Number of unrecognized lines to show")
@click.pass_obj
def check(settings, log_file, log_version, logger_name, year, show):
    """Report how much of a log the decoder recognizes and can render back."""
    version = int(log_version) if log_version else settings.version
    try:
        summary, unrecognized = check_lines(
            FileLineSource(log_file),
            version,
            logger_name or settings.logger_name,
            year if year is not None else settings.year,
        )
    except RaidlogError as e:
        console.print(f"[red]Check failed: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Decoder Coverage (layout {version})", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Lines", f"{summary.lines:,}")
    table.add_row("Recognized", f"{summary.recognized:,} ({summary.recognized_ratio:.1%})")
    table.add_row("Printable", f"{summary.printable:,} ({summary.printable_ratio:.1%})")
    table.add_row("Skipped", f"{summary.skipped:,}")
    console.print(table)

    if unrecognized and show > 0:
        console.print(f"\n[yellow]First {min(show, len(unrecognized))} unrecognized lines:[/yellow]")
        for line in unrecognized[:show]:
            console.print(f"  [dim]{escape(line[:160])}[/dim]")


@cli.command()
@click.argument("log_file", type=click.Path(exists=True))
@click.option("--log-version", type=click.Choice(["1", "2", "3"]), help="Log layout version")
@click.option("--logger", "logger_name", help="Name of the player who recorded the log")
@click.option("--year", type=int, help="Year for timestamps without one")
@click.option("--sample", default=0, help="Stop after this many events (0 reads the whole log)")
@click.pass_obj
def analyze(settings, log_file, log_version, logger_name, year, sample):
    """Show the distribution of decoded event types and power gains."""
    version = int(log_version) if log_version else settings.version
    console.print(f"[bold cyan]Analyzing:[/bold cyan] {Path(log_file).name}")

    actions = Counter()
    power = Counter()
    try:
        parser = CombatLogParser(
            version,
            logger_name or settings.logger_name,
            year if year is not None else settings.year,
        )
        with console.status("[cyan]Decoding...") as status:
            def on_lines(count):
                status.update(f"[cyan]Decoding... {count:,} lines")

            for event in parser.parse_file(log_file, progress_callback=on_lines):
                actions[event.action.value] += 1
                if event.action in ENERGIZE_ACTIONS and event.power_type is not None:
                    power[get_power_type_name(event.power_type)] += event.amount or 0
                if sample and parser.events_processed >= sample:
                    break
    except RaidlogError as e:
        console.print(f"[red]Analysis failed: {e}[/red]")
        sys.exit(1)

    total = sum(actions.values())
    table = Table(title=f"Event Type Distribution ({total:,} events)")
    table.add_column("Event Type", width=30)
    table.add_column("Count", width=10)
    table.add_column("Percentage", width=12)
    for action, count in actions.most_common():
        table.add_row(action, f"{count:,}", f"{count / total * 100:.1f}%")
    console.print(table)

    if power:
        power_table = Table(title="Power Gained")
        power_table.add_column("Power", style="cyan")
        power_table.add_column("Amount", style="white")
        for name, amount in power.most_common():
            power_table.add_row(name, f"{amount:,}")
        console.print(power_table)


def main():
    """Entry point for the raidlog command."""
    cli()


if __name__ == "__main__":
    main()
