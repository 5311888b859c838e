"""
prepdeck: Inspection CLI for rehearsal state.

Reads a JSON snapshot exported by the storage layer and shows what the
engine would do with it. Nothing is written back.

Commands:
- prepdeck queue      - Cards due now under a study mode
- prepdeck stats      - Mastery distribution and flashcard readiness
- prepdeck streak     - Current and longest study streak
- prepdeck readiness  - Interview-prep readiness with factor breakdown
"""
from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import get_settings

from .snapshot import Snapshot, SnapshotError, load_snapshot
from .srs.mastery import MasteryLevel, MasteryPolicy, calculate_study_stats, classify_mastery
from .srs.queue_builder import StudyMode, build_queue, queue_mode_for
from .srs.readiness import (
    flashcard_readiness,
    interview_prep_breakdown,
    interview_prep_readiness,
)
from .srs.schedule import parse_timestamp, utc_now
from .srs.scheduler import days_until_review, format_interval
from .srs.streaks import calculate_streak, resolve_timezone

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="prepdeck",
    help="prepdeck: Interview rehearsal scheduling CLI",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

MASTERY_STYLES = {
    MasteryLevel.NEW: "dim",
    MasteryLevel.LEARNING: "blue",
    MasteryLevel.REVIEWING: "yellow",
    MasteryLevel.MASTERED: "green",
}


def style_mastery(level: MasteryLevel) -> str:
    """Get styled mastery level string."""
    color = MASTERY_STYLES[level]
    return f"[{color}]{level.display_name}[/{color}]"


def style_score(score: int) -> str:
    color = "green" if score >= 70 else "yellow" if score >= 40 else "red"
    return f"[bold {color}]{score}[/bold {color}]"


# =============================================================================
# Helpers
# =============================================================================


def _load(path: Path) -> Snapshot:
    try:
        return load_snapshot(path)
    except SnapshotError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _parse_now(value: Optional[str]) -> datetime:
    if value is None:
        return utc_now()
    try:
        return parse_timestamp(value)
    except ValueError:
        console.print(f"[red]Invalid --now timestamp: {value}[/red]")
        raise typer.Exit(1)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def queue(
    snapshot_path: Path = typer.Argument(..., help="Snapshot JSON file"),
    mode: StudyMode = typer.Option(StudyMode.DAILY, "--mode", "-m", help="Study mode"),
    application: Optional[str] = typer.Option(
        None,
        "--application", "-a",
        help="Application id (required for application mode)",
    ),
    now: Optional[str] = typer.Option(None, "--now", help="Reference time as ISO-8601"),
) -> None:
    """Show the cards a study session would present right now."""
    snapshot = _load(snapshot_path)
    settings = get_settings()
    reference = _parse_now(now)

    try:
        queue_mode = queue_mode_for(mode, application, settings)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    candidates = {c.entity_id: c for c in snapshot.candidates()}
    card_ids = build_queue(candidates.values(), queue_mode, reference)

    if not card_ids:
        console.print("\n[green]Nothing due for review![/green]")
        console.print("All caught up. Check back tomorrow.")
        return

    policy = MasteryPolicy.from_settings(settings)
    table = Table(title=f"{mode.value} queue ({len(card_ids)} cards)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Card")
    table.add_column("Mastery")
    table.add_column("Status")

    for position, card_id in enumerate(card_ids, 1):
        state = candidates[card_id].state
        days = days_until_review(state, reference)
        if state is None or state.next_review_at is None:
            status = "[green]new[/green]"
        elif days < 0:
            status = f"[red]overdue {-days}d[/red]"
        else:
            status = "[yellow]due[/yellow]"
        table.add_row(str(position), card_id, style_mastery(classify_mastery(state, policy)), status)

    console.print(table)


@app.command()
def stats(
    snapshot_path: Path = typer.Argument(..., help="Snapshot JSON file"),
    now: Optional[str] = typer.Option(None, "--now", help="Reference time as ISO-8601"),
) -> None:
    """Show mastery distribution, due counts and flashcard readiness."""
    snapshot = _load(snapshot_path)
    settings = get_settings()
    reference = _parse_now(now)
    policy = MasteryPolicy.from_settings(settings)

    states = [c.state for c in snapshot.candidates()]
    deck = calculate_study_stats(states, reference, policy)
    readiness = flashcard_readiness(states, reference, policy)

    console.print("\n[bold cyan]Deck Statistics[/bold cyan]")
    console.print("=" * 40)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Total cards", str(deck.total))
    table.add_row(style_mastery(MasteryLevel.NEW), str(deck.new))
    table.add_row(style_mastery(MasteryLevel.LEARNING), str(deck.learning))
    table.add_row(style_mastery(MasteryLevel.REVIEWING), str(deck.reviewing))
    table.add_row(style_mastery(MasteryLevel.MASTERED), str(deck.mastered))
    table.add_row("Due today", str(deck.due_today))
    table.add_row("Overdue", str(deck.overdue))
    table.add_row("Readiness", style_score(readiness))

    console.print(table)

    scheduled = [s for s in states if s is not None and s.next_review_at is not None]
    if scheduled:
        upcoming = min(scheduled, key=lambda s: s.next_review_at)
        days = max(0, days_until_review(upcoming, reference))
        console.print(f"\n[dim]Next scheduled review: {format_interval(days)}[/dim]")


@app.command()
def streak(
    snapshot_path: Path = typer.Argument(..., help="Snapshot JSON file"),
    now: Optional[str] = typer.Option(None, "--now", help="Reference time as ISO-8601"),
) -> None:
    """Show current and longest study streak."""
    snapshot = _load(snapshot_path)
    settings = get_settings()
    tz = resolve_timezone(settings.study_timezone)
    today = _parse_now(now).astimezone(tz).date()

    summary = calculate_streak(snapshot.study_dates(), today=today, tz=tz)

    console.print(Panel(
        f"Current streak: [bold]{summary.current}[/bold] day(s)\n"
        f"Longest streak: [bold]{summary.longest}[/bold] day(s)",
        title="Study Streak",
        border_style="green" if summary.current else "yellow",
    ))


@app.command()
def readiness(
    snapshot_path: Path = typer.Argument(..., help="Snapshot JSON file"),
) -> None:
    """Show interview-prep readiness from checklist and predicted questions."""
    snapshot = _load(snapshot_path)
    checklist = snapshot.checklist_items()
    questions = snapshot.predicted_questions()

    score = interview_prep_readiness(checklist, questions)
    breakdown = interview_prep_breakdown(checklist, questions)

    table = Table(show_header=True)
    table.add_column("Factor")
    table.add_column("Points", justify="right")
    for name, points in breakdown.items():
        table.add_row(name, f"{points:.1f}")

    console.print(Panel(
        f"Interview readiness: {style_score(score)}/100",
        title="Readiness",
        border_style="cyan",
    ))
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    settings = get_settings()

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="10 MB")

    app()


if __name__ == "__main__":
    main()
