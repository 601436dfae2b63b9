#!/usr/bin/env python3
"""
CLI for playing Book Cricket in the terminal
"""
import logging
import random
from collections import defaultdict

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import track

from bookcricket.config import settings
from bookcricket.database import init_db, SessionLocal
from bookcricket.engine import (
    MatchController, MatchConfig, MatchMode, MatchLength, OutcomeGenerator,
    SessionHistory, DatabaseSessionHistory, DeliveryCategory,
)
from bookcricket.engine.feedback import FeedbackEvent, FeedbackKind, CrowdReaction
from bookcricket.errors import InvalidConfiguration

console = Console()

CATEGORY_STYLES = {
    DeliveryCategory.RUNS: "green",
    DeliveryCategory.DOT: "white",
    DeliveryCategory.WIDE: "yellow",
    DeliveryCategory.NOBALL: "yellow",
    DeliveryCategory.OUT: "bold red",
    DeliveryCategory.SAVED: "bold cyan",
}

REACTION_TEXT = {
    CrowdReaction.CHEER: "The crowd roars!",
    CrowdReaction.OOH: "Ooooh...",
    CrowdReaction.SLOW_CLAP: "polite applause",
}


@click.group()
@click.option("--log-level", default=settings.LOG_LEVEL, help="Logging level")
def cli(log_level: str):
    """Book Cricket - flip a page, score the last digit"""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@cli.command()
def init():
    """Initialize the database"""
    console.print("[yellow]Initializing database...[/yellow]")
    init_db()
    console.print("[green]Database initialized successfully![/green]")


def _print_crowd(event: FeedbackEvent):
    if event.kind == FeedbackKind.CROWD_REACTION and event.reaction:
        console.print(f"  [dim]{REACTION_TEXT[event.reaction]}[/dim]")


def _build_config(mode: MatchMode, length: str, p1: str, p2: str, overs) -> MatchConfig:
    try:
        return MatchConfig.for_length(mode, MatchLength(length), p1, p2, overs)
    except InvalidConfiguration as e:
        raise click.BadParameter(str(e), param_hint="--overs")


@cli.command()
@click.option("--mode", type=click.Choice(["solo", "dual"]), default="solo", help="One or two players")
@click.option("--length", type=click.Choice(["quick", "long"]), default="quick", help="Quick (1 wicket) or long (10 wickets)")
@click.option("--overs", type=click.IntRange(settings.MIN_OVERS, settings.MAX_OVERS), default=None, help="Overs per innings")
@click.option("--p1", default="Player 1", help="Player 1 name")
@click.option("--p2", default="Player 2", help="Player 2 name")
@click.option("--seed", type=int, default=None, help="Seed for a reproducible match")
@click.option("--auto", is_flag=True, help="Flip every page without waiting for Enter")
def play(mode: str, length: str, overs, p1: str, p2: str, seed, auto: bool):
    """Play a match"""
    init_db()
    match_mode = MatchMode(mode)
    config = _build_config(match_mode, length, p1, p2 if match_mode == MatchMode.DUAL else "", overs)

    controller = MatchController(
        generator=OutcomeGenerator(random.Random(seed)),
        history=DatabaseSessionHistory(SessionLocal),
    )
    controller.subscribe(_print_crowd)
    session = controller.start_match(config)

    console.print(Panel(
        f"[bold]{' vs '.join(p.name for p in session.players())}[/bold]\n"
        f"{config.overs} overs, {config.total_wickets} wicket{'s' if config.total_wickets > 1 else ''}"
    ))

    current = session.active_player
    while not session.is_over:
        if session.active_player != current:
            current = session.active_player
            console.print(Panel(f"[bold magenta]{session.active_stats.name}[/bold magenta] needs {session.target} to win"))

        stats = session.active_stats
        if not auto:
            free_hit = " [bold cyan]FREE HIT[/bold cyan]" if session.free_hit_active else ""
            click.prompt(
                f"{stats.name} {stats.score}/{stats.wickets_lost} ({stats.overs_display}){free_hit} - press Enter to flip",
                default="", show_default=False, prompt_suffix=" ",
            )

        outcome = controller.request_delivery(session)
        style = CATEGORY_STYLES[outcome.category]
        console.print(f"Page [bold]{outcome.page_number}[/bold]: [{style}]{outcome.message}[/{style}]")
        controller.commit_delivery(session, outcome)

    result = controller.result(session)
    console.print(Panel(f"[bold green]{result.headline}[/bold green]\n{result.margin}"))
    _print_scorecard(session.players())


def _print_scorecard(players):
    table = Table(title="Scorecard")
    table.add_column("Player", style="cyan")
    table.add_column("R", justify="right")
    table.add_column("W", justify="right")
    table.add_column("O", justify="right")
    table.add_column("SR", justify="right")
    table.add_column("Balls")

    for stats in players:
        table.add_row(
            stats.name,
            str(stats.score),
            str(stats.wickets_lost),
            stats.overs_display,
            f"{stats.strike_rate:.1f}",
            " ".join(str(r) for r in stats.delivery_history),
        )

    console.print(table)


@cli.command()
@click.option("--limit", default=20, help="Number of recent scores to show")
def history(limit: int):
    """Show final scores from completed matches"""
    init_db()
    entries = DatabaseSessionHistory(SessionLocal).load(limit)

    if not entries:
        console.print("[red]No matches played yet. Run 'play' first.[/red]")
        return

    best = max(e.score for e in entries) or 1
    table = Table(title=f"Recent Scores ({len(entries)})")
    table.add_column("Date")
    table.add_column("Player", style="cyan")
    table.add_column("Score", justify="right", style="green")
    table.add_column("")

    for entry in entries:
        table.add_row(
            entry.timestamp.strftime("%Y-%m-%d %H:%M"),
            entry.player_name,
            str(entry.score),
            "█" * int(entry.score / best * 30),
        )

    console.print(table)


@cli.command()
@click.option("--matches", default=1000, help="Number of matches to simulate")
@click.option("--length", type=click.Choice(["quick", "long"]), default="quick")
@click.option("--overs", type=click.IntRange(settings.MIN_OVERS, settings.MAX_OVERS), default=None)
@click.option("--seed", type=int, default=None)
def benchmark(matches: int, length: str, overs, seed):
    """Simulate many solo innings and show the score distribution"""
    controller = MatchController(generator=OutcomeGenerator(random.Random(seed)), history=SessionHistory())
    config = _build_config(MatchMode.SOLO, length, "Bench", "", overs)

    stats = defaultdict(list)
    session = controller.start_match(config)
    for _ in track(range(matches), description="Simulating..."):
        controller.restart(session)
        while not session.is_over:
            controller.submit_delivery(session)
        stats["scores"].append(session.player1.score)
        stats["balls"].append(session.player1.balls_bowled)
        stats["all_out"].append(1 if session.player1.is_out else 0)

    scores = stats["scores"]
    console.print(Panel(f"[bold]{matches} innings, {config.overs} overs, {config.total_wickets} wickets[/bold]"))
    console.print(f"[cyan]Average Score:[/cyan] {sum(scores) / len(scores):.1f}")
    console.print(f"[cyan]Min Score:[/cyan] {min(scores)}")
    console.print(f"[cyan]Max Score:[/cyan] {max(scores)}")
    console.print(f"[cyan]Average Balls Faced:[/cyan] {sum(stats['balls']) / len(stats['balls']):.1f}")
    console.print(f"[cyan]All Out %:[/cyan] {sum(stats['all_out']) / matches * 100:.1f}%")

    # Score distribution in five equal buckets
    top = max(scores) + 1
    width = max(1, -(-top // 5))
    brackets = {}
    for low in range(0, top, width):
        label = f"{low}-{low + width - 1}"
        brackets[label] = sum(1 for s in scores if low <= s < low + width)

    console.print("\n[bold]Score Distribution:[/bold]")
    for bracket, count in brackets.items():
        pct = count / len(scores) * 100
        bar = "█" * int(pct / 2)
        console.print(f"  {bracket:>8}: {bar} {pct:.1f}%")


if __name__ == "__main__":
    cli()
