"""Command-line entry point for the Hunter System.

Usage:
    python main.py register bob              # Create an account
    python main.py add bob "Morning run"     # Add a daily quest
    python main.py done bob 1                # Toggle quest #1 for today
    python main.py status bob                # Level, EXP, stats, streak, quests
    python main.py reset-hour bob 5          # Move the daily reset to 05:00
    python main.py --verbose status bob      # Verbose logging
"""

from __future__ import annotations

import logging
import sys

import click

from daily.calendar import format_countdown
from daily.progression import EXP_PER_LEVEL
from hunter.account import Account
from hunter.config import load_config
from hunter.core import HunterSystem, toast
from hunter.errors import HunterError


def _setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    fmt = "%(asctime)s — %(name)s — %(levelname)s — %(message)s"

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=fmt, handlers=handlers)

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)


def _login(system: HunterSystem, username: str) -> Account:
    password = click.prompt("Password", hide_input=True)
    return system.login(username, password)


def _render_status(system: HunterSystem, account: Account) -> None:
    st = system.status(account)
    click.echo(f"\n  [SYSTEM] {st.username}")
    click.echo(f"  Level {st.level}   EXP {st.exp_in_level}/{EXP_PER_LEVEL}"
               f" (next level at {st.exp_for_next_level})")
    click.echo(f"  STR {st.stats.strength}  VIT {st.stats.vitality}"
               f"  AGI {st.stats.agility}  INT {st.stats.intelligence}")
    click.echo(f"  Streak {st.current_streak} (best {st.longest_streak})")
    click.echo(f"  Reset in {format_countdown(st.time_until_reset)} (daily at {st.reset_hour:02d}:00)\n")
    if not st.quests:
        click.echo("  No daily quests yet. Add one with: main.py add <user> <name>")
    for q in st.quests:
        mark = "x" if q.done else " "
        click.echo(f"  {q.index + 1}. [{mark}] {q.name}")
    if st.all_complete_today:
        click.echo("\n  All daily quests complete.")
    click.echo()


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option("--config-dir", type=click.Path(), default=None, help="Config directory")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_dir: str | None) -> None:
    """Hunter System: daily quests, levels and streaks."""
    try:
        cfg = load_config(config_dir)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e
    _setup_logging(verbose=verbose, log_file=cfg.get("storage", {}).get("log_file"))
    ctx.obj = HunterSystem(config=cfg)


@cli.command()
@click.argument("username")
@click.pass_obj
def register(system: HunterSystem, username: str) -> None:
    """Create a new account."""
    password = click.prompt("Password", hide_input=True, confirmation_prompt=True)
    try:
        account = system.register(username, password)
    except HunterError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Welcome, hunter {account.username}.")


@cli.command()
@click.argument("username")
@click.argument("name")
@click.pass_obj
def add(system: HunterSystem, username: str, name: str) -> None:
    """Add a daily quest."""
    try:
        account = _login(system, username)
        quest = system.add_quest(account, name)
    except HunterError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Quest added: {quest.name}")


@cli.command()
@click.argument("username")
@click.argument("position", type=int)
@click.pass_obj
def remove(system: HunterSystem, username: str, position: int) -> None:
    """Remove the quest at POSITION (1-based)."""
    try:
        account = _login(system, username)
        removed = system.remove_quest(account, position - 1)
    except HunterError as e:
        raise click.ClickException(str(e)) from e
    if not removed:
        raise click.ClickException(f"no quest at position {position}")
    click.echo("Quest removed.")


@cli.command()
@click.argument("username")
@click.argument("position", type=int)
@click.pass_obj
def done(system: HunterSystem, username: str, position: int) -> None:
    """Toggle today's completion of the quest at POSITION (1-based)."""
    try:
        account = _login(system, username)
        result = system.toggle_quest(account, position - 1)
    except HunterError as e:
        raise click.ClickException(str(e)) from e
    message = toast(result)
    if message:
        click.echo(f"  ▶ {message}")
    _render_status(system, account)


@cli.command()
@click.argument("username")
@click.pass_obj
def status(system: HunterSystem, username: str) -> None:
    """Show level, EXP, stats, streak and today's quests."""
    try:
        account = _login(system, username)
    except HunterError as e:
        raise click.ClickException(str(e)) from e
    _render_status(system, account)


@cli.command("reset-hour")
@click.argument("username")
@click.argument("hour", type=int)
@click.pass_obj
def reset_hour(system: HunterSystem, username: str, hour: int) -> None:
    """Set the hour (0-23) at which daily quests reset."""
    try:
        account = _login(system, username)
        system.set_reset_hour(account, hour)
    except HunterError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Settings saved! Daily reset at {hour:02d}:00.")


if __name__ == "__main__":
    cli()
