"""CLI commands for PokiPomo using Typer."""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from pokipomo import __version__
from pokipomo.core.config import Config, get_config
from pokipomo.focus.metrics import count_sessions_on_day, describe_daily_progress, format_minutes
from pokipomo.focus.models import DurationOption, TimerState, UrgeSurfPhase

app = typer.Typer(
    name="pokipomo",
    help="Focus timer with urge-surfing and progress tracking.",
    add_completion=False,
)

console = Console()

CONTROL_ACTIONS = ("pause", "resume", "reset", "stay", "stop")


def setup_logging(log_level: str, log_file: Path | None = None, stream: bool = True) -> None:
    """Configure logging for the application."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = []
    if stream:
        handlers.append(logging.StreamHandler())

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )

    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def write_focus_control(control_file: Path, action: str) -> None:
    """Write a control command for the running focus session."""
    control_file.parent.mkdir(parents=True, exist_ok=True)
    control_file.write_text(
        json.dumps({"action": action, "timestamp": datetime.now().isoformat()})
    )


def read_focus_control(control_file: Path) -> dict | None:
    """Read and clear the control command."""
    if not control_file.exists():
        return None
    try:
        data = json.loads(control_file.read_text())
    except (OSError, ValueError) as e:
        logging.getLogger(__name__).warning(f"Ignoring unreadable control file: {e}")
        data = None
    control_file.unlink(missing_ok=True)
    return data


def _resolve_option(config: Config, minutes: int | None) -> DurationOption:
    minutes = minutes or config.timer.default_minutes
    if minutes not in config.timer.duration_options:
        choices = ", ".join(str(m) for m in config.timer.duration_options)
        console.print(f"[red]Unsupported duration: {minutes} min (choose from {choices})[/red]")
        raise typer.Exit(1)
    return DurationOption(minutes)


@app.command()
def focus(
    minutes: int = typer.Option(
        None,
        "--minutes",
        "-m",
        help="Session length in minutes (one of the configured options)",
    ),
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        "-l",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    ),
) -> None:
    """Run a focus session in the terminal.

    Ctrl+C asks to leave: a short urge-surf hold starts, and a second Ctrl+C
    leaves anyway. Use `pokipomo focus-timer` from another terminal to pause,
    resume, reset or stay.
    """
    config = get_config()
    option = _resolve_option(config, minutes)
    config.ensure_directories()

    # Log to file only so the status line stays readable
    setup_logging(log_level, config.log_dir / "pokipomo.log", stream=False)

    async def run_focus() -> None:
        from pokipomo.focus.metrics import Streak
        from pokipomo.focus.navigation import NavigationCoordinator, Tab
        from pokipomo.focus.timer import FocusTimer, FocusTimerSnapshot
        from pokipomo.storage.database import Database
        from pokipomo.storage.session_store import SessionStore

        db = Database(config.db_path)
        await db.connect()
        store = SessionStore(db)

        timer = FocusTimer(config.timer)
        navigation = NavigationCoordinator(timer)
        finished = asyncio.Event()
        last_toast: list[str | None] = [None]

        try:
            streak = await store.load_streak()
            timer.restore(await store.load_sessions(), streak.count, streak.anchor)

            def render(snapshot: FocusTimerSnapshot) -> None:
                if snapshot.toast_message and snapshot.toast_message != last_toast[0]:
                    sys.stdout.write(f"\n💬 {snapshot.toast_message}\n")
                last_toast[0] = snapshot.toast_message

                if snapshot.urge_surf_mode.phase == UrgeSurfPhase.HOLDING:
                    line = (
                        f"🌊 Let's ride this urge together for {snapshot.urge_surf_countdown} sec "
                        f"(Ctrl+C again to exit anyway)"
                    )
                else:
                    line = (
                        f"🍅 {snapshot.formatted_remaining_time} [{snapshot.state.value}] | "
                        f"{snapshot.daily_goal_progress_description} | "
                        f"streak {snapshot.streak_count}"
                    )
                sys.stdout.write(f"\r{line:<80}")
                sys.stdout.flush()

            timer.subscribe(render)
            timer.on_session_complete = lambda session: finished.set()
            navigation.on_tab_change = lambda tab: finished.set()

            def on_interrupt() -> None:
                if timer.urge_surf_mode.is_holding:
                    timer.allow_exit_during_urge_surf()
                elif navigation.select_tab(Tab.PROGRESS):
                    finished.set()

            loop = asyncio.get_running_loop()
            loop.add_signal_handler(signal.SIGINT, on_interrupt)

            timer.select_duration(option)
            timer.start()

            while not finished.is_set():
                ctrl = read_focus_control(config.control_file)
                if ctrl:
                    action = ctrl.get("action")
                    if action == "pause":
                        timer.pause()
                    elif action == "resume":
                        timer.start()
                    elif action == "reset":
                        timer.stop_and_reset()
                    elif action == "stay":
                        timer.complete_urge_surf_cycle()
                    elif action == "stop":
                        on_interrupt()
                try:
                    await asyncio.wait_for(finished.wait(), timeout=0.5)
                except asyncio.TimeoutError:
                    pass

            loop.remove_signal_handler(signal.SIGINT)
            console.print()

            if timer.state == TimerState.COMPLETED:
                console.print(f"\n[green]Session complete![/green] {option.label} of focus.")
                if timer.show_reflection_prompt:
                    reflection = Prompt.ask("How did it go? (optional)", default="")
                    if reflection.strip():
                        timer.save_reflection(reflection)
                    else:
                        timer.discard_reflection()
            else:
                console.print("\n[yellow]Session left early. No session recorded.[/yellow]")

            await store.save_sessions(timer.sessions)
            await store.save_streak(Streak(timer.streak_count, timer.streak_anchor))

            snapshot = timer.snapshot()
            console.print(f"  Today: {snapshot.daily_goal_progress_description}")
            console.print(f"  Streak: {snapshot.streak_count} day(s)")
        finally:
            timer.close()
            await db.close()

    try:
        asyncio.run(run_focus())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command(name="focus-timer")
def focus_timer(
    action: str = typer.Argument(..., help="Action: pause, resume, reset, stay, stop"),
) -> None:
    """Control the running focus session."""
    if action not in CONTROL_ACTIONS:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print(f"Valid actions: {', '.join(CONTROL_ACTIONS)}")
        raise typer.Exit(1)

    config = get_config()
    write_focus_control(config.control_file, action)
    console.print(f"[green]Sent {action} command[/green]")


@app.command()
def progress(
    limit: int = typer.Option(10, "--limit", "-n", help="Number of recent sessions to show"),
) -> None:
    """Show completed sessions, today's count and the current streak."""
    config = get_config()

    async def load():
        from pokipomo.storage.database import Database
        from pokipomo.storage.session_store import SessionStore

        db = Database(config.db_path)
        await db.connect()
        try:
            store = SessionStore(db)
            return await store.load_sessions(), await store.load_streak()
        finally:
            await db.close()

    try:
        sessions, streak = asyncio.run(load())
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(Panel("[bold]Focus Progress[/bold]", border_style="blue"))

    today = count_sessions_on_day(sessions, datetime.now())
    total = sum(s.duration for s in sessions)
    console.print(f"Total focus time: {format_minutes(total)}")
    console.print(f"Today: {describe_daily_progress(today)}")
    anchor = f" (last on {streak.anchor.date().isoformat()})" if streak.anchor else ""
    console.print(f"Streak: {streak.count} day(s){anchor}\n")

    if not sessions:
        console.print("[dim]No focus sessions yet. Start one with 'pokipomo focus'[/dim]")
        return

    table = Table(title="Recent Sessions", show_header=True, header_style="bold cyan")
    table.add_column("Finished")
    table.add_column("Length")
    table.add_column("Outcome")
    table.add_column("Reflection")

    for s in reversed(sessions[-limit:]):
        table.add_row(
            s.ended_at.strftime("%Y-%m-%d %H:%M"),
            s.formatted_duration,
            s.outcome.value,
            s.reflection or "[dim]-[/dim]",
        )

    console.print(table)


@app.command(name="config-show")
def config_show() -> None:
    """Show the active configuration."""
    config = get_config()

    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value")

    table.add_row("Data directory", str(config.data_dir))
    table.add_row("Log directory", str(config.log_dir))
    table.add_row("Log level", config.log_level)
    table.add_row(
        "Durations", ", ".join(f"{m} min" for m in config.timer.duration_options)
    )
    table.add_row("Default duration", f"{config.timer.default_minutes} min")
    table.add_row("Urge-surf hold", f"{config.timer.urge_surf_seconds} sec")
    table.add_row("Care cue delay", f"{config.timer.care_cue_delay_seconds} sec")

    console.print(table)


@app.command()
def version() -> None:
    """Show version."""
    console.print(f"PokiPomo v{__version__}")


@app.callback()
def main_callback() -> None:
    """PokiPomo - focus sessions with a gentle urge-surf guard."""
    pass


if __name__ == "__main__":
    app()
