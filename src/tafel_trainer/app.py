"""Interactive CLI application."""
import logging
import os
import time

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from tafel_trainer.db import init_db, resolve_db_path
from tafel_trainer.mastery import get_mastery_color, get_table_overview, reset_mastery
from tafel_trainer.models import DIVISION_TABLES, EXERCISE_COUNTS, TABLES, Operation
from tafel_trainer.results import get_best_results, get_result_summary, get_session_results
from tafel_trainer.session import (
    FEEDBACK_DELAY_SECONDS, Feedback, Mode, PracticeSession, SessionError,
)
from tafel_trainer.settings import session_length

console = Console()

LOG_LEVEL_ENV = "TAFEL_TRAINER_LOG_LEVEL"
QUIT_WORDS = ("q", "quit", "menu")


def configure_logging() -> None:
    level = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]Tafel Trainer[/bold]\n[dim]Become the master of the times tables![/dim]",
        title="Welcome", border_style="green",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("practice", "Start a practice session"),
        ("settings", "Choose tables and session length"),
        ("mastery", "Mastery per table"),
        ("history", "Past sessions"),
        ("reset", "Forget all mastery scores"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def format_tables(tables: list[int]) -> str:
    return ", ".join(str(t) for t in tables) if tables else "[dim]none[/dim]"


def parse_table_list(text: str, valid: range) -> list[int]:
    """Parse "2, 5 10" into table numbers, skipping anything out of range."""
    tables = []
    for part in text.replace(",", " ").split():
        if part.isdigit() and int(part) in valid:
            tables.append(int(part))
    return tables


def show_settings(session: PracticeSession):
    s = session.settings
    console.print(Panel(
        f"Player: [bold]{s.player_name or '-'}[/bold]\n"
        f"Multiplication (×): {format_tables(s.multiplication_tables)}\n"
        f"Division (÷): {format_tables(s.division_tables)}\n"
        f"Exercises per session: [bold]{s.exercise_count}[/bold]",
        title="Settings", border_style="blue",
    ))


def cmd_settings(session: PracticeSession):
    if session.mode is Mode.RESULTS:
        session.back_to_settings()
    show_settings(session)
    name = Prompt.ask("Player name", default=session.settings.player_name)
    session.set_player_name(name)
    for op, valid in ((Operation.MULTIPLICATION, TABLES), (Operation.DIVISION, DIVISION_TABLES)):
        text = Prompt.ask(
            f"Toggle {op.value} tables ({valid.start}-{valid.stop - 1}, blank to keep)",
            default="",
        )
        for table in parse_table_list(text, valid):
            session.toggle_table(op, table)
    count = Prompt.ask(
        "Exercises per session",
        choices=[str(c) for c in EXERCISE_COUNTS],
        default=str(session.settings.exercise_count),
    )
    session.set_exercise_count(count if count == "all" else int(count))
    show_settings(session)


def render_exercise(session: PracticeSession):
    exercise = session.current_exercise
    title = f"Question {session.stats.total + 1}/{session.length}"
    body = f"[bold]{exercise.text}[/bold] = ?"
    if exercise.is_challenge:
        body += "\n[magenta]Challenge![/magenta]"
    console.print(Panel(body, title=title, border_style="cyan"))


def ask_answer(session: PracticeSession) -> str | None:
    """Prompt until something non-empty is typed.

    Time spent at the prompt is fed to the session timer; an answer typed
    after the countdown ran out arrives too late and is not submitted.
    """
    started = time.monotonic()
    while True:
        answer = Prompt.ask(f"[dim]{session.timer.duration:.0f}s[/dim] Answer").strip()
        if answer.lower() in QUIT_WORDS:
            return None
        if session.tick(time.monotonic() - started):
            console.print("[red]Time's up![/red]")
            return ""
        started = time.monotonic()
        if answer:
            return answer


def run_practice(session: PracticeSession) -> None:
    try:
        if session.mode is Mode.RESULTS:
            session.restart()
        else:
            session.start()
    except SessionError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return
    while session.mode is Mode.PRACTICE:
        render_exercise(session)
        exercise = session.current_exercise
        answer = ask_answer(session)
        if answer is None:
            session.abort()
            console.print("[dim]Practice stopped.[/dim]")
            return
        if session.feedback is None:
            session.submit(answer)
        if session.feedback is Feedback.CORRECT:
            console.print("[green]Correct![/green]")
        else:
            given = f"You said {escape(session.answer)}. " if session.answer else ""
            console.print(f"[red]Incorrect.[/red] {given}{exercise.text} = [green]{exercise.result}[/green]")
        time.sleep(FEEDBACK_DELAY_SECONDS)
        session.advance()
    show_results(session)


def show_results(session: PracticeSession):
    stats = session.stats
    console.print(Panel(
        f"[green]Correct: {stats.correct}[/green]   [red]Incorrect: {stats.incorrect}[/red]\n"
        f"[bold]Score: {stats.correct}/{stats.total} ({stats.percentage:.0f}%)[/bold]",
        title="Results", border_style="green",
    ))
    table = Table(title="Your answers")
    table.add_column("#", justify="right")
    table.add_column("Exercise")
    table.add_column("Answer", justify="right")
    table.add_column("")
    for i, entry in enumerate(session.history, 1):
        mark = "[green]✓[/green]" if entry.correct else "[red]✗[/red]"
        table.add_row(str(i), entry.exercise.text, str(entry.exercise.result), mark)
    console.print(table)


def cmd_practice(session: PracticeSession):
    run_practice(session)
    while session.mode is Mode.RESULTS:
        choice = Prompt.ask("Again or back to menu?", choices=["again", "menu"], default="menu")
        if choice == "again":
            run_practice(session)
        else:
            session.back_to_settings()


def cmd_mastery(session: PracticeSession):
    rows = get_table_overview(session.settings, session.mastery)
    if not rows:
        console.print("[yellow]No tables selected. Use 'settings' first.[/yellow]")
        return
    table = Table(title="Mastery")
    table.add_column("Table")
    table.add_column("Score", justify="right")
    table.add_column("Progress")
    table.add_column("Status")
    for row in rows:
        color = get_mastery_color(row["score"])
        bar = f"[{color}]{'█' * row['score']}{'░' * (10 - row['score'])}[/{color}]"
        table.add_row(
            f"{row['op'].symbol} {row['table']}",
            f"{row['score']}/10",
            bar,
            f"[{color}]{row['label']}[/{color}]",
        )
    console.print(table)
    weakest = max(rows, key=lambda r: r["weight"])
    if weakest["score"] < 3:
        console.print(f"\n  [yellow]Tip: practise {weakest['op'].symbol} {weakest['table']} more[/yellow]")


def cmd_history(session: PracticeSession):
    summary = get_result_summary(session.db_path)
    if not summary["sessions"]:
        console.print("[yellow]No sessions finished yet.[/yellow]")
        return
    console.print(f"\n  Sessions: [bold]{summary['sessions']}[/bold]  |  "
                  f"Questions: [bold]{summary['questions_answered']}[/bold]  |  "
                  f"Avg: [bold]{summary['avg_score']}%[/bold]")
    table = Table(title="Recent sessions")
    table.add_column("When")
    table.add_column("Player")
    table.add_column("Score", justify="right")
    for result in get_session_results(session.db_path, limit=10):
        when = time.strftime("%Y-%m-%d %H:%M", time.localtime(result.timestamp / 1000))
        table.add_row(when, result.player_name or "-",
                      f"{result.correct}/{result.total} ({result.percentage:.0f}%)")
    console.print(table)
    best = get_best_results(session.db_path, limit=3)
    console.print("\n[bold]Best:[/bold] " + ", ".join(
        f"{r.player_name or '-'} {r.percentage:.0f}%" for r in best
    ))


def cmd_reset(session: PracticeSession):
    if Confirm.ask("Forget all mastery scores?", default=False):
        reset_mastery(session.db_path)
        session.mastery = {}
        console.print("[green]Mastery reset.[/green]")


def main():
    configure_logging()
    db_path = resolve_db_path()
    init_db(db_path)
    session = PracticeSession(db_path)

    show_welcome()
    if session.settings.has_tables:
        console.print(f"[dim]{session_length(session.settings)} questions per session[/dim]")

    try:
        while True:
            show_menu()
            choice = Prompt.ask("\n[bold]>[/bold]", default="practice").strip().lower()
            try:
                if choice == "practice":
                    cmd_practice(session)
                elif choice == "settings":
                    cmd_settings(session)
                elif choice == "mastery":
                    cmd_mastery(session)
                elif choice == "history":
                    cmd_history(session)
                elif choice == "reset":
                    cmd_reset(session)
                elif choice in ("quit", "exit", "q"):
                    console.print("[dim]Keep practising![/dim]")
                    break
                else:
                    console.print("[red]Unknown command. Try again.[/red]")
            except KeyboardInterrupt:
                if session.mode is Mode.PRACTICE:
                    session.abort()
                elif session.mode is Mode.RESULTS:
                    session.back_to_settings()
                console.print("\n[dim]Use 'quit' to exit.[/dim]")
            except Exception as e:
                console.print(f"[red]Error: {e}[/red]")
    finally:
        session.close()


if __name__ == "__main__":
    main()
