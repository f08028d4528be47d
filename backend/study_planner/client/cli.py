import asyncio
from typing import List, Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

from study_planner.client.api import DEFAULT_BASE_URL, APIError, StudyPlannerAPI
from study_planner.client.notifications import Level, Notification
from study_planner.client.preferences import PreferenceError, collect_preferences
from study_planner.client.store import SessionStore
from study_planner.client.subjects import derive_subjects
from study_planner.client.workflow import PlanGenerationWorkflow

app = typer.Typer(help="Study Planner CLI - generate and inspect AI study plans")
console = Console()

_STYLES = {
    Level.SUCCESS: "green",
    Level.INFO: "cyan",
    Level.WARNING: "yellow",
    Level.ERROR: "red",
}

ApiUrl = typer.Option(DEFAULT_BASE_URL, envvar="STUDY_PLANNER_API_URL", help="API base URL")
Token = typer.Option(..., envvar="STUDY_PLANNER_TOKEN", help="Bearer token from /auth/login")


class ConsoleNotifier:
    def notify(self, notification: Notification) -> None:
        style = _STYLES[notification.level]
        console.print(f"[{style}]{notification.title}[/{style}]")
        if notification.message:
            console.print(f"  {notification.message}")


def _sessions_table(store: SessionStore) -> Table:
    table = Table(title="Study Sessions")
    table.add_column("Subject", style="cyan")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Status")
    table.add_column("Progress", justify="right")
    table.add_column("Saved")
    for event in store.events:
        start = event.start_time.astimezone()
        end = event.end_time.astimezone()
        table.add_row(
            event.subject,
            start.strftime("%a %Y-%m-%d %H:%M"),
            end.strftime("%H:%M"),
            event.status,
            f"{event.progress}%",
            "[yellow]local only[/yellow]" if event.local_only else "[green]server[/green]",
        )
    return table


@app.command()
def plan(
    subjects: List[str] = typer.Option(..., "--subject", "-s", help="Subject to plan (repeatable)"),
    hours: int = typer.Option(..., help="Study hours per week"),
    weeks: int = typer.Option(4, help="Number of weeks"),
    preference: str = typer.Option("morning", help="morning, afternoon, evening, night or flexible"),
    days: List[str] = typer.Option(
        ["monday", "wednesday", "friday"], "--day", "-d", help="Preferred day (repeatable)"
    ),
    session_length: int = typer.Option(60, help="Minutes per session"),
    break_length: int = typer.Option(15, help="Minutes between sessions"),
    goals: Optional[str] = typer.Option(None, help="Free-form study goals"),
    focus: List[str] = typer.Option([], "--focus", help="Focus area (repeatable)"),
    exam_dates: Optional[str] = typer.Option(None, help="Upcoming exam dates"),
    api_url: str = ApiUrl,
    token: str = Token,
):
    """Replace upcoming sessions with a freshly generated AI study plan"""
    try:
        preferences = collect_preferences(
            subjects,
            hours,
            weeks=weeks,
            preference=preference,
            preferred_days=days,
            session_length=session_length,
            break_length=break_length,
            goals=goals,
            focus_areas=focus,
            exam_dates=exam_dates,
        )
    except (PreferenceError, ValueError) as exc:
        console.print(f"[red]✗[/red] {exc}")
        raise typer.Exit(code=2)

    async def _run() -> SessionStore:
        store = SessionStore()
        async with StudyPlannerAPI(api_url, token) as api:
            workflow = PlanGenerationWorkflow(api, store, ConsoleNotifier())
            await workflow.run(preferences)
        return store

    console.print("[cyan]Generating your study plan...[/cyan]")
    try:
        store = asyncio.run(_run())
    except (APIError, httpx.HTTPError):
        # already shown by the notifier
        raise typer.Exit(code=1)
    console.print(_sessions_table(store))


@app.command()
def sessions(api_url: str = ApiUrl, token: str = Token):
    """List study sessions"""

    async def _load() -> SessionStore:
        store = SessionStore()
        async with StudyPlannerAPI(api_url, token) as api:
            workflow = PlanGenerationWorkflow(api, store, ConsoleNotifier())
            await workflow.refresh()
        return store

    try:
        store = asyncio.run(_load())
    except APIError as exc:
        console.print(f"[red]✗[/red] {exc.message}")
        raise typer.Exit(code=1)
    except httpx.HTTPError as exc:
        console.print(f"[red]✗[/red] Could not reach {api_url}: {exc}")
        raise typer.Exit(code=1)
    if not store.events:
        console.print("[yellow]No study sessions yet.[/yellow]")
        return
    console.print(_sessions_table(store))


@app.command()
def subjects(api_url: str = ApiUrl, token: str = Token):
    """Show subjects with note counts and average session progress"""

    async def _load():
        store = SessionStore()
        async with StudyPlannerAPI(api_url, token) as api:
            counts = {item["name"]: item["documentsCount"] for item in await api.list_subjects()}
            await PlanGenerationWorkflow(api, store, ConsoleNotifier()).refresh()
        return derive_subjects(counts, store.events)

    try:
        rows = asyncio.run(_load())
    except APIError as exc:
        console.print(f"[red]✗[/red] {exc.message}")
        raise typer.Exit(code=1)
    except httpx.HTTPError as exc:
        console.print(f"[red]✗[/red] Could not reach {api_url}: {exc}")
        raise typer.Exit(code=1)

    table = Table(title="Subjects")
    table.add_column("Subject")
    table.add_column("Notes", justify="right")
    table.add_column("Progress", justify="right")
    for subject in rows:
        table.add_row(
            f"[{subject.color}]{subject.name}[/]",
            str(subject.documents_count),
            f"{subject.progress}%",
        )
    console.print(table)


if __name__ == "__main__":
    app()
