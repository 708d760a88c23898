"""
Chef Jul - CLI Entry Point.

Usage:
    chefjul serve              Run the web API
    chefjul health             Check configuration
    chefjul week               Show the current week id
    chefjul generate WEEK_ID   Generate recipes for a stored meal plan
    chefjul --help             Show help
"""

import asyncio
import json
from datetime import date
from pathlib import Path

import typer
from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.table import Table

app = typer.Typer(
    name="chefjul",
    help="Chef Jul - meal planning assistant with background recipe generation.",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind"),
    port: int = typer.Option(8000, help="Port to listen on"),
    reload: bool = typer.Option(False, help="Reload on code changes (development)"),
) -> None:
    """Run the web API with uvicorn."""
    import uvicorn

    from chefjul.config import settings

    uvicorn.run(
        "chefjul.web.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def health() -> None:
    """Check system health and configuration."""
    from chefjul.config import get_settings

    console.print("\n[bold]Chef Jul Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.chef_env}")
        console.print(f"   Log level: {settings.log_level}")
        console.print(f"   Document store: {settings.document_store}")

        if settings.openai_api_key.startswith("sk-"):
            console.print("✅ OpenAI API key configured")
        else:
            console.print("⚠️  OpenAI API key may be invalid")

        if settings.document_store == "memory":
            console.print("ℹ️  Using in-memory documents (lost on restart)")
        elif settings.supabase_url.startswith("https://") and settings.supabase_service_role_key:
            console.print("✅ Supabase configured")
        else:
            console.print("❌ Supabase URL or service role key missing")
            raise typer.Exit(1)

        console.print("\n[green]All checks passed![/green]")

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)


@app.command()
def week(
    day: str = typer.Option(None, "--date", "-d", help="ISO date (YYYY-MM-DD), defaults to today"),
) -> None:
    """Show the ISO week id used as the meal plan key."""
    from chefjul.weeks import get_current_week_id, get_week_id

    if day is None:
        console.print(get_current_week_id())
        return

    try:
        console.print(get_week_id(date.fromisoformat(day)))
    except ValueError as e:
        console.print(f"[red]Invalid date: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def generate(
    week_id: str = typer.Argument(..., help="Week id, e.g. 2025-W07"),
    user_id: str = typer.Option(None, "--user", "-u", help="User id (defaults to DEV_USER_ID)"),
    plan_file: Path = typer.Option(
        None, "--plan", "-p", exists=True, dir_okay=False,
        help="JSON meal plan to store for the week before generating",
    ),
    log_prompts: bool = typer.Option(False, "--log-prompts", "-l", help="Log all LLM prompts to prompt_logs/"),
) -> None:
    """Generate recipes for a week and wait for the run to finish."""
    from chefjul.config import configure_logging, settings
    from chefjul.errors import ChefJulError
    from chefjul.llm.prompt_logger import enable_prompt_logging, get_session_log_dir

    configure_logging()
    if log_prompts:
        enable_prompt_logging(True)

    user_id = user_id or settings.dev_user_id

    try:
        with Live(Spinner("dots", text="Generating recipes..."), console=console, transient=True):
            result, status = asyncio.run(_run_generation(user_id, week_id, plan_file))
    except ChefJulError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Recipes for {week_id}")
    table.add_column("State")
    table.add_column("Attempted", justify="right")
    table.add_column("Succeeded", justify="right")
    table.add_column("Progress", justify="right")
    table.add_row(
        result.state,
        str(result.attempted),
        str(result.succeeded),
        f"{status.progress}/{status.total}" if status else "-",
    )
    console.print(table)

    if result.error:
        console.print(f"[red]Error: {result.error}[/red]")

    if log_prompts:
        log_dir = get_session_log_dir()
        if log_dir:
            console.print(f"\n[dim]📝 Prompts logged to: {log_dir}[/dim]")

    if result.state == "failed":
        raise typer.Exit(1)


async def _run_generation(user_id: str, week_id: str, plan_file: Path | None):
    from chefjul.background import (
        RecipeGenerator,
        RecipeJobSupervisor,
        get_recipe_generation_status,
        start_recipe_generation,
    )
    from chefjul.config import settings
    from chefjul.db import get_document_store
    from chefjul.planning.meal_plan import parse_meal_plan, save_meal_plan

    store = get_document_store()
    if plan_file is not None:
        raw = json.loads(plan_file.read_text(encoding="utf-8"))
        await save_meal_plan(store, user_id, week_id, parse_meal_plan(raw))

    generator = RecipeGenerator(
        store,
        batch_size=settings.recipe_batch_size,
        batch_delay_seconds=settings.recipe_batch_delay_seconds,
    )
    supervisor = RecipeJobSupervisor()
    await start_recipe_generation(user_id, week_id, generator=generator, supervisor=supervisor)

    job = supervisor.get(user_id, week_id)
    try:
        result = await job.task
    except (KeyboardInterrupt, asyncio.CancelledError):
        await supervisor.shutdown()
        raise

    status = await get_recipe_generation_status(user_id, week_id, store=store)
    return result, status


if __name__ == "__main__":
    app()
