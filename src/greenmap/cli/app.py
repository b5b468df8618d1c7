"""greenmap command line: relay server, terminal chat and insight commands."""
import asyncio
import json
import os
from pathlib import Path

import typer
from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ..chat import ChatStreamClient, RelayError
from ..insights import Feedback, InsightService, Report
from .providers import get_analysis_model, get_llm, get_relay_url, get_store, require_llm

load_dotenv()

app = typer.Typer(
    name="greenmap",
    help="GreenMap assistant: GreenBot chat relay and AI insights",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()


@app.command()
def serve(
    host: str = typer.Option(
        None,
        "--host",
        help="Bind address (default: GREENMAP_HOST or 127.0.0.1)"
    ),
    port: int = typer.Option(
        None,
        "--port",
        "-p",
        help="Port (default: GREENMAP_PORT or 8000)"
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error (default: GREENMAP_LOG_LEVEL or info)"
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Also write logs to this file (rotated weekly)"
    ),
):
    """Run the chat relay and insight API."""
    import uvicorn

    from ..server import configure_logging, create_app

    level = (log_level or os.getenv("GREENMAP_LOG_LEVEL", "info")).lower()
    configure_logging(level, log_file)

    llm = get_llm(console)
    api = create_app(llm=llm, analysis_model=get_analysis_model())

    bind_host = host or os.getenv("GREENMAP_HOST", "127.0.0.1")
    bind_port = port or int(os.getenv("GREENMAP_PORT", "8000"))
    console.print(f"[green]GreenMap API on http://{bind_host}:{bind_port}[/green]")
    # log_config=None keeps the loguru handlers installed above
    uvicorn.run(api, host=bind_host, port=bind_port, log_level=level, log_config=None)


@app.command()
def chat(
    message: str = typer.Argument(..., help="Message for GreenBot"),
    url: str = typer.Option(
        None,
        "--url",
        "-u",
        help="Relay URL (default: GREENMAP_RELAY_URL)"
    ),
):
    """Send one message to the relay and print the reply as it streams."""
    async def _chat():
        async with ChatStreamClient(url or get_relay_url()) as client:
            async for fragment in client.stream_reply(message):
                console.print(fragment, end="", markup=False, highlight=False)
        console.print()

    try:
        asyncio.run(_chat())
    except RelayError as e:
        console.print(f"[red]Relay error {e.status_code}: {e.detail}[/red]")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def tui(
    url: str = typer.Option(
        None,
        "--url",
        "-u",
        help="Relay URL (default: GREENMAP_RELAY_URL)"
    ),
    memory: str = typer.Option(
        None,
        "--memory",
        "-m",
        help="Conversation store: memory or sqlite (default: GREENMAP_MEMORY or memory)"
    ),
    memory_path: str = typer.Option(
        None,
        "--memory-path",
        help="SQLite database path for --memory sqlite"
    ),
):
    """Chat with GreenBot in the terminal UI."""
    from ..ui import run_textual_tui

    # Log output would corrupt the Textual screen
    logger.remove()

    try:
        store = get_store(memory, memory_path)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    asyncio.run(run_textual_tui(relay_url=url or get_relay_url(), store=store))


@app.command()
def analyze(
    reports_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="JSON file with a list of reports"
    ),
):
    """Generate an AI analysis of a reports JSON file."""
    async def _analyze():
        reports = [Report.model_validate(r) for r in json.loads(reports_file.read_text(encoding="utf-8"))]
        async with require_llm(console) as llm:
            service = InsightService(llm, analysis_model=get_analysis_model())
            with console.status("[dim]Analyzing reports...[/dim]"):
                result = await service.analyze_reports(reports)
        console.print(Panel(Markdown(result), title=f"Analysis of {len(reports)} reports", border_style="green"))

    try:
        asyncio.run(_analyze())
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def suggest(
    feedback_file: Path | None = typer.Argument(
        None,
        exists=True,
        dir_okay=False,
        help="JSON file with existing feedback (omit for a general suggestion)"
    ),
):
    """Generate an AI feedback suggestion."""
    async def _suggest():
        async with require_llm(console) as llm:
            service = InsightService(llm)
            if feedback_file is None:
                suggestion = await service.suggest_general_feedback()
            else:
                items = json.loads(feedback_file.read_text(encoding="utf-8"))
                suggestion = await service.suggest_feedback([Feedback.model_validate(f) for f in items])

        if suggestion is None:
            console.print("[yellow]The model did not return a valid suggestion.[/yellow]")
            return
        console.print(Panel(suggestion.message, title=suggestion.category.value, border_style="cyan"))

    try:
        asyncio.run(_suggest())
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def news():
    """Fetch the latest environmental news."""
    async def _news():
        async with require_llm(console) as llm:
            with console.status("[dim]Searching the web...[/dim]"):
                articles = await InsightService(llm).fetch_news()

        if not articles:
            console.print("[yellow]No articles found.[/yellow]")
            return

        table = Table(title="Environmental News")
        table.add_column("Date", style="dim")
        table.add_column("Source", style="cyan")
        table.add_column("Title", style="bold")
        table.add_column("URL", style="blue")
        for article in articles:
            table.add_row(article.published_at, article.source, article.title, article.url)
        console.print(table)

    try:
        asyncio.run(_news())
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
