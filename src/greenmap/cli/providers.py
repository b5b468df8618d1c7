"""Environment-driven construction of the objects CLI commands need.

Variables (a ``.env`` file in the working directory is also read):
    LLM_PROVIDER           gemini (default)
    GEMINI_API_KEY         required for any AI feature
    GEMINI_MODEL           chat model (default: gemini-2.5-flash)
    GEMINI_ANALYSIS_MODEL  report analysis model (default: gemini-2.5-pro)
    GREENMAP_RELAY_URL     relay endpoint used by ``chat`` and ``tui``
    GREENMAP_MEMORY        conversation store: memory or sqlite
    GREENMAP_MEMORY_PATH   SQLite file for the sqlite store
"""

import os

import typer
from rich.console import Console

from ..chat import DEFAULT_RELAY_URL
from ..llm import LLMProvider, create_llm_provider
from ..storage import ConversationStore, create_conversation_store

_console = Console()


def get_llm(console: Console | None = None) -> LLMProvider | None:
    """The configured provider, or None (with a printed warning) if AI is disabled."""
    out = console or _console
    name = os.getenv("LLM_PROVIDER", "gemini").lower()

    if name != "gemini":
        out.print(f"[red]Error: Unknown LLM provider: {name}[/red]")
        return None

    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        out.print("[yellow]GEMINI_API_KEY is not set; GreenBot and insights are disabled[/yellow]")
        return None
    return create_llm_provider(name, api_key=api_key, model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"))


def require_llm(console: Console | None = None) -> LLMProvider:
    """Like get_llm, but exit with status 1 when no provider is configured."""
    out = console or _console
    llm = get_llm(out)
    if llm is None:
        out.print("[red]Error: this command needs GEMINI_API_KEY[/red]")
        raise typer.Exit(code=1)
    return llm


def get_analysis_model() -> str:
    return os.getenv("GEMINI_ANALYSIS_MODEL", "gemini-2.5-pro")


def get_relay_url() -> str:
    return os.getenv("GREENMAP_RELAY_URL", DEFAULT_RELAY_URL)


def get_store(backend: str | None = None, path: str | None = None) -> ConversationStore:
    """Conversation store from arguments, falling back to the environment.

    Raises:
        ValueError: Unknown backend
    """
    backend = backend or os.getenv("GREENMAP_MEMORY", "memory")
    path = path or os.getenv("GREENMAP_MEMORY_PATH")
    if backend == "sqlite" and path:
        return create_conversation_store(backend, path=path)
    return create_conversation_store(backend)
