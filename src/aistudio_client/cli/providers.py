"""Client factory functions for CLI.

Centralizes creation of the chat client and logging setup from environment
variables. Hides configuration details from command implementations.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from ..chat import ChatClient
from ..chat.config import DEFAULT_CHAT_MODEL, DEFAULT_IMAGE_MODEL

# Default console for output
_console = Console()


def configure_logging(level: str | None = None, console: Console | None = None) -> None:
    """Route log records through Rich.

    Args:
        level: Level name; falls back to AISTUDIO_LOG_LEVEL, then WARNING
        console: Console the handler writes to

    Environment variables:
        AISTUDIO_LOG_LEVEL: Log level name (debug, info, warning, error)
    """
    level_name = (level or os.getenv("AISTUDIO_LOG_LEVEL") or "warning").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def get_api_key() -> str | None:
    """Return the API key from the environment.

    Environment variables:
        GEMINI_API_KEY: Google AI Studio API key
        GOOGLE_API_KEY: Used when GEMINI_API_KEY is not set
    """
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")


def get_system_prompt() -> str | None:
    """Return the default system prompt.

    Environment variables:
        AISTUDIO_SYSTEM_PROMPT: System prompt used when none is passed
    """
    return os.getenv("AISTUDIO_SYSTEM_PROMPT")


def get_client() -> ChatClient:
    """Create an uninitialized chat client from environment variables.

    Returns:
        ChatClient configured with the chat and image models

    Environment variables:
        GEMINI_MODEL: Chat model (default: gemini-2.5-flash)
        GEMINI_IMAGE_MODEL: Image model (default: gemini-2.5-flash-image)
    """
    return ChatClient(
        model=os.getenv("GEMINI_MODEL", DEFAULT_CHAT_MODEL),
        image_model=os.getenv("GEMINI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
    )


def require_client(
    api_key: str | None = None,
    system_prompt: str | None = None,
    console: Console | None = None,
) -> ChatClient:
    """Create and initialize a chat client, exiting if that fails.

    Args:
        api_key: Explicit API key (overrides the environment)
        system_prompt: Explicit system prompt (overrides the environment)
        console: Optional Rich console for output

    Returns:
        Initialized ChatClient

    Raises:
        SystemExit: If no usable API key is available
    """
    import typer

    con = console or _console
    client = get_client()
    key = api_key if api_key is not None else get_api_key()
    prompt = system_prompt if system_prompt is not None else get_system_prompt()

    if not client.initialize(key or "", prompt):
        con.print(f"[red]Error: {client.state.last_error}[/red]")
        con.print("[dim]Set GEMINI_API_KEY or pass --api-key[/dim]")
        raise typer.Exit(code=1)
    return client
