"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel

from ..chat import GTTSSpeechEngine, SpeechBridge, TurnRole, run_speech_consumer
from .providers import configure_logging, require_client

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="aistudio-client",
    help="Chat with Google AI Studio models, generate images and synthesize speech",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

API_KEY_OPTION = typer.Option(
    None,
    "--api-key",
    "-k",
    help="Google AI Studio API key (default: GEMINI_API_KEY)"
)
LOG_LEVEL_OPTION = typer.Option(
    None,
    "--log-level",
    "-l",
    help="Log level: debug, info, warning or error (default: AISTUDIO_LOG_LEVEL)"
)


@app.command()
def chat(
    system_prompt: str | None = typer.Option(
        None,
        "--system-prompt",
        "-s",
        help="System prompt sent ahead of the conversation"
    ),
    image_dir: Path = typer.Option(
        Path("."),
        "--image-dir",
        help="Where /image saves generated pictures"
    ),
    api_key: str | None = API_KEY_OPTION,
    log_level: str | None = LOG_LEVEL_OPTION,
):
    """Interactive chat with the model."""
    configure_logging(log_level)

    async def _chat():
        client = require_client(api_key, system_prompt, console)
        engine = GTTSSpeechEngine()
        speaker = asyncio.create_task(run_speech_consumer(
            client.speech,
            engine,
            on_spoken=lambda text, path: console.print(f"[dim]Speech saved to {path}[/dim]"),
        ))
        image_count = 0

        try:
            for turn in client.state.messages:
                console.print(f"[dim]{turn.content}[/dim]")

            console.print("[bold cyan]AI Studio Chat[/bold cyan]")
            console.print("[dim]/image <prompt> generates a picture, /speak reads the last answer aloud[/dim]")
            console.print("[dim]Type 'exit', 'quit', or 'q' to leave[/dim]\n")

            while True:
                try:
                    user_input = await asyncio.to_thread(
                        console.input, "[bold yellow]You:[/bold yellow] "
                    )
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                text = user_input.strip()
                if not text:
                    continue

                if text.lower() in ('exit', 'quit', 'q'):
                    console.print("[dim]Goodbye![/dim]")
                    break

                if text.startswith("/image"):
                    prompt = text[len("/image"):].strip()
                    if not prompt:
                        console.print("[yellow]Usage: /image <prompt>[/yellow]")
                        continue
                    with console.status("[dim]Generating image...[/dim]"):
                        image = await client.generate_image(prompt)
                    if image is None:
                        console.print(f"[red]{client.state.last_error}[/red]\n")
                        continue
                    image_count += 1
                    path = image.save(image_dir / f"image-{image_count}.{image.mime_type.split('/')[-1]}")
                    console.print(f"[green]Image saved to {path} ({image.width}x{image.height})[/green]\n")
                    continue

                if text == "/speak":
                    answers = [t for t in client.state.messages if t.role == TurnRole.ASSISTANT]
                    if not answers:
                        console.print("[yellow]Nothing to speak yet[/yellow]")
                    else:
                        client.speak(answers[-1].content)
                    continue

                with console.status("[dim]Thinking...[/dim]"):
                    reply = await client.send_message(text)

                if client.state.last_error:
                    console.print(f"[red]{client.state.last_error}[/red]\n")
                elif reply is not None:
                    console.print(f"[bold green]AI:[/bold green] {reply.content}\n")
                else:
                    console.print("[dim](no answer)[/dim]\n")
        finally:
            await client.close()
            await speaker

    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        pass


@app.command()
def image(
    prompt: str = typer.Argument(..., help="Description of the image"),
    output: Path = typer.Option(
        Path("image.png"),
        "--output",
        "-o",
        help="File to write the image to"
    ),
    api_key: str | None = API_KEY_OPTION,
    log_level: str | None = LOG_LEVEL_OPTION,
):
    """Generate a single image and save it."""
    configure_logging(log_level)

    async def _image():
        client = require_client(api_key, "", console)
        try:
            with console.status("[dim]Generating image...[/dim]"):
                generated = await client.generate_image(prompt)
        finally:
            await client.close()

        if generated is None:
            console.print(f"[red]{client.state.last_error}[/red]")
            raise typer.Exit(code=1)

        path = generated.save(output)
        console.print(Panel(
            f"{path}\n{generated.width}x{generated.height} {generated.mime_type}",
            title="Image saved",
            border_style="green",
        ))

    asyncio.run(_image())


@app.command()
def speak(
    text: str = typer.Argument(..., help="Text to synthesize"),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for the MP3 file (default: system temp dir)"
    ),
    lang: str | None = typer.Option(
        None,
        "--lang",
        help="Language code (default: current locale)"
    ),
    log_level: str | None = LOG_LEVEL_OPTION,
):
    """Synthesize text to an MP3 file."""
    configure_logging(log_level)

    async def _speak():
        bridge = SpeechBridge()
        if not bridge.speak(text):
            console.print("[yellow]Nothing to speak[/yellow]")
            raise typer.Exit(code=1)
        bridge.close()

        spoken: list[Path] = []
        engine = GTTSSpeechEngine(output_dir=output_dir, lang=lang)
        await run_speech_consumer(bridge, engine, on_spoken=lambda _, path: spoken.append(path))

        if not spoken:
            console.print("[red]Error: speech synthesis failed[/red]")
            raise typer.Exit(code=1)
        console.print(f"[green]Speech saved to {spoken[0]}[/green]")

    asyncio.run(_speak())


@app.command(name="tui")
def tui_command(
    system_prompt: str | None = typer.Option(
        None,
        "--system-prompt",
        "-s",
        help="Prefill for the system prompt field"
    ),
    api_key: str | None = API_KEY_OPTION,
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch interactive TUI chat interface."""
    from ..ui import run_textual_tui
    from .providers import get_api_key, get_client, get_system_prompt

    async def _tui():
        client = get_client()
        try:
            await run_textual_tui(
                client=client,
                api_key=api_key if api_key is not None else get_api_key(),
                system_prompt=system_prompt if system_prompt is not None else get_system_prompt(),
                log_level=log_level,
            )
        finally:
            await client.close()
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
