"""Command-line interface for the Support Envelope.

This module provides commands to build canonical envelopes from saved agent
responses, render them for a reply channel, print the envelope schema, run
the sample scenarios, and check the envelope MCP server.

The interface uses Rich for terminal output with colors and panels.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text
from typing_extensions import Annotated

from .client import EnvelopeClient
from .config import EnvelopeConfig
from .envelope import BuildOptions, build_canonical_envelope
from .formatters import FORMATTERS, format_reply
from .models import CanonicalEnvelope, Phase
from .samples import SAMPLE_RESPONSES

app = typer.Typer(
    name="support-envelope",
    help="Canonical response envelopes for the support ticket agent",
    rich_markup_mode="rich",
)

console = Console()

PHASE_STYLES = {
    Phase.CLARIFICATION: "yellow",
    Phase.TICKET_DRAFT: "cyan",
    Phase.FINAL_TICKET: "green",
    Phase.ANALYSIS_ONLY: "magenta",
    Phase.GENERIC: "dim",
}


def _load_response(path: Path):
    try:
        return json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]ERROR: Could not read agent response from {path}: {e}[/red]")
        raise typer.Exit(code=1)


def _check_channel(channel: str):
    if channel not in FORMATTERS:
        console.print(
            f"[red]ERROR: Invalid channel: {channel}. "
            f"Choose one of: {', '.join(sorted(FORMATTERS))}[/red]"
        )
        raise typer.Exit(code=1)


@app.command()
def build(
    response_file: Annotated[Path, typer.Argument(help="JSON file with the raw agent response")],
    run_id: Annotated[
        Optional[str], typer.Option("--run-id", "-r", help="Run identifier")
    ] = None,
    model_id: Annotated[
        Optional[str], typer.Option("--model", "-m", help="Model identifier")
    ] = None,
    workflow: Annotated[
        bool, typer.Option("--workflow", help="Response came from a multi-step workflow")
    ] = False,
):
    """Build the canonical envelope for a saved agent response and print it as JSON."""
    response = _load_response(response_file)
    options = BuildOptions.from_config(
        EnvelopeConfig(),
        run_id=run_id,
        model_id=model_id,
        compiled_from_workflow=workflow,
    )
    envelope = build_canonical_envelope(response, options)
    typer.echo(json.dumps(envelope.to_dict(), indent=2, ensure_ascii=False))


@app.command("format")
def format_command(
    response_file: Annotated[Path, typer.Argument(help="JSON file with the raw agent response")],
    channel: Annotated[
        Optional[str], typer.Option("--channel", "-c", help="Reply channel (telegram, plain)")
    ] = None,
):
    """Build the envelope for a saved agent response and print the channel reply."""
    config = EnvelopeConfig()
    channel = channel or config.default_channel
    _check_channel(channel)

    response = _load_response(response_file)
    envelope = build_canonical_envelope(response, BuildOptions.from_config(config))
    typer.echo(format_reply(envelope, channel))


@app.command()
def schema():
    """Print the canonical envelope JSON Schema."""
    config = EnvelopeConfig()
    console.print(
        f"[bold]Schema version:[/bold] {config.schema_version}  "
        f"[bold]Agent version:[/bold] {config.agent_version}"
    )
    console.print(
        Syntax(
            json.dumps(CanonicalEnvelope.model_json_schema(by_alias=True), indent=2),
            "json",
        )
    )


@app.command()
def demo(
    channel: Annotated[
        str, typer.Option("--channel", "-c", help="Reply channel (telegram, plain)")
    ] = "plain",
):
    """Run the sample agent responses through the builder, one per phase.

    Each scenario shows the classified phase, the display text, the channel
    hints and the reply the chosen channel would send.
    """
    _check_channel(channel)
    config = EnvelopeConfig()

    console.print(
        Panel.fit(
            "[bold yellow]Support Envelope[/bold yellow]\n"
            f"[dim]Schema {config.schema_version} | Agent {config.agent_version} | "
            f"Channel: {channel}[/dim]",
            style="yellow",
        )
    )

    for i, (name, sample) in enumerate(SAMPLE_RESPONSES.items(), 1):
        console.print(f"\n{'='*60}")
        console.print(f"[bold yellow]Demo Scenario #{i}: {sample['description']}[/bold yellow]")
        console.print(f"{'='*60}")

        options = BuildOptions.from_config(config, run_id=f"demo_{name}")
        envelope = build_canonical_envelope(sample["response"], options)
        display_envelope(envelope, channel)


def display_envelope(envelope: CanonicalEnvelope, channel: str):
    """Display an envelope and its channel reply with Rich panels."""
    style = PHASE_STYLES.get(envelope.phase, "dim")
    hints = envelope.channel_hints

    details = (
        f"[bold]Phase:[/bold] {envelope.phase.value}\n"
        f"[bold]Complete:[/bold] {envelope.state.complete}\n"
        f"[bold]Primary:[/bold] {escape(envelope.display.primary_text)}\n"
    )
    if envelope.display.secondary_text:
        details += f"[bold]Secondary:[/bold] {escape(envelope.display.secondary_text)}\n"
    details += (
        f"[bold]Suggested next:[/bold] {', '.join(envelope.display.suggested_next) or 'none'}\n"
        f"[bold]Rich panel:[/bold] {hints.rich_panel}  "
        f"[bold]Stream follow-ups:[/bold] {hints.can_stream_followups}"
    )
    console.print(Panel(details, title="Envelope", style=style))
    console.print(
        Panel(Text(format_reply(envelope, channel)), title=f"{channel.title()} Reply", style="dim")
    )


@app.command()
def health():
    """Start the envelope MCP server and report its health."""
    console.print("Checking envelope server health...")

    async def check_health():
        client = EnvelopeClient()

        success = await client.start()
        if not success:
            console.print("[red]❌ Failed to start envelope server[/red]")
            return False

        try:
            status = await client.get_health_status()
            tool_ids = await client.list_tool_ids()

            console.print("\n[bold]Envelope Server Status:[/bold]")
            for key, value in status.items():
                console.print(f"  {key}: {value}")
            console.print(f"\n[bold]Recognized tools:[/bold] {', '.join(tool_ids)}")
            return True
        finally:
            await client.stop()

    if not asyncio.run(check_health()):
        raise typer.Exit(code=1)


def main():
    """Main entry point for the CLI application."""
    app()


if __name__ == "__main__":
    main()
