"""
Command line interface for speech-mcp.

Running `speech-mcp` with no subcommand starts the MCP server on stdio.
"""

import asyncio
import sys

import click

from .config import load_settings, setup_logging
from .errors import SpeechMCPError, StartupConfigError
from .server import build_components
from .server import main as run_server
from .tools.dispatcher import Ok
from .version import __version__


@click.group(name="speech-mcp", invoke_without_command=True)
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging")
@click.version_option(__version__, prog_name="speech-mcp")
@click.pass_context
def cli(ctx, debug):
    """Speech MCP Server - text-to-speech tools for MCP clients."""
    try:
        settings = load_settings()
    except StartupConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    setup_logging(debug or settings.debug)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings

    if ctx.invoked_subcommand is None:
        run_server(settings)


@cli.command("serve")
@click.pass_context
def serve(ctx):
    """Run the MCP server on stdio."""
    run_server(ctx.obj["settings"])


@cli.command("voices")
@click.pass_context
def voices(ctx):
    """List the voices offered to MCP clients."""
    components = build_components(ctx.obj["settings"])
    try:
        infos = asyncio.run(components.catalog.describe())
    except SpeechMCPError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for info in infos:
        click.echo(f"{info.name:<14} {info.language:<7} {info.gender:<7} {info.grade}")


@cli.command("say")
@click.argument("text")
@click.option("--voice", "-v", default=None, help="Voice name (see `speech-mcp voices`)")
@click.option("--speed", "-s", type=float, default=None, help="Speech rate multiplier (0.5 to 2.0)")
@click.pass_context
def say(ctx, text, voice, speed):
    """Speak TEXT through the system audio."""
    components = build_components(ctx.obj["settings"])
    arguments = {"text": text}
    if voice:
        arguments["voice"] = voice
    if speed is not None:
        arguments["speed"] = speed

    result = asyncio.run(
        components.dispatcher.call_tool("text_to_speech_with_options", arguments)
    )
    if isinstance(result, Ok):
        click.echo(result.text)
    else:
        click.echo(f"Error: {result.message}", err=True)
        sys.exit(1)
