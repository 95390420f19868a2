#!/usr/bin/env python
"""Speech MCP Server - text-to-speech tools over stdio."""

import asyncio
import functools
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .config import Settings
from .engine.kokoro import artifact_paths, load_kokoro_engine
from .engine.lifecycle import EngineFactory, EngineManager
from .playback import play_file
from .synthesis import SynthesisInvoker
from .tools.dispatcher import Dispatcher, to_content
from .version import __version__
from .voices import VoiceCatalog

logger = logging.getLogger("speech-mcp")


@dataclass
class Components:
    """The wired-up control plane for one process."""
    manager: EngineManager
    catalog: VoiceCatalog
    invoker: SynthesisInvoker
    dispatcher: Dispatcher


def build_components(
    settings: Settings,
    factory: Optional[EngineFactory] = None,
    player: Callable[[Path], None] = play_file,
    backoff: Optional[float] = None,
) -> Components:
    """Construct the manager and everything that depends on it."""
    if factory is None:
        factory = functools.partial(load_kokoro_engine, settings)

    manager_kwargs = {} if backoff is None else {"backoff": backoff}
    manager = EngineManager(factory, cleanup_paths=artifact_paths(settings), **manager_kwargs)
    catalog = VoiceCatalog(manager)
    invoker = SynthesisInvoker(manager, catalog, settings, player=player)
    dispatcher = Dispatcher(manager, catalog, invoker)
    return Components(manager=manager, catalog=catalog, invoker=invoker, dispatcher=dispatcher)


def create_server(dispatcher: Dispatcher) -> Server:
    """Bind the dispatcher to an MCP server."""
    server = Server("speech-mcp", version=__version__)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        logger.debug("Received ListToolsRequest")
        return [
            Tool(name=t.name, description=t.description, inputSchema=dict(t.input_schema))
            for t in dispatcher.list_tools()
        ]

    # Argument checking is done by the dispatcher so that failures come back
    # as {"error": ...} text rather than protocol errors
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> List[TextContent]:
        result = await dispatcher.call_tool(name, arguments)
        return [TextContent(**block) for block in to_content(result)]

    return server


async def serve(settings: Settings) -> None:
    """Start engine loading in the background and serve over stdio."""
    components = build_components(settings)
    components.manager.start_initialization()

    server = create_server(components.dispatcher)
    logger.info("Connecting server to stdio transport...")
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Speech MCP Server running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main(settings: Settings) -> None:
    """Run the Speech MCP server until stdin closes."""
    logger.info(f"Starting Speech MCP Server v{__version__}")
    logger.info(f"Default voice: {settings.default_voice}, default speed: {settings.default_speed}")
    asyncio.run(serve(settings))
