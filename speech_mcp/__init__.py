"""
speech-mcp - Text-to-speech tools for Model Context Protocol (MCP) clients

Exposes a local Kokoro speech engine as MCP tools over stdio:
- text_to_speech / text_to_speech_with_options speak text aloud
- list_voices lists the voices worth using
- get_model_status reports whether the engine has finished loading
"""

from .version import __version__

from .config import Settings, load_settings
from .engine import EngineManager, StatusSnapshot
from .errors import (
    EngineInitError,
    MissingArgumentsError,
    SpeechMCPError,
    StartupConfigError,
    SynthesisError,
    UnknownToolError,
    ValidationError,
)
from .synthesis import SynthesisInvoker, SynthesisRequest, SynthesisResult
from .tools import Dispatcher
from .voices import VoiceCatalog

__all__ = [
    "__version__",
    "Settings",
    "load_settings",
    "EngineManager",
    "StatusSnapshot",
    "VoiceCatalog",
    "SynthesisInvoker",
    "SynthesisRequest",
    "SynthesisResult",
    "Dispatcher",
    # Errors
    "SpeechMCPError",
    "StartupConfigError",
    "EngineInitError",
    "ValidationError",
    "MissingArgumentsError",
    "UnknownToolError",
    "SynthesisError",
]
