"""Speech engine loading and lifecycle."""

from .kokoro import KokoroEngine, VoiceInfo, artifact_paths, load_kokoro_engine
from .lifecycle import (
    EngineManager,
    EngineState,
    Failed,
    Initializing,
    Ready,
    StatusSnapshot,
    Uninitialized,
)

__all__ = [
    "EngineManager",
    "EngineState",
    "Failed",
    "Initializing",
    "KokoroEngine",
    "Ready",
    "StatusSnapshot",
    "Uninitialized",
    "VoiceInfo",
    "artifact_paths",
    "load_kokoro_engine",
]
