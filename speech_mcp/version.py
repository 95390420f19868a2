"""Version information for speech-mcp."""

__version__ = "1.0.0"
