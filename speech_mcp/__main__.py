"""Allow running as `python -m speech_mcp`."""

from .cli import cli

if __name__ == "__main__":
    cli()
