"""
Configuration for speech-mcp.

All settings come from SPEECH_MCP_* environment variables. They are read once
at startup by load_settings() and validated there; an invalid value is a
StartupConfigError and the server refuses to start.
"""

import logging
import os
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlparse

from .errors import StartupConfigError

# Defaults
DEFAULT_VOICE = "af_bella"
DEFAULT_SPEED = 1.0
MIN_SPEED = 0.5
MAX_SPEED = 2.0
MIN_PITCH = -20
MAX_PITCH = 20
MAX_TEXT_LENGTH = 1000

KOKORO_MODEL = "kokoro-v1.0.int8.onnx"
KOKORO_VOICES = "voices-v1.0.bin"
MODEL_BASE_URL = "https://github.com/thewh1teagle/kokoro-onnx/releases/download/model-files-v1.0"

# Engine initialization retry policy
INIT_MAX_ATTEMPTS = 3
INIT_RETRY_BACKOFF = 1.0  # seconds

LOGGER_NAME = "speech-mcp"


def default_models_dir() -> Path:
    """Where model files live unless SPEECH_MCP_MODELS_DIR says otherwise."""
    return Path.home() / ".speech-mcp" / "models"


def env_bool(value: Optional[str], default: bool = False) -> bool:
    """Interpret an environment variable value as a boolean."""
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Validated process configuration."""

    default_voice: str = DEFAULT_VOICE
    default_speed: float = DEFAULT_SPEED
    models_dir: Path = field(default_factory=default_models_dir)
    model_file: str = KOKORO_MODEL
    voices_file: str = KOKORO_VOICES
    model_base_url: str = MODEL_BASE_URL
    access_token: Optional[str] = None
    audio_dir: Path = Path(tempfile.gettempdir())
    keep_audio: bool = False
    debug: bool = False

    @property
    def model_path(self) -> Path:
        return self.models_dir / self.model_file

    @property
    def voices_path(self) -> Path:
        return self.models_dir / self.voices_file

    @property
    def requires_token(self) -> bool:
        """Whether the model host needs an access credential."""
        host = urlparse(self.model_base_url).hostname or ""
        return host == "huggingface.co" or host.endswith(".huggingface.co")


def _parse_speed(raw: Optional[str]) -> float:
    if raw is None or raw.strip() == "":
        return DEFAULT_SPEED
    try:
        speed = float(raw)
    except ValueError:
        raise StartupConfigError(
            f"SPEECH_MCP_DEFAULT_SPEED must be a number, got {raw!r}"
        ) from None
    if not MIN_SPEED <= speed <= MAX_SPEED:
        raise StartupConfigError(
            f"SPEECH_MCP_DEFAULT_SPEED must be between {MIN_SPEED} and {MAX_SPEED}, got {speed}"
        )
    return speed


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment.

    Raises:
        StartupConfigError: if any value is invalid or a required
            credential is missing.
    """
    env = os.environ if environ is None else environ

    default_voice = env.get("SPEECH_MCP_DEFAULT_VOICE", "").strip() or DEFAULT_VOICE
    models_dir = Path(os.path.expanduser(env.get("SPEECH_MCP_MODELS_DIR", "") or str(default_models_dir())))
    audio_dir = Path(os.path.expanduser(env.get("SPEECH_MCP_AUDIO_DIR", "") or tempfile.gettempdir()))
    token = env.get("SPEECH_MCP_HF_TOKEN") or env.get("HF_TOKEN") or None

    settings = Settings(
        default_voice=default_voice,
        default_speed=_parse_speed(env.get("SPEECH_MCP_DEFAULT_SPEED")),
        models_dir=models_dir,
        model_file=env.get("SPEECH_MCP_MODEL", "").strip() or KOKORO_MODEL,
        voices_file=env.get("SPEECH_MCP_VOICES", "").strip() or KOKORO_VOICES,
        model_base_url=(env.get("SPEECH_MCP_MODEL_BASE_URL", "").strip() or MODEL_BASE_URL).rstrip("/"),
        access_token=token,
        audio_dir=audio_dir,
        keep_audio=env_bool(env.get("SPEECH_MCP_KEEP_AUDIO")),
        debug=env_bool(env.get("SPEECH_MCP_DEBUG")),
    )

    if settings.requires_token and not settings.access_token:
        raise StartupConfigError(
            f"Model host {settings.model_base_url} requires an access token. "
            "Set SPEECH_MCP_HF_TOKEN (or HF_TOKEN)."
        )

    return settings


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the speech-mcp logger.

    Everything goes to stderr; stdout belongs to the protocol.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(handler)

    return logger
