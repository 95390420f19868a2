"""Shared test fixtures and fakes for speech-mcp tests."""

import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

# Add speech_mcp to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent))

from speech_mcp.config import Settings
from speech_mcp.engine.kokoro import describe_voice
from speech_mcp.server import build_components


# Engine order as kokoro-onnx reports it (sorted), mixing graded tiers
ENGINE_VOICES = [
    "af_alloy",
    "af_bella",
    "af_heart",
    "af_nicole",
    "af_sky",
    "am_adam",
    "am_michael",
    "bf_emma",
    "bm_lewis",
    "zz_custom",
]

# The subset above whose grade is in the top seven tiers
GOOD_VOICES = ["af_bella", "af_heart", "af_nicole", "am_michael", "bf_emma"]


class FakeEngine:
    """Stands in for KokoroEngine; records synthesis calls."""

    def __init__(self, voices=None, sample_rate=24000, seconds=0.1):
        self.voice_names = list(voices or ENGINE_VOICES)
        self.sample_rate = sample_rate
        self.samples = np.zeros(int(sample_rate * seconds), dtype=np.float32)
        self.calls = []
        self.error = None

    def voices(self):
        return [describe_voice(name) for name in self.voice_names]

    def synthesize(self, text, voice, speed):
        self.calls.append((text, voice, speed))
        if self.error is not None:
            raise self.error
        return self.samples, self.sample_rate


@pytest.fixture(autouse=True)
def isolate_home_directory(tmp_path, monkeypatch):
    """
    Redirect Path.home() and os.path.expanduser() to a temporary directory.

    Keeps tests from downloading models into, or deleting models from,
    the developer's real ~/.speech-mcp directory.
    """
    fake_home = tmp_path / "home"
    (fake_home / ".speech-mcp" / "models").mkdir(parents=True)

    monkeypatch.setattr("pathlib.Path.home", lambda: fake_home)

    original_expanduser = os.path.expanduser

    def mock_expanduser(path):
        if path.startswith("~"):
            return str(fake_home) + path[1:]
        return original_expanduser(path)

    monkeypatch.setattr("os.path.expanduser", mock_expanduser)

    for key in list(os.environ):
        if key.startswith("SPEECH_MCP_") or key == "HF_TOKEN":
            monkeypatch.delenv(key)

    yield fake_home


@pytest.fixture
def settings(tmp_path):
    """Settings pointing every path into the test's temp directory."""
    return Settings(
        models_dir=tmp_path / "models",
        audio_dir=tmp_path / "audio",
    )


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def engine_factory(fake_engine):
    """An engine factory that succeeds immediately."""
    return AsyncMock(return_value=fake_engine)


@pytest.fixture
def player():
    """Playback primitive that records the files it was asked to play."""
    mock = MagicMock()
    mock.played = []

    def play(path):
        mock.played.append((Path(path), Path(path).exists()))

    mock.side_effect = play
    return mock


@pytest.fixture
def components(settings, engine_factory, player):
    """Fully wired control plane using the fake engine and player."""
    return build_components(settings, factory=engine_factory, player=player, backoff=0)
