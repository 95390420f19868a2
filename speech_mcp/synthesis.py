"""Text-to-speech synthesis followed by local playback."""

import asyncio
import itertools
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .config import Settings
from .engine.lifecycle import EngineManager
from .errors import SynthesisError, ValidationError
from .playback import play_file
from .voices import VoiceCatalog

logger = logging.getLogger("speech-mcp")


@dataclass(frozen=True)
class SynthesisRequest:
    """A validated request to speak some text."""
    text: str
    voice: Optional[str] = None
    speed: Optional[float] = None
    pitch: Optional[float] = None   # Accepted but not applied; Kokoro has no pitch control


@dataclass(frozen=True)
class SynthesisResult:
    """What was actually spoken."""
    path: Path
    voice: str
    speed: float
    sample_rate: int
    duration: float                 # Seconds


def write_wav(path: Path, samples, sample_rate: int) -> None:
    import soundfile as sf

    sf.write(str(path), samples, sample_rate, subtype="PCM_16")


class SynthesisInvoker:
    """Turns a SynthesisRequest into audible speech.

    Synthesis and playback are serialized: the engine session and the
    output device are shared by every request.
    """

    def __init__(
        self,
        manager: EngineManager,
        catalog: VoiceCatalog,
        settings: Settings,
        player: Callable[[Path], None] = play_file,
        writer: Callable[[Path, object, int], None] = write_wav,
    ):
        self._manager = manager
        self._catalog = catalog
        self._settings = settings
        self._player = player
        self._writer = writer
        self._lock = asyncio.Lock()
        self._sequence = itertools.count()

    def _scratch_path(self) -> Path:
        audio_dir = self._settings.audio_dir
        audio_dir.mkdir(parents=True, exist_ok=True)
        return audio_dir / f"speech-{time.time_ns()}-{os.getpid()}-{next(self._sequence)}.wav"

    async def synthesize_and_play(self, request: SynthesisRequest) -> SynthesisResult:
        """Synthesize request.text and play it, returning when playback ends.

        Raises:
            EngineInitError: if the engine could not be loaded.
            ValidationError: if the text is empty or the voice is unknown.
            SynthesisError: if synthesis, the scratch file or playback fails.
        """
        engine = await self._manager.wait_for_ready()

        if not request.text:
            raise ValidationError("Text must not be empty")

        voice = request.voice or self._settings.default_voice
        speed = request.speed if request.speed is not None else self._settings.default_speed
        if request.pitch:
            logger.debug(f"Pitch {request.pitch} requested; pitch adjustment is not supported and is ignored")

        if request.voice and not await self._catalog.contains(request.voice):
            raise ValidationError(
                f"Unknown voice: {request.voice}. Use list_voices to see available options."
            )

        async with self._lock:
            logger.info(f"Synthesizing {len(request.text)} characters with voice={voice} speed={speed}")
            try:
                samples, sample_rate = await asyncio.to_thread(engine.synthesize, request.text, voice, speed)
            except Exception as e:
                raise SynthesisError(f"Speech synthesis failed: {e}") from e

            try:
                path = self._scratch_path()
            except OSError as e:
                raise SynthesisError(f"Could not create audio directory {self._settings.audio_dir}: {e}") from e

            try:
                try:
                    await asyncio.to_thread(self._writer, path, samples, sample_rate)
                except Exception as e:
                    raise SynthesisError(f"Could not write audio file {path}: {e}") from e

                try:
                    await asyncio.to_thread(self._player, path)
                except Exception as e:
                    raise SynthesisError(f"Audio playback failed: {e}") from e
            finally:
                if not self._settings.keep_audio:
                    path.unlink(missing_ok=True)

        duration = len(samples) / sample_rate if sample_rate else 0.0
        logger.info(f"Played {duration:.2f}s of audio")
        return SynthesisResult(
            path=path,
            voice=voice,
            speed=speed,
            sample_rate=sample_rate,
            duration=duration,
        )
