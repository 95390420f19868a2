"""Blocking playback of audio files through the default output device."""

import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger("speech-mcp")


def play_file(path: Union[str, Path]) -> None:
    """Play an audio file and return once playback has finished."""
    import sounddevice as sd
    import soundfile as sf

    data, samplerate = sf.read(str(path), dtype="float32")
    logger.debug(f"Playing {path} ({len(data) / samplerate:.2f}s at {samplerate}Hz)")
    sd.play(data, samplerate)
    sd.wait()
