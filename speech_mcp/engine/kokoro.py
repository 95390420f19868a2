"""
Kokoro speech engine backed by kokoro-onnx.

The ONNX model and the voices bundle are downloaded on first use from the
kokoro-onnx release assets (or a configured mirror) into the models
directory, then loaded into a single Kokoro instance.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..config import Settings

logger = logging.getLogger("speech-mcp")

DOWNLOAD_CHUNK_SIZE = 1 << 16
# Seconds; only connecting and stalled reads are limited, never the whole transfer
DOWNLOAD_CONNECT_TIMEOUT = 30
DOWNLOAD_STALL_TIMEOUT = 120


@dataclass(frozen=True)
class VoiceInfo:
    """Metadata for one engine voice."""
    name: str
    language: str
    gender: str
    grade: Optional[str] = None   # Overall quality grade, e.g. "A-"


# Overall grades as published with the Kokoro v1.0 voice pack
VOICE_METADATA: Dict[str, VoiceInfo] = {
    info.name: info
    for info in [
        VoiceInfo("af_heart", "en-us", "female", "A"),
        VoiceInfo("af_alloy", "en-us", "female", "C"),
        VoiceInfo("af_aoede", "en-us", "female", "C+"),
        VoiceInfo("af_bella", "en-us", "female", "A-"),
        VoiceInfo("af_jessica", "en-us", "female", "D"),
        VoiceInfo("af_kore", "en-us", "female", "C+"),
        VoiceInfo("af_nicole", "en-us", "female", "B-"),
        VoiceInfo("af_nova", "en-us", "female", "C"),
        VoiceInfo("af_river", "en-us", "female", "D"),
        VoiceInfo("af_sarah", "en-us", "female", "C+"),
        VoiceInfo("af_sky", "en-us", "female", "C-"),
        VoiceInfo("am_adam", "en-us", "male", "F+"),
        VoiceInfo("am_echo", "en-us", "male", "D"),
        VoiceInfo("am_eric", "en-us", "male", "D"),
        VoiceInfo("am_fenrir", "en-us", "male", "C+"),
        VoiceInfo("am_liam", "en-us", "male", "D"),
        VoiceInfo("am_michael", "en-us", "male", "C+"),
        VoiceInfo("am_onyx", "en-us", "male", "D"),
        VoiceInfo("am_puck", "en-us", "male", "C+"),
        VoiceInfo("am_santa", "en-us", "male", "D-"),
        VoiceInfo("bf_alice", "en-gb", "female", "D"),
        VoiceInfo("bf_emma", "en-gb", "female", "B-"),
        VoiceInfo("bf_isabella", "en-gb", "female", "C"),
        VoiceInfo("bf_lily", "en-gb", "female", "D"),
        VoiceInfo("bm_daniel", "en-gb", "male", "D"),
        VoiceInfo("bm_fable", "en-gb", "male", "C"),
        VoiceInfo("bm_george", "en-gb", "male", "C"),
        VoiceInfo("bm_lewis", "en-gb", "male", "D+"),
        VoiceInfo("ff_siwis", "fr-fr", "female", "B-"),
        VoiceInfo("jf_alpha", "ja", "female", "C+"),
    ]
}

# Voice name prefix letter -> espeak language code used by kokoro-onnx
LANGUAGE_BY_PREFIX = {
    "a": "en-us",
    "b": "en-gb",
    "e": "es",
    "f": "fr-fr",
    "h": "hi",
    "i": "it",
    "j": "ja",
    "p": "pt-br",
    "z": "cmn",
}


def describe_voice(name: str) -> VoiceInfo:
    """Return metadata for a voice, ungraded if the voice is not known."""
    if name in VOICE_METADATA:
        return VOICE_METADATA[name]
    language = LANGUAGE_BY_PREFIX.get(name[:1], "en-us")
    gender = {"f": "female", "m": "male"}.get(name[1:2], "unknown")
    return VoiceInfo(name, language, gender)


def artifact_paths(settings: Settings) -> List[Path]:
    """Every on-disk path a failed model load may have left behind."""
    paths = []
    for path in (settings.model_path, settings.voices_path):
        paths.append(path)
        paths.append(path.with_name(path.name + ".part"))
    return paths


async def download_file(url: str, dest: Path, token: Optional[str] = None) -> None:
    """Download url to dest, going through a .part file.

    Raises:
        aiohttp.ClientError: on connection failures or a non-2xx status.
    """
    import aiohttp

    headers = {"Authorization": f"Bearer {token}"} if token else {}
    partial = dest.with_name(dest.name + ".part")
    dest.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Downloading {url} -> {dest}")
    timeout = aiohttp.ClientTimeout(
        total=None, sock_connect=DOWNLOAD_CONNECT_TIMEOUT, sock_read=DOWNLOAD_STALL_TIMEOUT
    )
    async with aiohttp.ClientSession(headers=headers, timeout=timeout) as session:
        async with session.get(url) as response:
            response.raise_for_status()
            with open(partial, "wb") as f:
                async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                    f.write(chunk)
    partial.replace(dest)
    logger.info(f"Downloaded {dest.name} ({dest.stat().st_size} bytes)")


async def ensure_model_files(settings: Settings) -> Tuple[Path, Path]:
    """Make sure the model and voices files exist locally."""
    for path in (settings.model_path, settings.voices_path):
        if not path.exists():
            url = f"{settings.model_base_url}/{path.name}"
            await download_file(url, path, token=settings.access_token)
    return settings.model_path, settings.voices_path


class KokoroEngine:
    """Thin adapter around a loaded kokoro_onnx.Kokoro instance."""

    def __init__(self, kokoro):
        self._kokoro = kokoro

    def voices(self) -> List[VoiceInfo]:
        """Voice metadata in the engine's own order."""
        return [describe_voice(name) for name in self._kokoro.get_voices()]

    def synthesize(self, text: str, voice: str, speed: float) -> Tuple[np.ndarray, int]:
        """Generate mono float32 samples and their sample rate.

        Blocking; call from a worker thread.
        """
        lang = describe_voice(voice).language
        samples, sample_rate = self._kokoro.create(text, voice=voice, speed=speed, lang=lang)
        return samples, sample_rate


async def load_kokoro_engine(settings: Settings) -> KokoroEngine:
    """Download (if needed) and load the Kokoro model."""
    try:
        from kokoro_onnx import Kokoro
    except ImportError:
        raise RuntimeError(
            "kokoro-onnx is not installed. "
            "Install with: pip install kokoro-onnx"
        )

    model_path, voices_path = await ensure_model_files(settings)

    logger.info(f"Loading Kokoro ONNX model from {model_path}")
    kokoro = await asyncio.to_thread(Kokoro, str(model_path), str(voices_path))
    logger.info("Kokoro ONNX model loaded successfully")
    return KokoroEngine(kokoro)
