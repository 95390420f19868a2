"""Voice catalog derived from engine voice metadata."""

import logging
from typing import List

from .engine.kokoro import VoiceInfo
from .engine.lifecycle import EngineManager

logger = logging.getLogger("speech-mcp")

# Overall grade scale, best first
GRADE_SCALE = (
    "A+", "A", "A-",
    "B+", "B", "B-",
    "C+", "C", "C-",
    "D+", "D", "D-",
    "F+", "F", "F-",
)

# Top seven tiers are offered to callers
ALLOWED_GRADES = frozenset(GRADE_SCALE[:7])


class VoiceCatalog:
    """Lists the voices good enough to offer to callers."""

    def __init__(self, manager: EngineManager, allowed_grades=ALLOWED_GRADES):
        self._manager = manager
        self._allowed_grades = frozenset(allowed_grades)

    async def describe(self) -> List[VoiceInfo]:
        """Allowed voices with their metadata, in engine order.

        Raises:
            EngineInitError: if the engine failed to initialize.
        """
        engine = await self._manager.wait_for_ready()
        voices = [v for v in engine.voices() if v.grade in self._allowed_grades]
        logger.debug(f"Voice catalog: {len(voices)} voices pass the grade filter")
        return voices

    async def list_voices(self) -> List[str]:
        return [v.name for v in await self.describe()]

    async def contains(self, name: str) -> bool:
        return name in await self.list_voices()
