"""Static catalog of the tools this server exposes."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from ..config import MAX_PITCH, MAX_SPEED, MAX_TEXT_LENGTH, MIN_PITCH, MIN_SPEED


@dataclass(frozen=True)
class ToolDescriptor:
    """A named tool and the JSON schema of its arguments."""
    name: str
    description: str
    input_schema: Mapping[str, Any] = field(default_factory=dict)

    @property
    def takes_arguments(self) -> bool:
        return bool(self.input_schema.get("properties"))


_TEXT = {
    "type": "string",
    "description": "The text to convert to speech",
    "minLength": 1,
    "maxLength": MAX_TEXT_LENGTH,
}

_VOICE = {
    "type": "string",
    "description": "The voice to use for speech synthesis (e.g. 'af_bella'). Use list_voices to see available options.",
}

_SPEED = {
    "type": "number",
    "description": f"Speech rate multiplier ({MIN_SPEED} to {MAX_SPEED})",
    "minimum": MIN_SPEED,
    "maximum": MAX_SPEED,
}

_PITCH = {
    "type": "number",
    "description": f"Voice pitch adjustment ({MIN_PITCH} to +{MAX_PITCH}). Accepted for compatibility; the current engine does not change pitch.",
    "minimum": MIN_PITCH,
    "maximum": MAX_PITCH,
}

_NO_ARGUMENTS = {"type": "object", "properties": {}, "required": []}


TEXT_TO_SPEECH = ToolDescriptor(
    name="text_to_speech",
    description="Convert text to speech and play it through system audio",
    input_schema={
        "type": "object",
        "properties": {"text": _TEXT, "voice": _VOICE},
        "required": ["text"],
    },
)

TEXT_TO_SPEECH_WITH_OPTIONS = ToolDescriptor(
    name="text_to_speech_with_options",
    description="Convert text to speech with customizable speed and pitch",
    input_schema={
        "type": "object",
        "properties": {"text": _TEXT, "voice": _VOICE, "speed": _SPEED, "pitch": _PITCH},
        "required": ["text"],
    },
)

LIST_VOICES = ToolDescriptor(
    name="list_voices",
    description="List all available voices for text-to-speech",
    input_schema=_NO_ARGUMENTS,
)

GET_MODEL_STATUS = ToolDescriptor(
    name="get_model_status",
    description="Get the current status of the text-to-speech model (initializing, ready or error)",
    input_schema=_NO_ARGUMENTS,
)

TOOLS: Tuple[ToolDescriptor, ...] = (
    TEXT_TO_SPEECH,
    TEXT_TO_SPEECH_WITH_OPTIONS,
    LIST_VOICES,
    GET_MODEL_STATUS,
)

_BY_NAME: Mapping[str, ToolDescriptor] = MappingProxyType({tool.name: tool for tool in TOOLS})


def get_tool(name: str) -> Optional[ToolDescriptor]:
    return _BY_NAME.get(name)


def tool_names() -> Tuple[str, ...]:
    return tuple(_BY_NAME)


def as_dicts() -> Tuple[Dict[str, Any], ...]:
    """Descriptors in their wire form."""
    return tuple(
        {"name": t.name, "description": t.description, "inputSchema": dict(t.input_schema)}
        for t in TOOLS
    )
