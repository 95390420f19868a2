"""
Routing of tool calls to the speech components.

Every handler returns a tagged result, Ok or Err. The single conversion to
wire content happens in to_content(): errors become a success-shaped text
block holding {"error": message}, so a failing tool never takes the
channel down with it.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union

from jsonschema import Draft7Validator

from ..engine.lifecycle import EngineManager
from ..errors import MissingArgumentsError, SpeechMCPError, UnknownToolError, ValidationError
from ..synthesis import SynthesisInvoker, SynthesisRequest
from ..voices import VoiceCatalog
from . import registry
from .registry import ToolDescriptor

logger = logging.getLogger("speech-mcp")


@dataclass(frozen=True)
class Ok:
    text: str


@dataclass(frozen=True)
class Err:
    kind: str
    message: str

    @classmethod
    def from_exception(cls, error: BaseException) -> "Err":
        kind = getattr(error, "kind", type(error).__name__)
        return cls(kind=kind, message=str(error))


ToolResult = Union[Ok, Err]
Handler = Callable[[Dict[str, Any]], Awaitable[ToolResult]]


def to_content(result: ToolResult) -> List[Dict[str, str]]:
    """Encode a handler result as protocol text content."""
    if isinstance(result, Ok):
        text = result.text
    else:
        text = json.dumps({"error": result.message})
    return [{"type": "text", "text": text}]


def validate_arguments(tool: ToolDescriptor, arguments: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Check arguments against the tool's input schema.

    Raises:
        MissingArgumentsError: if a tool that takes arguments got none.
        ValidationError: if the arguments do not match the schema.
    """
    if arguments is None:
        if tool.takes_arguments:
            raise MissingArgumentsError("No arguments provided")
        return {}

    validator = Draft7Validator(tool.input_schema)
    errors = sorted(validator.iter_errors(arguments), key=lambda e: [str(p) for p in e.path])
    if errors:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in e.path) or 'arguments'}: {e.message}" for e in errors
        )
        raise ValidationError(f"Invalid arguments for {tool.name}: {problems}")
    return dict(arguments)


def _voice_suffix(voice: Optional[str]) -> str:
    return f" using voice: {voice}" if voice else ""


class Dispatcher:
    """Maps list_tools / call_tool messages onto the speech components."""

    def __init__(
        self,
        manager: EngineManager,
        catalog: VoiceCatalog,
        invoker: SynthesisInvoker,
        tools: Tuple[ToolDescriptor, ...] = registry.TOOLS,
    ):
        self._manager = manager
        self._catalog = catalog
        self._invoker = invoker
        self._tools = {tool.name: tool for tool in tools}
        self._handlers: Dict[str, Handler] = {
            "text_to_speech": self._text_to_speech,
            "text_to_speech_with_options": self._text_to_speech_with_options,
            "list_voices": self._list_voices,
            "get_model_status": self._get_model_status,
        }

    def list_tools(self) -> List[ToolDescriptor]:
        return list(self._tools.values())

    async def call_tool(self, name: Optional[str], arguments: Optional[Mapping[str, Any]]) -> ToolResult:
        logger.info(f"Tool call: {name}")
        try:
            tool = self._tools.get(name) if isinstance(name, str) and name else None
            handler = self._handlers.get(name) if tool else None
            if handler is None:
                raise UnknownToolError(f"Unknown tool: {name}")
            args = validate_arguments(tool, arguments)
        except SpeechMCPError as e:
            logger.warning(f"Rejected call to {name}: {e}")
            return Err.from_exception(e)

        try:
            result = await handler(args)
        except Exception as e:
            logger.exception(f"Error executing tool {name}")
            return Err.from_exception(e)

        if isinstance(result, Err):
            logger.error(f"Tool {name} failed ({result.kind}): {result.message}")
        return result

    async def handle_message(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        """Handle one decoded {type, id, method, params} request object."""
        method = message.get("method")
        params = message.get("params") or {}

        if method == "list_tools":
            result: Dict[str, Any] = {"tools": list(registry.as_dicts())}
        elif method == "call_tool":
            if not isinstance(params, Mapping):
                outcome: ToolResult = Err("ValidationError", "Invalid params: expected an object")
            elif params.get("arguments") is not None and not isinstance(params["arguments"], Mapping):
                outcome = Err("ValidationError", "Invalid arguments: expected an object")
            else:
                outcome = await self.call_tool(params.get("name"), params.get("arguments"))
            result = {"content": to_content(outcome)}
        else:
            result = {"content": to_content(Err("UnknownMethod", f"Unknown method: {method}"))}

        return {"type": "response", "id": message.get("id"), "result": result}

    # Handlers

    async def _text_to_speech(self, args: Dict[str, Any]) -> ToolResult:
        request = SynthesisRequest(text=args["text"], voice=args.get("voice"))
        try:
            await self._invoker.synthesize_and_play(request)
        except SpeechMCPError as e:
            return Err.from_exception(e)
        return Ok(f"Successfully generated and played audio{_voice_suffix(request.voice)}")

    async def _text_to_speech_with_options(self, args: Dict[str, Any]) -> ToolResult:
        request = SynthesisRequest(
            text=args["text"],
            voice=args.get("voice"),
            speed=args.get("speed"),
            pitch=args.get("pitch"),
        )
        try:
            spoken = await self._invoker.synthesize_and_play(request)
        except SpeechMCPError as e:
            return Err.from_exception(e)
        pitch = request.pitch if request.pitch is not None else 0
        return Ok(
            f"Successfully generated and played audio{_voice_suffix(request.voice)}"
            f" (speed: {spoken.speed}, pitch: {pitch})"
        )

    async def _list_voices(self, args: Dict[str, Any]) -> ToolResult:
        try:
            voices = await self._catalog.list_voices()
        except SpeechMCPError as e:
            return Err.from_exception(e)
        return Ok("Available voices:\n" + "\n".join(voices))

    async def _get_model_status(self, args: Dict[str, Any]) -> ToolResult:
        return Ok(json.dumps(self._manager.get_status().to_dict()))
