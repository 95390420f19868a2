"""Exception hierarchy for the speech tool server."""


class SpeechMCPError(Exception):
    """Base class for all speech-mcp errors."""

    kind = "SpeechMCPError"


class StartupConfigError(SpeechMCPError):
    """Raised when the process configuration is invalid.

    This is the only error that is allowed to terminate the server.
    """

    kind = "StartupConfigError"


class EngineInitError(SpeechMCPError):
    """Raised when the speech engine could not be initialized.

    Once raised after the final retry, the same instance is handed to every
    caller that needs the engine until the process restarts.
    """

    kind = "EngineInitError"

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class ValidationError(SpeechMCPError):
    """Raised when tool arguments are missing or out of range."""

    kind = "ValidationError"


class MissingArgumentsError(ValidationError):
    """Raised when a tool that takes arguments is called without any."""

    kind = "MissingArguments"


class UnknownToolError(SpeechMCPError):
    """Raised when a call names a tool that is not registered."""

    kind = "UnknownTool"


class SynthesisError(SpeechMCPError):
    """Raised when synthesis, the scratch file or playback fails."""

    kind = "SynthesisError"
