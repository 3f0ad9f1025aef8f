"""Exception hierarchy shared across the assistant."""


class AuroraError(Exception):
    """Base class for all assistant errors."""


class CalculationError(AuroraError):
    """An arithmetic expression could not be evaluated."""


class ToolError(AuroraError):
    """A tool adapter failed talking to its external service."""


class ModelError(AuroraError):
    """The language model call failed or returned an unusable payload."""


class RequestCancelledError(AuroraError):
    """A model request was superseded by a newer one before it finished."""

    def __init__(self, message: str = "Request was cancelled") -> None:
        super().__init__(message)


class PersistenceError(AuroraError):
    """Reading from or writing to the chat store failed."""


class SpeechError(AuroraError):
    """Speech playback or recognition could not be completed."""
