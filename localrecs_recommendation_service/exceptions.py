"""Exceptions raised by the recommendation pipeline."""
import threading
from typing import List, Optional


class RecommendationError(Exception):
    """Base class for recommendation errors."""


class InvalidArgumentError(RecommendationError, ValueError):
    """A malformed input was passed to a pipeline operation."""

    def __init__(self, message: str, argument: Optional[str] = None):
        super().__init__(message)
        self.argument = argument


class MissingArgumentError(InvalidArgumentError):
    """A required input was None."""

    def __init__(self, argument: str):
        super().__init__(f"{argument} must not be None", argument=argument)


class VectorLengthError(InvalidArgumentError):
    """Vectors were empty or of mismatched length."""


class VocabularyIndexError(InvalidArgumentError):
    """A vocabulary index fell outside the target vector."""


class ConfigurationError(InvalidArgumentError):
    """Configuration failed validation."""

    def __init__(self, errors: List[str]):
        super().__init__("Invalid configuration: " + "; ".join(errors), argument="config")
        self.errors = list(errors)


class PipelineCancelledError(RecommendationError):
    """The pipeline was cancelled cooperatively."""

    def __init__(self, phase: str):
        super().__init__(f"Recommendation pipeline cancelled during {phase}")
        self.phase = phase


def require(value, argument: str):
    """Return value, raising MissingArgumentError when it is None."""
    if value is None:
        raise MissingArgumentError(argument)
    return value


def raise_if_cancelled(cancel_event: Optional[threading.Event], phase: str) -> None:
    """Raise PipelineCancelledError if cancel_event has been set."""
    if cancel_event is not None and cancel_event.is_set():
        raise PipelineCancelledError(phase)
