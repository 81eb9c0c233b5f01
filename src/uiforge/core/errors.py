"""Exception hierarchy shared by the pipeline stages."""


class UIForgeError(Exception):
    """Base error for the agent pipeline."""


class ModelCallError(UIForgeError):
    """The model provider failed (timeout, provider error, empty candidate)."""

    def __init__(self, message: str, stage: str = "unknown") -> None:
        super().__init__(message)
        self.stage = stage


class PlannerError(UIForgeError):
    """Planner output had no recognisable structure."""


class GenerationError(UIForgeError):
    """Generator produced no usable code."""


class ValidationError(UIForgeError):
    """Inbound request failed validation."""
