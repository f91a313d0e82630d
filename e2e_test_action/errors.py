"""Exceptions raised by the submission pipeline."""


class ActionError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(ActionError):
    """Raised when configuration or the submitter identity cannot be resolved."""


class ProcessError(ActionError):
    """Raised when an external command exits with a nonzero status."""


class SubmissionError(ActionError):
    """Raised when the bundle upload fails or returns no correlation token."""


class PollError(ActionError):
    """Raised when a status check fails at the transport level."""


class PollTimeoutError(ActionError, TimeoutError):
    """Raised when results are not ready before the polling deadline."""


class FetchError(ActionError):
    """Raised when the results manifest or archive cannot be downloaded."""


class ResultsParseError(ActionError):
    """Raised when the results manifest is malformed."""


class PipelineError(ActionError):
    """Wraps a stage failure with the name of the stage that failed."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
        self.cause = cause
