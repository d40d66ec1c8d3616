"""Domain exceptions for the voiceover pipeline and CLI diagnostics.

Every pipeline failure is a `VoiceoverError` subclass carrying an explicit
`kind` tag, so callers discriminate failures by matching on `kind` instead of
probing attributes.
"""

from __future__ import annotations

from enum import Enum

from requests import Response


class ErrorKind(str, Enum):
    """Tag identifying one failure class of the voiceover pipeline."""

    VALIDATION = "validation"
    EMPTY_INPUT = "empty_input"
    RATE_LIMITED = "rate_limited"
    API = "api"
    TRANSPORT = "transport"
    STORAGE = "storage"
    JOB_STATE = "job_state"


class VoiceoverError(RuntimeError):
    """Base class for tagged pipeline failures."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize a tagged failure with optional remote status and user hint."""

        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.hint = hint

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind.value!r}, "
            f"message={self.message!r}, status_code={self.status_code!r})"
        )


class ValidationError(VoiceoverError):
    """Raised for missing or invalid required input. Never retried."""

    kind = ErrorKind.VALIDATION


class EmptyInputError(VoiceoverError):
    """Raised when a script reduces to zero chunks."""

    kind = ErrorKind.EMPTY_INPUT


class RateLimitedError(VoiceoverError):
    """Internal marker for HTTP 429 responses absorbed by the transport."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, response: Response, *, hint: str | None = None) -> None:
        super().__init__(message, status_code=response.status_code, hint=hint)
        self.response = response


class ApiError(VoiceoverError):
    """Raised for any non-success remote response after the retry policy ran."""

    kind = ErrorKind.API

    def __init__(self, message: str, status_code: int, *, hint: str | None = None) -> None:
        super().__init__(message, status_code=status_code, hint=hint)


class TransportError(VoiceoverError):
    """Raised when network-level failures outlast the retry budget."""

    kind = ErrorKind.TRANSPORT


class StorageError(VoiceoverError):
    """Raised when persisting artifacts or history records fails."""

    kind = ErrorKind.STORAGE


class JobStateError(VoiceoverError):
    """Raised for job transitions that the job state machine does not allow."""

    kind = ErrorKind.JOB_STATE


class PipelineStageError(RuntimeError):
    """Raised when a specific CLI-driven stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint
