"""Failure taxonomy for the interview question pipeline.

Each error carries an ``ErrorKind``; callers branch on it, never on
message text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    USER_NOT_FOUND = "user_not_found"
    INTERVIEW_NOT_FOUND = "interview_not_found"
    SERVICE_UNAVAILABLE = "service_unavailable"
    EMPTY_RESPONSE = "empty_response"
    MALFORMED_OUTPUT = "malformed_output"
    PERSISTENCE_ERROR = "persistence_error"


class InterviewPipelineError(Exception):
    """Base class for every failure surfaced by the pipeline."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        # Set by the orchestrator to the state the run was in when it failed.
        self.failed_state: Optional[str] = None


class Unauthorized(InterviewPipelineError):
    kind = ErrorKind.UNAUTHORIZED


class UserNotFound(InterviewPipelineError):
    kind = ErrorKind.USER_NOT_FOUND


class InterviewNotFound(InterviewPipelineError):
    kind = ErrorKind.INTERVIEW_NOT_FOUND


class ServiceUnavailable(InterviewPipelineError):
    kind = ErrorKind.SERVICE_UNAVAILABLE


class EmptyResponse(InterviewPipelineError):
    kind = ErrorKind.EMPTY_RESPONSE


class MalformedOutput(InterviewPipelineError):
    kind = ErrorKind.MALFORMED_OUTPUT

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class PersistenceError(InterviewPipelineError):
    kind = ErrorKind.PERSISTENCE_ERROR
