"""Resolution error taxonomy."""

from __future__ import annotations


class ResolverError(Exception):
    """Base class for all resolution errors."""


class TargetValidationError(ResolverError):
    """Input is not a recognized Kwik URL.  Never retried."""


class ExtractionError(ResolverError):
    """Neither a link nor obfuscation parameters could be located on a page."""


class NetworkError(ResolverError):
    """Transport failure, or a non-2xx status where a page body was expected."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SubmissionError(ResolverError):
    """The form submission produced neither a redirect nor an embedded location."""


# Errors that count against a stage's retry budget.
RETRYABLE_ERRORS: tuple[type[ResolverError], ...] = (
    ExtractionError,
    NetworkError,
    SubmissionError,
)
