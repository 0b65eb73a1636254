from .errors import (
    RETRYABLE_ERRORS,
    ExtractionError,
    NetworkError,
    ResolverError,
    SubmissionError,
    TargetValidationError,
)
from .resolution import (
    DirectLink,
    ExtractionOutcome,
    FetchResult,
    NotFound,
    ObfuscatedLink,
    ObfuscationParameters,
    PipelineResult,
)

__all__ = [
    "RETRYABLE_ERRORS",
    "DirectLink",
    "ExtractionError",
    "ExtractionOutcome",
    "FetchResult",
    "NetworkError",
    "NotFound",
    "ObfuscatedLink",
    "ObfuscationParameters",
    "PipelineResult",
    "ResolverError",
    "SubmissionError",
    "TargetValidationError",
]
