"""Exception hierarchy for the conversion pipeline.

Failures are recovered locally by advancing to the next fallback stage
(secondary model, then the non-AI converter). Only exhaustion of every
fallback reaches the caller, as ``ExtractionFailed`` or ``ConversionFailed``.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

CREDENTIAL_HINT = (
    "Verify your API key is valid and enabled, and that outbound network "
    "access to the model endpoint is allowed."
)


class PdfWordError(Exception):
    """Base class for all pipeline errors."""


class SourceError(PdfWordError):
    """The source URI could not be resolved to document bytes."""


class ModelAttemptError(PdfWordError):
    """A single model attempt failed (transport, timeout, empty response)."""


class SchemaValidationError(ModelAttemptError):
    """A model response did not match the extraction schema."""


@dataclass(frozen=True)
class AttemptFailure:
    """Outcome of one failed model attempt."""

    model: str
    message: str
    error: Optional[BaseException] = None


class ExtractionFailed(PdfWordError):
    """Every configured model attempt failed."""

    def __init__(self, attempts: Sequence[AttemptFailure]):
        self.attempts = list(attempts)
        super().__init__(self._format(self.attempts))

    @staticmethod
    def _format(attempts: Sequence[AttemptFailure]) -> str:
        if not attempts:
            return f"No extraction models are configured. {CREDENTIAL_HINT}"
        parts = [f"Model request failed ({attempts[0].model}): {attempts[0].message}."]
        for attempt in attempts[1:]:
            parts.append(
                f"Fallback model ({attempt.model}) also failed: {attempt.message}."
            )
        parts.append(CREDENTIAL_HINT)
        return " ".join(parts)


class PackagingError(PdfWordError):
    """The document container could not be serialized."""


class FallbackConversionError(PdfWordError):
    """The non-AI converter failed."""


class ConversionFailed(PdfWordError):
    """Both the AI path and the non-AI fallback failed.

    The message carries the extraction failure; the fallback failure is
    kept on ``fallback_error`` for inspection.
    """

    def __init__(
        self,
        extraction_error: ExtractionFailed,
        fallback_error: Optional[BaseException] = None,
    ):
        self.extraction_error = extraction_error
        self.fallback_error = fallback_error
        message = str(extraction_error) or (
            "AI conversion failed and fallback converter was not available."
        )
        super().__init__(message)
