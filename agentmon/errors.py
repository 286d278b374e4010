"""Error taxonomy for the card profile pipeline."""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class PipelineError(RuntimeError):
    """Raised when the pipeline encounters an unrecoverable error."""

    error_type = "generation_error"
    status_code = 500


class ConfigurationError(PipelineError):
    """Required external credentials are absent or still placeholders."""

    error_type = "config_error"
    status_code = 503


class UpstreamFormatError(PipelineError):
    """The text generator returned something that is not a JSON object."""

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class ProfileValidationError(PipelineError):
    """The upstream object parsed but violates the card profile contract.

    ``violations`` holds every problem found, formatted as ``path: message``.
    """

    error_type = "validation_error"

    def __init__(self, violations: List[str], payload: Optional[Dict[str, Any]] = None) -> None:
        summary = "; ".join(violations) if violations else "unknown violation"
        super().__init__(f"Card profile validation failed: {summary}")
        self.violations = list(violations)
        self.payload = payload


def describe_error(exc: BaseException) -> Dict[str, Any]:
    """Build the error envelope handed to an outer surface."""
    message = str(exc) or exc.__class__.__name__
    if isinstance(exc, PipelineError):
        envelope: Dict[str, Any] = {
            "error": message,
            "type": exc.error_type,
            "status": exc.status_code,
        }
        if isinstance(exc, ProfileValidationError):
            envelope["violations"] = exc.violations
        return envelope
    return {"error": message, "type": "generation_error", "status": 500}
