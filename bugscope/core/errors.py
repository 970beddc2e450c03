"""
Analysis Errors
===============
Exception taxonomy for the bug analysis pipeline.

    ConfigurationMissingError — required settings absent; no network attempted
    MediaFetchError           — attachment could not be loaded (always absorbed)
    GatewayError              — primary and fallback endpoints both failed
    ResponseParseError        — model text is not JSON, even after repair

Anything else is an unknown failure and is only caught at the orchestrator
boundary.
"""


class AnalysisError(Exception):
    """Base class for every pipeline error."""


class ConfigurationMissingError(AnalysisError):
    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing configuration: {', '.join(self.missing)}")


class MediaFetchError(AnalysisError):
    """Raised by the media fetch helpers; resolve() converts it to None."""


class GatewayError(AnalysisError):
    """Both model endpoints returned a failure."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Gemini API error: {status_code} - {body}")


class ResponseParseError(AnalysisError):
    """Model output could not be turned into JSON."""
