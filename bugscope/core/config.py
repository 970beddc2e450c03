"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    AI_GATEWAY_ACCOUNT_ID    — Account id of the AI gateway (required)
    AI_GATEWAY_ID            — Gateway name (default: bug-analysis)
    GEMINI_API_KEY           — Generative model API key (required)
    GEMINI_MODEL             — Model id (default: gemini-3-flash-preview)
    AI_GATEWAY_BASE_URL      — Root of the gateway endpoint
    GEMINI_DIRECT_BASE_URL   — Root of the direct (fallback) endpoint
    MODEL_TIMEOUT_SECONDS    — Per HTTP call timeout (default: 60)
    ANALYSIS_TIMEOUT_SECONDS — Default deadline for a whole analysis (0 = none)
    MEDIA_ROOT               — Directory backing internally hosted media
    LOG_LEVEL                — Root log level (default: INFO)
    LOG_DIR                  — Directory for the daily log file (default: logs)

Typed Settings:
    The raw values are read once at import time. GatewaySettings bundles the
    subset the analysis pipeline needs into a typed, immutable struct.
    validate() raises ConfigurationMissingError when a required value is
    absent; the orchestrator turns that into a low-confidence result without
    touching the network.
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from bugscope.core.errors import ConfigurationMissingError

load_dotenv()

AI_GATEWAY_ACCOUNT_ID = os.getenv("AI_GATEWAY_ACCOUNT_ID", "")
AI_GATEWAY_ID = os.getenv("AI_GATEWAY_ID", "bug-analysis")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")
AI_GATEWAY_BASE_URL = os.getenv("AI_GATEWAY_BASE_URL", "https://gateway.ai.cloudflare.com/v1")
GEMINI_DIRECT_BASE_URL = os.getenv(
    "GEMINI_DIRECT_BASE_URL", "https://generativelanguage.googleapis.com"
)

MODEL_TIMEOUT_SECONDS = float(os.getenv("MODEL_TIMEOUT_SECONDS", 60))
ANALYSIS_TIMEOUT_SECONDS = float(os.getenv("ANALYSIS_TIMEOUT_SECONDS", 0))

MEDIA_ROOT = os.getenv("MEDIA_ROOT")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")


# ---------------------------------------------------------------------------
# Typed gateway settings
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class GatewaySettings:
    """Everything the model gateway needs to reach the generative model."""
    account_id: str = ""
    gateway_id: str = "bug-analysis"
    api_key: str = ""
    model: str = "gemini-3-flash-preview"
    gateway_base_url: str = "https://gateway.ai.cloudflare.com/v1"
    direct_base_url: str = "https://generativelanguage.googleapis.com"
    timeout_seconds: float = 60.0
    analysis_timeout_seconds: Optional[float] = None

    @classmethod
    def from_env(cls) -> "GatewaySettings":
        """Build settings from the module-level environment values."""
        return cls(
            account_id=AI_GATEWAY_ACCOUNT_ID or "",
            gateway_id=AI_GATEWAY_ID or "bug-analysis",
            api_key=GEMINI_API_KEY or "",
            model=GEMINI_MODEL,
            gateway_base_url=AI_GATEWAY_BASE_URL.rstrip("/"),
            direct_base_url=GEMINI_DIRECT_BASE_URL.rstrip("/"),
            timeout_seconds=MODEL_TIMEOUT_SECONDS,
            analysis_timeout_seconds=ANALYSIS_TIMEOUT_SECONDS or None,
        )

    def missing_fields(self) -> list[str]:
        """Return the environment variable names of absent required values."""
        missing: list[str] = []
        if not self.account_id.strip():
            missing.append("AI_GATEWAY_ACCOUNT_ID")
        if not self.api_key.strip():
            missing.append("GEMINI_API_KEY")
        return missing

    def validate(self) -> "GatewaySettings":
        """
        Check that the required values are present.

        Returns
        -------
        GatewaySettings
            self, so construction and validation can be chained.

        Raises
        ------
        ConfigurationMissingError
            If the account id or the API key is empty.
        """
        missing = self.missing_fields()
        if missing:
            raise ConfigurationMissingError(missing)
        return self

    @property
    def is_configured(self) -> bool:
        return not self.missing_fields()
