"""
Model Endpoints
===============
Decides where generateContent requests go and how they authenticate.

Routing Strategy:
    1. Always attempt the AI gateway first (API key in the x-goog-api-key header)
    2. On a non-2xx answer → the direct Gemini API (API key as ?key= query param)
    3. On direct failure → the gateway call raises and the caller degrades

There is exactly one substitution per call: no health tracking, no
backoff, no third provider.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Tuple

from bugscope.core.config import GatewaySettings

logger = logging.getLogger(__name__)

AUTH_HEADER = "header"
AUTH_QUERY = "query"

API_KEY_HEADER = "x-goog-api-key"


# ---------------------------------------------------------------------------
# Endpoint Configuration
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class EndpointConfig:
    """One place a generateContent request can be sent."""
    name: str
    base_url: str
    model: str
    api_key: str
    auth: str = AUTH_HEADER

    @property
    def url(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent"

    def request_target(self) -> Tuple[str, Dict[str, str], Dict[str, str]]:
        """
        Return (url, headers, params) for this endpoint.

        The key travels in a header for the gateway and as a query parameter
        for the direct API.
        """
        headers = {"Content-Type": "application/json"}
        params: Dict[str, str] = {}
        if self.auth == AUTH_QUERY:
            params["key"] = self.api_key
        else:
            headers[API_KEY_HEADER] = self.api_key
        return self.url, headers, params


def build_endpoints(settings: GatewaySettings) -> Tuple[EndpointConfig, EndpointConfig]:
    """
    Build the (primary, fallback) endpoint pair from settings.

    Parameters
    ----------
    settings : GatewaySettings
        Validated gateway settings.

    Returns
    -------
    tuple[EndpointConfig, EndpointConfig]
        The gateway endpoint and the direct endpoint.
    """
    gateway = EndpointConfig(
        name="gateway",
        base_url=(
            f"{settings.gateway_base_url}/{settings.account_id}/"
            f"{settings.gateway_id}/google-ai-studio"
        ),
        model=settings.model,
        api_key=settings.api_key,
        auth=AUTH_HEADER,
    )
    direct = EndpointConfig(
        name="direct",
        base_url=settings.direct_base_url,
        model=settings.model,
        api_key=settings.api_key,
        auth=AUTH_QUERY,
    )
    logger.debug("Model endpoints: primary=%s fallback=%s", gateway.url, direct.url)
    return gateway, direct
