"""
Model Gateway
=============
Asynchronous client for the generative model's generateContent API.

Request Shape:
    - parts[0]: system prompt + blank line + user prompt (text)
    - parts[1]: optional inline PNG image (base64)
    - parts[-1]: optional video reference, passed as plain text only;
      video bytes are never uploaded
    - generationConfig: temperature 0.3, topP 0.95, maxOutputTokens 4096

Endpoint Fallback:
    - Primary: AI gateway, key in header
    - Fallback: direct API, key in query string
    - Fallback triggers on any non-2xx status or a transport error
    - Both failing raises GatewayError with the final status and body

Response Extraction:
    - candidates[0].content.parts[0].text
    - Missing text raises ResponseParseError (a parse failure, not a
      network failure)
"""
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from bugscope.core.config import GatewaySettings
from bugscope.core.errors import GatewayError, ResponseParseError
from bugscope.llm.endpoints import EndpointConfig, build_endpoints
from bugscope.utils.logging_config import log_stage

logger = logging.getLogger(__name__)

GENERATION_CONFIG = {
    "temperature": 0.3,
    "topP": 0.95,
    "maxOutputTokens": 4096,
}

IMAGE_MIME_TYPE = "image/png"


# ---------------------------------------------------------------------------
# Request / response helpers
# ---------------------------------------------------------------------------
def build_parts(
    prompt: str,
    system_prompt: str,
    image: Optional[str] = None,
    video_ref: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Build the ordered content parts for one request."""
    parts: List[Dict[str, Any]] = [{"text": f"{system_prompt}\n\n{prompt}"}]
    if image:
        parts.append({"inline_data": {"mime_type": IMAGE_MIME_TYPE, "data": image}})
    if video_ref:
        parts.append({"text": f"\n\nVideo URL for reference: {video_ref}"})
    return parts


def build_payload(parts: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "contents": [{"parts": parts}],
        "generationConfig": dict(GENERATION_CONFIG),
    }


def extract_text(data: Any) -> str:
    """
    Pull candidates[0].content.parts[0].text out of a response envelope.

    Raises
    ------
    ResponseParseError
        If the envelope has no text at that path.
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        text = None
    if not isinstance(text, str) or not text:
        logger.error("No response text in model envelope: %s", json.dumps(data)[:500])
        raise ResponseParseError("No response text from Gemini")
    return text


# ---------------------------------------------------------------------------
# Model Gateway
# ---------------------------------------------------------------------------
class ModelGateway:
    """
    Sends multimodal prompts to the model with gateway → direct fallback.

    Usage:
        gateway = ModelGateway(GatewaySettings.from_env())
        text = await gateway.call("Analyze...", "You are...", image=b64)
        await gateway.close()
    """

    def __init__(
        self,
        settings: GatewaySettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings
        self.primary, self.fallback = build_endpoints(settings)
        self._http = http_client
        self._owns_http = http_client is None

    @property
    def model_name(self) -> str:
        return self.settings.model

    async def _get_http(self) -> httpx.AsyncClient:
        """Lazy-initialise the HTTP client."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=httpx.Timeout(self.settings.timeout_seconds))
            self._owns_http = True
        return self._http

    async def close(self) -> None:
        """Close the HTTP client if this gateway created it."""
        if self._owns_http and self._http and not self._http.is_closed:
            await self._http.aclose()
            self._http = None

    async def _post(self, endpoint: EndpointConfig, payload: Dict[str, Any]) -> httpx.Response:
        http = await self._get_http()
        url, headers, params = endpoint.request_target()
        return await http.post(url, json=payload, headers=headers, params=params)

    async def call(
        self,
        prompt: str,
        system_prompt: str,
        image: Optional[str] = None,
        video_ref: Optional[str] = None,
    ) -> str:
        """
        Send one prompt and return the model's text.

        Parameters
        ----------
        prompt : str
            The user prompt.
        system_prompt : str
            Instructions prepended to the prompt.
        image : str or None
            Base64 PNG to attach inline.
        video_ref : str or None
            Video reference, appended as text.

        Returns
        -------
        str
            Text of the first candidate.

        Raises
        ------
        GatewayError
            If both endpoints fail.
        ResponseParseError
            If the successful envelope carries no text.
        """
        payload = build_payload(build_parts(prompt, system_prompt, image, video_ref))
        logger.info(
            "Model call: prompt=%d chars image=%s video=%s",
            len(prompt), f"{len(image) / 1024:.1f}KB" if image else "none", bool(video_ref),
        )

        with log_stage(logger, "gateway_call", model=self.model_name):
            response: Optional[httpx.Response] = None
            try:
                response = await self._post(self.primary, payload)
                if not response.is_success:
                    logger.warning(
                        "Endpoint %s failed (HTTP %d): %s",
                        self.primary.name, response.status_code, response.text[:500],
                    )
            except httpx.TransportError as e:
                logger.warning("Endpoint %s unreachable: %s", self.primary.name, e)

            if response is None or not response.is_success:
                logger.info("Falling back to %s endpoint", self.fallback.name)
                try:
                    response = await self._post(self.fallback, payload)
                except httpx.TransportError as e:
                    raise GatewayError(0, str(e)) from e

            if not response.is_success:
                logger.error(
                    "Endpoint %s failed (HTTP %d), giving up",
                    self.fallback.name, response.status_code,
                )
                raise GatewayError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise ResponseParseError(f"Model envelope is not JSON: {e}") from e

        text = extract_text(data)
        logger.info("Model response: %d chars", len(text))
        return text
