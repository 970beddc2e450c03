"""
Model Gateway Tests
===================
Tests for request building, gateway → direct fallback and response
extraction. All HTTP is faked with httpx.MockTransport; no network.
"""
import asyncio
import json

import httpx
import pytest

from bugscope.core.config import GatewaySettings
from bugscope.core.errors import GatewayError, ResponseParseError
from bugscope.llm.client import ModelGateway, build_parts, build_payload, extract_text
from bugscope.llm.endpoints import API_KEY_HEADER, build_endpoints

SETTINGS = GatewaySettings(account_id="acct", api_key="secret", model="gemini-test")

GATEWAY_URL = (
    "https://gateway.ai.cloudflare.com/v1/acct/bug-analysis/google-ai-studio"
    "/v1beta/models/gemini-test:generateContent"
)
DIRECT_URL = "https://generativelanguage.googleapis.com/v1beta/models/gemini-test:generateContent"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _run(coro):
    return asyncio.run(coro)


def _envelope(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class _Recorder:
    """MockTransport handler that records requests and replays responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _gateway(recorder):
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return ModelGateway(SETTINGS, http_client=client)


def _url_without_query(request):
    return f"{request.url.scheme}://{request.url.host}{request.url.path}"


# ===================================================================
# Request building
# ===================================================================
class TestRequestBuilding:
    def test_text_only_parts(self):
        assert build_parts("Prompt", "System") == [{"text": "System\n\nPrompt"}]

    def test_image_and_video_parts_order(self):
        parts = build_parts("P", "S", image="aGVsbG8=", video_ref="https://v/1.webm")
        assert parts[0] == {"text": "S\n\nP"}
        assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": "aGVsbG8="}}
        assert parts[2] == {"text": "\n\nVideo URL for reference: https://v/1.webm"}

    def test_payload_generation_config(self):
        payload = build_payload([{"text": "x"}])
        assert payload["contents"] == [{"parts": [{"text": "x"}]}]
        assert payload["generationConfig"] == {
            "temperature": 0.3,
            "topP": 0.95,
            "maxOutputTokens": 4096,
        }

    def test_endpoints(self):
        primary, fallback = build_endpoints(SETTINGS)
        assert primary.url == GATEWAY_URL
        assert fallback.url == DIRECT_URL

        _, headers, params = primary.request_target()
        assert headers[API_KEY_HEADER] == "secret"
        assert params == {}

        _, headers, params = fallback.request_target()
        assert API_KEY_HEADER not in headers
        assert params == {"key": "secret"}


class TestExtractText:
    def test_extracts_first_part(self):
        assert extract_text(_envelope("hello")) == "hello"

    @pytest.mark.parametrize("data", [
        {},
        {"candidates": []},
        {"candidates": [{"content": {"parts": []}}]},
        _envelope(""),
        None,
    ])
    def test_missing_text_raises(self, data):
        with pytest.raises(ResponseParseError, match="No response text from Gemini"):
            extract_text(data)


# ===================================================================
# Calls
# ===================================================================
class TestCall:
    def test_primary_success_uses_header_key(self):
        recorder = _Recorder(httpx.Response(200, json=_envelope("ok")))
        text = _run(_gateway(recorder).call("Prompt", "System"))

        assert text == "ok"
        assert len(recorder.requests) == 1
        request = recorder.requests[0]
        assert _url_without_query(request) == GATEWAY_URL
        assert request.headers[API_KEY_HEADER] == "secret"
        assert "key" not in request.url.params
        body = json.loads(request.content)
        assert body["contents"][0]["parts"][0]["text"] == "System\n\nPrompt"

    def test_primary_failure_falls_back_once(self):
        recorder = _Recorder(
            httpx.Response(502, text="bad gateway"),
            httpx.Response(200, json=_envelope("from direct")),
        )
        text = _run(_gateway(recorder).call("Prompt", "System"))

        assert text == "from direct"
        assert len(recorder.requests) == 2
        fallback = recorder.requests[1]
        assert _url_without_query(fallback) == DIRECT_URL
        assert fallback.url.params["key"] == "secret"
        assert API_KEY_HEADER not in fallback.headers
        assert fallback.content == recorder.requests[0].content

    def test_primary_transport_error_falls_back(self):
        recorder = _Recorder(
            httpx.ConnectError("unreachable"),
            httpx.Response(200, json=_envelope("ok")),
        )
        assert _run(_gateway(recorder).call("P", "S")) == "ok"
        assert len(recorder.requests) == 2

    def test_both_failing_raises_gateway_error(self):
        recorder = _Recorder(
            httpx.Response(500, text="primary down"),
            httpx.Response(503, text="direct down"),
        )
        with pytest.raises(GatewayError) as exc_info:
            _run(_gateway(recorder).call("P", "S"))

        assert exc_info.value.status_code == 503
        assert str(exc_info.value) == "Gemini API error: 503 - direct down"
        assert len(recorder.requests) == 2

    def test_fallback_transport_error_raises_gateway_error(self):
        recorder = _Recorder(httpx.Response(500), httpx.ConnectError("unreachable"))
        with pytest.raises(GatewayError) as exc_info:
            _run(_gateway(recorder).call("P", "S"))
        assert exc_info.value.status_code == 0

    def test_no_text_is_parse_error(self):
        recorder = _Recorder(httpx.Response(200, json={"candidates": []}))
        with pytest.raises(ResponseParseError):
            _run(_gateway(recorder).call("P", "S"))

    def test_image_is_sent_inline(self):
        recorder = _Recorder(httpx.Response(200, json=_envelope("ok")))
        _run(_gateway(recorder).call("P", "S", image="aGVsbG8="))
        parts = json.loads(recorder.requests[0].content)["contents"][0]["parts"]
        assert parts[1]["inline_data"]["data"] == "aGVsbG8="

    def test_model_name(self):
        assert ModelGateway(SETTINGS).model_name == "gemini-test"
