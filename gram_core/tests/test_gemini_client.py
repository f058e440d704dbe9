import httpx
import pytest

from gram_core.domain.exceptions import (
    AuthenticationError,
    InvalidRequestError,
    MissingCredentialError,
    TransportError,
)
from gram_core.domain.models import ContentPart, GenerationConfig, GenerationRequest, ToolExchange
from gram_core.providers.gemini_client import GeminiClient
from gram_core.tools.definitions import ToolCall, ToolResult
from gram_core.tools.executor import default_tool_defs


class SettingsStub:
    gemini_api_key = "g-test-key-123"
    http_timeout = 1.0
    gemini_base_url = "https://generativelanguage.googleapis.com/v1beta"


class Resp:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = text

    def json(self):
        return self._payload


def _fake_client(captured, response):
    class Client:
        def __init__(self, *a, **kw):
            captured["client_kwargs"] = kw

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def post(self, url, json=None, headers=None, **kw):
            captured.setdefault("calls", []).append({"url": url, "json": json, "headers": headers})
            if isinstance(response, Exception):
                raise response
            return response

    return Client


def _chat_request(**cfg):
    return GenerationRequest(
        model="gram-chat",
        parts=(ContentPart.from_inline("aW1n", "image/png"), ContentPart.from_text("এটা কী?")),
        config=GenerationConfig(**cfg),
    )


def test_generate_builds_payload(monkeypatch):
    captured = {}
    body = {"candidates": [{"content": {"parts": [{"text": "ধান গাছ"}]}}]}
    monkeypatch.setattr("httpx.Client", _fake_client(captured, Resp(payload=body)))

    raw = GeminiClient(SettingsStub()).generate(
        _chat_request(system_instruction="persona", tools=tuple(default_tool_defs()))
    )
    assert raw == body
    call = captured["calls"][0]
    assert call["url"].endswith("/models/gemini-2.5-flash:generateContent")
    assert call["headers"]["x-goog-api-key"] == "g-test-key-123"
    payload = call["json"]
    assert payload["contents"][0]["role"] == "user"
    assert payload["contents"][0]["parts"][0] == {"inlineData": {"mimeType": "image/png", "data": "aW1n"}}
    assert payload["contents"][0]["parts"][1] == {"text": "এটা কী?"}
    assert payload["systemInstruction"] == {"parts": [{"text": "persona"}]}
    assert payload["generationConfig"]["responseModalities"] == ["TEXT"]
    decl = payload["tools"][0]["functionDeclarations"][0]
    assert decl["name"] == "getWeather"
    assert decl["parameters"]["required"] == ["location"]
    assert decl["parameters"]["properties"]["location"]["type"] == "STRING"


def test_image_request_has_no_system_instruction(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.Client", _fake_client(captured, Resp(payload={})))
    req = GenerationRequest(
        model="gram-image",
        parts=(ContentPart.from_text("একটি ছবি আঁকো"),),
        config=GenerationConfig(modalities=frozenset({"IMAGE"})),
    )
    GeminiClient(SettingsStub()).generate(req)
    payload = captured["calls"][0]["json"]
    assert captured["calls"][0]["url"].endswith("/models/gemini-2.5-flash-image:generateContent")
    assert "systemInstruction" not in payload
    assert "tools" not in payload
    assert payload["generationConfig"]["responseModalities"] == ["IMAGE"]


def test_tool_exchange_serialized_as_extra_turns(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.Client", _fake_client(captured, Resp(payload={})))
    call = ToolCall(id="call_0", name="getWeather", arguments={"location": "ঢাকা"})
    req = GenerationRequest(
        model="gram-image",
        parts=(ContentPart.from_text("ঢাকার আবহাওয়া কেমন?"),),
        config=GenerationConfig(modalities=frozenset({"TEXT", "IMAGE"})),
        tool_exchange=ToolExchange(
            call=call,
            result=ToolResult(call_id="call_0", name="getWeather", content='{"temperature": "32°C"}'),
        ),
    )
    GeminiClient(SettingsStub()).generate(req)
    contents = captured["calls"][0]["json"]["contents"]
    assert [c["role"] for c in contents] == ["user", "model", "user"]
    assert contents[1]["parts"][0]["functionCall"]["name"] == "getWeather"
    response = contents[2]["parts"][0]["functionResponse"]["response"]
    assert response == {"result": {"temperature": "32°C"}}
    assert captured["calls"][0]["json"]["generationConfig"]["responseModalities"] == ["TEXT", "IMAGE"]


def test_missing_credential_makes_no_call(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.Client", _fake_client(captured, Resp()))

    class NoKey(SettingsStub):
        gemini_api_key = ""

    with pytest.raises(MissingCredentialError) as exc:
        GeminiClient(NoKey()).generate(_chat_request())
    assert exc.value.code == "MISSING_API_KEY"
    assert "calls" not in captured
    assert "client_kwargs" not in captured


def test_explicit_api_key_overrides_settings(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.Client", _fake_client(captured, Resp(payload={})))

    class NoKey(SettingsStub):
        gemini_api_key = None

    GeminiClient(NoKey(), api_key="explicit-key-0001").generate(_chat_request())
    assert captured["calls"][0]["headers"]["x-goog-api-key"] == "explicit-key-0001"


@pytest.mark.parametrize(
    "status,text",
    [
        (403, '{"error": {"status": "PERMISSION_DENIED"}}'),
        (401, "unauthenticated"),
        (400, '{"error": {"details": [{"reason": "API_KEY_INVALID"}]}}'),
    ],
)
def test_rejected_key_is_authentication_error(monkeypatch, status, text):
    monkeypatch.setattr("httpx.Client", _fake_client({}, Resp(status_code=status, text=text)))
    with pytest.raises(AuthenticationError) as exc:
        GeminiClient(SettingsStub()).generate(_chat_request())
    assert exc.value.http_status == status


def test_rate_limit_and_server_errors_are_transport_errors(monkeypatch):
    monkeypatch.setattr("httpx.Client", _fake_client({}, Resp(status_code=429, text="quota")))
    with pytest.raises(TransportError) as exc:
        GeminiClient(SettingsStub()).generate(_chat_request())
    assert exc.value.code == "RATE_LIMIT"

    monkeypatch.setattr("httpx.Client", _fake_client({}, Resp(status_code=500, text="boom")))
    with pytest.raises(TransportError) as exc:
        GeminiClient(SettingsStub()).generate(_chat_request())
    assert exc.value.code == "API_ERROR"


def test_network_failure_is_transport_error(monkeypatch):
    monkeypatch.setattr("httpx.Client", _fake_client({}, httpx.ConnectError("no route")))
    with pytest.raises(TransportError) as exc:
        GeminiClient(SettingsStub()).generate(_chat_request())
    assert exc.value.code == "NETWORK_ERROR"


@pytest.mark.parametrize("body", [[], None, "ok"])
def test_non_object_body_is_transport_error(monkeypatch, body):
    class ListResp(Resp):
        def json(self):
            return body

    monkeypatch.setattr("httpx.Client", _fake_client({}, ListResp()))
    with pytest.raises(TransportError) as exc:
        GeminiClient(SettingsStub()).generate(_chat_request())
    assert exc.value.code == "API_ERROR"


def test_unregistered_model_rejected_before_any_call(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.Client", _fake_client(captured, Resp(payload={})))
    req = GenerationRequest(model="gram-video", parts=(ContentPart.from_text("x"),))
    with pytest.raises(InvalidRequestError):
        GeminiClient(SettingsStub()).generate(req)
    assert "calls" not in captured


def test_chat_model_cannot_be_asked_for_images(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.Client", _fake_client(captured, Resp(payload={})))
    with pytest.raises(InvalidRequestError):
        GeminiClient(SettingsStub()).generate(_chat_request(modalities=frozenset({"IMAGE"})))
    assert "calls" not in captured
