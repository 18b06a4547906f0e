from __future__ import annotations

import importlib
import json

import pytest
import requests

from app.core.errors import DispatchError
from app.services.gateway_client import GENERIC_FAILURE_MESSAGE, GatewayClient

# app.services re-exports a ``gateway_client`` instance that shadows the submodule
# attribute, so resolve the module itself via importlib.
gw_mod = importlib.import_module("app.services.gateway_client")


class FakeResponse:
    def __init__(self, status_code: int, body=None, raw: bytes | None = None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw
        elif body is None:
            self.content = b""
        else:
            self.content = json.dumps(body).encode()

    def json(self):
        return json.loads(self.content)


@pytest.fixture
def posted(monkeypatch):
    """Capture requests.post calls and answer with ``posted.response``."""

    class Recorder:
        response: FakeResponse | Exception = FakeResponse(200)
        calls: list[dict] = []

    recorder = Recorder()
    recorder.calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        recorder.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if isinstance(recorder.response, Exception):
            raise recorder.response
        return recorder.response

    monkeypatch.setattr(gw_mod.requests, "post", fake_post)
    return recorder


def _client(token: str = "secret") -> GatewayClient:
    return GatewayClient("http://gateway.local/functions/v1/", "execute-command", timeout=3, token=token)


def test_sends_command_and_ref_with_bearer(posted):
    assert _client().execute_command("cmd-1", "CMD_ON_01") == {}

    call = posted.calls[0]
    assert call["url"] == "http://gateway.local/functions/v1/execute-command"
    assert call["json"] == {"command_id": "cmd-1", "ref_id": "CMD_ON_01"}
    assert call["headers"]["Authorization"] == "Bearer secret"
    assert call["timeout"] == 3


def test_omits_authorization_without_token(posted):
    _client(token="").execute_command("cmd-1", "CMD_ON_01")
    assert "Authorization" not in posted.calls[0]["headers"]


def test_ack_body_is_returned(posted):
    posted.response = FakeResponse(200, {"ok": True})
    assert _client().execute_command("cmd-1", "CMD_ON_01") == {"ok": True}


def test_non_2xx_uses_structured_error(posted):
    posted.response = FakeResponse(500, {"error": "timeout"})

    with pytest.raises(DispatchError) as excinfo:
        _client().execute_command("cmd-1", "CMD_ON_01")

    assert excinfo.value.message == "timeout"
    assert excinfo.value.status_code == 500


def test_non_2xx_without_error_text_uses_generic_message(posted):
    posted.response = FakeResponse(502, raw=b"<html>Bad Gateway</html>")

    with pytest.raises(DispatchError) as excinfo:
        _client().execute_command("cmd-1", "CMD_ON_01")

    assert excinfo.value.message == GENERIC_FAILURE_MESSAGE


def test_2xx_with_error_payload_is_a_failure(posted):
    posted.response = FakeResponse(200, {"error": "unknown ref_id"})

    with pytest.raises(DispatchError) as excinfo:
        _client().execute_command("cmd-1", "CMD_NOPE")

    assert excinfo.value.message == "unknown ref_id"


def test_network_error_becomes_dispatch_error(posted):
    posted.response = requests.ConnectionError("connection refused")

    with pytest.raises(DispatchError) as excinfo:
        _client().execute_command("cmd-1", "CMD_ON_01")

    assert "connection refused" in excinfo.value.message
    assert excinfo.value.status_code is None
