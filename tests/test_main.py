"""Tests for the Flask surface in main.py."""

import json

import pytest

from antigravity_adapter import main
from antigravity_adapter.config import ConfigManager
from antigravity_adapter.format_converter import AntigravityConverter

HEADERS = {"X-Antigravity-Project": "proj-1", "X-Antigravity-Session": "sess-1"}


@pytest.fixture
def make_client(tmp_path, monkeypatch):
    def _make(config_data=None):
        path = tmp_path / "translator.json"
        if config_data is not None:
            path.write_text(json.dumps(config_data), encoding="utf-8")
        manager = ConfigManager(str(path))
        monkeypatch.setattr(main, "config_manager", manager)
        monkeypatch.setattr(main, "converter", AntigravityConverter(manager.config))
        return main.app.test_client()

    return _make


class TestHealth:
    def test_health(self, make_client):
        response = make_client().get("/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "healthy", "version": "1.0.0"}


class TestBuildRequest:
    def test_returns_envelope(self, make_client):
        payload = {
            "model": "gemini-2.5-pro",
            "messages": [{"role": "user", "content": "hi"}],
            "temperature": 0.3,
            "tools": [{"type": "function", "function": {"name": "f", "parameters": {"type": "object"}}}],
        }
        response = make_client().post("/v1/antigravity/request", json=payload, headers=HEADERS)
        assert response.status_code == 200
        body = response.get_json()
        assert body["project"] == "proj-1"
        assert body["request"]["sessionId"] == "sess-1"
        assert body["request"]["generationConfig"]["temperature"] == 0.3
        assert body["request"]["tools"][0]["functionDeclarations"][0]["name"] == "f"

    def test_missing_routing_headers(self, make_client):
        response = make_client().post(
            "/v1/antigravity/request",
            json={"model": "gemini-2.5-pro", "messages": []},
        )
        assert response.status_code == 400
        assert response.get_json()["error"]["type"] == "invalid_request_error"

    def test_missing_model(self, make_client):
        response = make_client().post("/v1/antigravity/request", json={"messages": []}, headers=HEADERS)
        assert response.status_code == 400

    def test_non_json_body(self, make_client):
        response = make_client().post("/v1/antigravity/request", data="nope", headers=HEADERS)
        assert response.status_code == 400


class TestApiKey:
    def test_rejects_missing_key(self, make_client):
        client = make_client({"api_key": "secret"})
        response = client.post("/v1/antigravity/request", json={"model": "m"}, headers=HEADERS)
        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == "Missing API key"

    def test_rejects_wrong_key(self, make_client):
        client = make_client({"api_key": "secret"})
        response = client.post(
            "/v1/antigravity/request",
            json={"model": "m"},
            headers={**HEADERS, "Authorization": "Bearer wrong"},
        )
        assert response.status_code == 401

    def test_accepts_valid_key(self, make_client):
        client = make_client({"api_key": "secret"})
        response = client.post(
            "/v1/antigravity/request?key=secret",
            json={"model": "gemini-2.5-flash", "messages": []},
            headers=HEADERS,
        )
        assert response.status_code == 200


class TestReload:
    def test_reload_picks_up_changes(self, make_client, tmp_path):
        client = make_client({"system_instruction": "old"})
        (tmp_path / "translator.json").write_text(json.dumps({"system_instruction": "new"}), encoding="utf-8")
        assert client.post("/admin/reload").status_code == 200
        response = client.post(
            "/v1/antigravity/request",
            json={"model": "gemini-2.5-flash", "messages": []},
            headers=HEADERS,
        )
        assert response.get_json()["request"]["systemInstruction"]["parts"] == [{"text": "new"}]
