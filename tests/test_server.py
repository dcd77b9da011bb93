import asyncio
import json
from typing import Any, Dict, List
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi.testclient import TestClient

from agenttime.agent_core.tools import ToolExecutor, default_registry
from agenttime.integrations import GoogleOAuthClient, TokenStore
from agenttime.server import AgentService, Settings, create_app

from conftest import ScriptedProvider, call, completion, text


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        model_provider="anthropic",
        anthropic_api_key="test-key",
        google_client_id="client-id",
        google_client_secret="client-secret",
        frontend_url="http://localhost:3000",
        calendar_timezone="UTC",
    )


@pytest.fixture
def tokens() -> TokenStore:
    return TokenStore(None)


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider(
        [
            completion(call("log_progress", "p1", message="Starting research"), stop_reason="tool_use"),
            completion(text("All done.")),
        ]
    )


@pytest.fixture
def client(settings: Settings, provider: ScriptedProvider, tokens: TokenStore, executor: ToolExecutor) -> TestClient:
    service = AgentService(settings, provider, tokens, executor, registry=default_registry())
    return TestClient(create_app(settings, service=service))


def read_frames(body: str) -> List[Dict[str, Any]]:
    frames = [frame for frame in body.split("\n\n") if frame]
    assert all(frame.startswith("data: ") for frame in frames)
    return [json.loads(frame[len("data: ") :]) for frame in frames]


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "googleConfigured": True,
        "anthropicConfigured": True,
        "modelProvider": "anthropic",
    }


def test_execute_streams_sse_frames(client: TestClient, provider: ScriptedProvider) -> None:
    response = client.post(
        "/agent/execute",
        json={"task": "Research Python", "agentName": "Scout", "agentRole": "Research Analyst"},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["x-accel-buffering"] == "no"

    frames = read_frames(response.text)
    assert [f["eventType"] for f in frames[:-1]] == ["log"] * (len(frames) - 1)
    assert [f["message"] for f in frames[:-1]] == [
        "Starting task execution...",
        'Agent "Scout" (Research Analyst) is analyzing the task...',
        "Using tool: log_progress",
        "Starting research",
        "All done.",
        "Task execution completed",
    ]
    assert frames[-1]["eventType"] == "complete"
    assert frames[-1]["success"] is True
    assert "error" not in frames[-1]
    assert frames[-1]["timestamp"].endswith("Z")
    assert provider.requests[0]["history"][0].text == "Execute this task: Research Python"


def test_execute_reports_model_failure_in_stream(settings: Settings, tokens: TokenStore, executor: ToolExecutor) -> None:
    service = AgentService(settings, ScriptedProvider(error=RuntimeError("rate limited")), tokens, executor)
    client = TestClient(create_app(settings, service=service))

    response = client.post("/agent/execute", json={"task": "t", "agentName": "A", "agentRole": "Assistant"})
    frames = read_frames(response.text)

    assert response.status_code == 200
    assert frames[-2] == {
        "eventType": "log",
        "message": "Execution failed: rate limited",
        "type": "error",
        "timestamp": frames[-2]["timestamp"],
    }
    assert frames[-1]["success"] is False
    assert frames[-1]["error"] == "rate limited"


def test_execute_rejects_missing_fields(client: TestClient) -> None:
    response = client.post("/agent/execute", json={"task": "t"})

    assert response.status_code == 422


def test_auth_status(client: TestClient, tokens: TokenStore) -> None:
    assert client.get("/auth/status").json() == {"authenticated": False}
    assert client.get("/auth/status", params={"email": "bob@example.com"}).json() == {"authenticated": False}

    asyncio.run(tokens.save("bob@example.com", {"access_token": "a"}, {"email": "bob@example.com", "name": "Bob"}))

    assert client.get("/auth/status", params={"email": "bob@example.com"}).json() == {
        "authenticated": True,
        "email": "bob@example.com",
        "name": "Bob",
        "picture": None,
    }


def test_disconnect(client: TestClient, tokens: TokenStore) -> None:
    asyncio.run(tokens.save("bob@example.com", {"access_token": "a"}))

    assert client.post("/auth/google/disconnect", json={"email": "bob@example.com"}).json() == {"success": True}
    assert client.post("/auth/google/disconnect", json={"email": "bob@example.com"}).json() == {
        "success": False,
        "error": "Not connected",
    }
    assert client.post("/auth/google/disconnect", json={}).json() == {"success": False, "error": "Not connected"}


def test_cors_allows_frontend_origin(client: TestClient) -> None:
    response = client.options(
        "/agent/execute",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
    )

    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MODEL_PROVIDER", raising=False)
    monkeypatch.delenv("MODEL_NAME", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("PORT", raising=False)
    settings = Settings(_env_file=None, calendar_timezone="UTC")

    assert settings.model_provider == "anthropic"
    assert settings.model_name == "claude-sonnet-4-20250514"
    assert settings.port == 3001
    assert settings.log_level == "INFO"


def test_settings_model_defaults_follow_provider() -> None:
    settings = Settings(_env_file=None, model_provider="gemini", model_name=None, gemini_api_key="g", calendar_timezone="UTC")

    assert settings.model_name == "gemini-2.5-flash"
    assert settings.model_configured is True


def test_settings_rejects_unknown_log_level() -> None:
    with pytest.raises(ValueError):
        Settings(_env_file=None, log_level="chatty", calendar_timezone="UTC")


def google_token_handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "oauth2.googleapis.com":
        if parse_qs(request.content.decode("utf-8"))["code"] == ["bad-code"]:
            return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Bad Request"})
        return httpx.Response(200, json={"access_token": "access-1", "refresh_token": "refresh-1", "expires_in": 3600})
    return httpx.Response(200, json={"email": "bob@example.com", "name": "Bob Smith", "picture": "https://pic"})


@pytest.fixture
def oauth_client(settings: Settings, provider: ScriptedProvider, tokens: TokenStore, executor: ToolExecutor) -> TestClient:
    oauth = GoogleOAuthClient(
        "client-id",
        "client-secret",
        "http://localhost:3001/auth/google/callback",
        transport=httpx.MockTransport(google_token_handler),
    )
    service = AgentService(settings, provider, tokens, executor, oauth=oauth)
    return TestClient(create_app(settings, service=service))


def test_google_login_redirects_to_consent(oauth_client: TestClient) -> None:
    response = oauth_client.get("/auth/google", follow_redirects=False)

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    params = parse_qs(location.query)
    assert location.netloc == "accounts.google.com"
    assert params["access_type"] == ["offline"]
    assert params["prompt"] == ["consent"]
    assert "https://www.googleapis.com/auth/gmail.send" in params["scope"][0].split()


def test_google_login_without_oauth_client(client: TestClient) -> None:
    assert client.get("/auth/google", follow_redirects=False).status_code == 503


def test_google_callback_stores_tokens_and_redirects(oauth_client: TestClient, tokens: TokenStore) -> None:
    response = oauth_client.get("/auth/google/callback", params={"code": "good-code"}, follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "http://localhost:3000?auth=success&email=bob%40example.com&name=Bob%20Smith"
    assert tokens.has("bob@example.com")
    assert oauth_client.get("/auth/status", params={"email": "bob@example.com"}).json() == {
        "authenticated": True,
        "email": "bob@example.com",
        "name": "Bob Smith",
        "picture": "https://pic",
    }


def test_google_callback_failure_redirects_with_error(oauth_client: TestClient, tokens: TokenStore) -> None:
    response = oauth_client.get("/auth/google/callback", params={"code": "bad-code"}, follow_redirects=False)

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert parse_qs(location.query) == {"auth": ["error"], "message": ["Token exchange failed: Bad Request"]}
    assert not tokens.has("bob@example.com")


def test_google_callback_reports_denied_consent(oauth_client: TestClient) -> None:
    response = oauth_client.get("/auth/google/callback", params={"error": "access_denied"}, follow_redirects=False)

    assert parse_qs(urlparse(response.headers["location"]).query)["message"] == ["access_denied"]


def test_settings_derive_google_redirect_uri() -> None:
    settings = Settings(_env_file=None, port=8080, calendar_timezone="UTC")

    assert settings.google_redirect_uri == "http://localhost:8080/auth/google/callback"


def test_service_from_settings_wires_oauth_and_tool_timeout(tmp_path) -> None:
    settings = Settings(
        _env_file=None,
        anthropic_api_key="test-key",
        google_client_id="client-id",
        google_client_secret="client-secret",
        token_file=str(tmp_path / "tokens.json"),
        tool_timeout=30.0,
        calendar_timezone="UTC",
    )

    service = AgentService.from_settings(settings)

    assert service.executor.tool_timeout == 30.0
    assert service.oauth is not None
    assert service.oauth.redirect_uri == "http://localhost:3001/auth/google/callback"
