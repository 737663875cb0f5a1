from __future__ import annotations

import os

from fastapi.testclient import TestClient

from app.config import get_settings
from app.core.langsmith import configure_langsmith
from app.main import create_app


def test_app_starts_without_langsmith_env(monkeypatch):
    """
    Tracing is optional: the app starts with no LangSmith env at all.
    """
    for name in ("LANGSMITH_TRACING", "LANGSMITH_API_KEY", "LANGSMITH_PROJECT", "LANGSMITH_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    app = create_app()
    with TestClient(app) as client:
        r = client.get("/healthz")
        assert r.status_code == 200
        assert r.json()["ok"] is True


def _clear_tracing_env(monkeypatch):
    # setenv first so the teardown removes anything configure_langsmith exports
    for name in ("LANGCHAIN_TRACING_V2", "LANGCHAIN_PROJECT", "LANGCHAIN_ENDPOINT", "LANGCHAIN_API_KEY"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_langsmith_disabled_leaves_env_alone(monkeypatch):
    monkeypatch.setenv("LANGSMITH_TRACING", "false")
    _clear_tracing_env(monkeypatch)
    get_settings.cache_clear()

    assert configure_langsmith() is False
    assert "LANGCHAIN_TRACING_V2" not in os.environ


def test_langsmith_enabled_exports_tracing_env(monkeypatch):
    monkeypatch.setenv("LANGSMITH_TRACING", "true")
    monkeypatch.setenv("LANGSMITH_PROJECT", "safe-chat-test")
    monkeypatch.delenv("LANGSMITH_API_KEY", raising=False)
    _clear_tracing_env(monkeypatch)
    get_settings.cache_clear()

    assert configure_langsmith() is True
    assert os.environ["LANGCHAIN_TRACING_V2"] == "true"
    assert os.environ["LANGCHAIN_PROJECT"] == "safe-chat-test"
    assert "LANGCHAIN_API_KEY" not in os.environ


def test_healthz_reports_configuration(client):
    body = client.get("/healthz").json()

    assert body["db_configured"] is True
    assert body["signer_configured"] is True
    assert body["rpc_configured"] is True
