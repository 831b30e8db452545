import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


class _FakeAnalysisService:
    def __init__(self) -> None:
        self.analyses: list[dict] = []

    def start(self, **kwargs):
        _ = kwargs
        return {"ok": True}

    def health(self, *, probe: bool = False):
        return {"ok": True, "source": "analysis_service", "mode": "ready", "connection_ok": True, "probed": probe}

    def validate_config(self):
        return {"ok": True, "is_valid": True, "issues": [], "config": {"api_key": "sk-ab***1234"}}

    def analyze(self, **kwargs):
        self.analyses.append(kwargs)
        return {
            "ok": True,
            "email_subject": "Application Status Update - Position",
            "result": {"success": True, "match_score": 72, "source": "assistant"},
        }


def test_health_endpoint_uses_analysis_service(monkeypatch):
    monkeypatch.setattr("app.main.get_analysis_service", lambda: _FakeAnalysisService())
    res = client.get("/health?probe=true")
    assert res.status_code == 200
    payload = res.json()
    assert payload["ok"] is True
    assert payload["probed"] is True


def test_assistant_config_endpoint(monkeypatch):
    monkeypatch.setattr("app.main.get_analysis_service", lambda: _FakeAnalysisService())
    res = client.get("/api/assistant/config")
    assert res.status_code == 200
    assert res.json()["config"]["api_key"] == "sk-ab***1234"


def test_analysis_endpoint(monkeypatch):
    fake = _FakeAnalysisService()
    monkeypatch.setattr("app.main.get_analysis_service", lambda: fake)
    res = client.post(
        "/api/analysis",
        json={"applicant_text": "cover letter", "job_description": "job", "job_title": "SRE"},
    )
    assert res.status_code == 200
    assert res.json()["result"]["match_score"] == 72
    assert fake.analyses == [{"applicant_text": "cover letter", "job_description": "job", "job_title": "SRE"}]


def test_analysis_endpoint_rejects_empty_text(monkeypatch):
    monkeypatch.setattr("app.main.get_analysis_service", lambda: _FakeAnalysisService())
    res = client.post("/api/analysis", json={"applicant_text": "", "job_description": "job"})
    assert res.status_code == 422


def test_startup_hook_starts_service_with_probe(monkeypatch):
    calls: list[dict] = []

    class _StartupService:
        def start(self, **kwargs):
            calls.append(kwargs)
            return {"ok": True}

    monkeypatch.setattr("app.main.get_analysis_service", lambda: _StartupService())
    from app.main import _init_analysis_service

    _init_analysis_service()
    assert calls == [{"probe_connection": True, "source": "app"}]
